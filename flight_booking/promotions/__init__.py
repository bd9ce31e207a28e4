"""
Promotions Module

Promo code validation, discount application, usage accounting and the
periodic sweep that keeps promotion statuses in line with their validity
windows. Promotion administration (create/edit/delete) is handled outside
this service.
"""

from .router import router
from .service import PromotionService, apply_discount
from .sweeper import PromotionStatusSweeper, promotion_sweeper
from .schemas import DiscountType, PromotionStatus, PromoInfo, PromoValidationResponse

__all__ = [
    "router",
    "PromotionService",
    "apply_discount",
    "PromotionStatusSweeper",
    "promotion_sweeper",
    "DiscountType",
    "PromotionStatus",
    "PromoInfo",
    "PromoValidationResponse"
]
