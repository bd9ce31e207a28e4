from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

class DiscountType(str, Enum):
    """Promotion discount kind"""
    PERCENT = "percent"
    FIXED = "fixed"

class PromotionStatus(str, Enum):
    """Promotion status enumeration"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    SCHEDULED = "scheduled"
    EXPIRED = "expired"

class PromoValidationRequest(BaseModel):
    code: str = Field(..., min_length=1)

class PromoInfo(BaseModel):
    code: str
    name: str
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: Decimal
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    status: PromotionStatus

    class Config:
        from_attributes = True

class PromoValidationResponse(BaseModel):
    valid: bool = True
    promo: PromoInfo

class PromotionSweepResult(BaseModel):
    expired: int
    activated: int
