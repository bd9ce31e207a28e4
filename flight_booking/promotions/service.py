import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from sqlalchemy import or_
from sqlalchemy.orm import Session

from flight_booking.exceptions import PromoExhausted, PromoExpired, PromoNotFound, PromoNotYetValid
from flight_booking.models import Promotion
from flight_booking.promotions.schemas import DiscountType, PromotionStatus, PromotionSweepResult

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def apply_discount(
    amount: Union[Decimal, int, float],
    kind: Union[DiscountType, str],
    magnitude: Union[Decimal, int, float]
) -> Decimal:
    """Apply a percent or fixed discount, never going below zero"""
    amount = Decimal(str(amount))
    magnitude = Decimal(str(magnitude))
    kind = DiscountType(kind)

    if kind == DiscountType.PERCENT:
        discounted = amount * (Decimal("1") - magnitude / Decimal("100"))
    else:
        discounted = amount - magnitude

    return max(Decimal("0"), discounted).quantize(CENTS, rounding=ROUND_HALF_UP)


class PromotionService:
    """Validation, usage accounting and status upkeep for promo codes"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_code(self, code: str) -> Optional[Promotion]:
        return self.db.query(Promotion).filter(Promotion.code == code).first()

    def validate(self, code: str, now: Optional[datetime] = None) -> Promotion:
        """Return the promotion behind ``code`` or raise the matching PromoInvalid error"""
        now = now or datetime.now()
        promo = self.get_by_code(code)

        if not promo or promo.status == PromotionStatus.INACTIVE.value:
            raise PromoNotFound(code)

        # Advisory only; record_usage re-checks the cap atomically
        if promo.usage_limit is not None and promo.used_count >= promo.usage_limit:
            raise PromoExhausted(code)

        if promo.valid_from and now < promo.valid_from:
            raise PromoNotYetValid(code)

        if promo.valid_to and now > promo.valid_to:
            raise PromoExpired(code)

        return promo

    def apply(self, promo: Promotion, amount: Decimal) -> Decimal:
        return apply_discount(amount, promo.discount_type, promo.discount_value)

    def record_usage(self, promo_id: int) -> bool:
        """Increment used_count unless the cap has been reached in the meantime"""
        updated = self.db.query(Promotion).filter(
            Promotion.promo_id == promo_id,
            or_(Promotion.usage_limit.is_(None), Promotion.used_count < Promotion.usage_limit)
        ).update(
            {Promotion.used_count: Promotion.used_count + 1},
            synchronize_session=False
        )

        if updated:
            logger.info(f"Promotion {promo_id} usage recorded")
        else:
            logger.warning(f"Promotion {promo_id} usage not recorded: cap reached or promotion missing")
        return bool(updated)

    def refresh_statuses(self, now: Optional[datetime] = None) -> PromotionSweepResult:
        """Derive expired/active statuses from the validity windows"""
        now = now or datetime.now()

        expired = self.db.query(Promotion).filter(
            Promotion.valid_to.isnot(None),
            Promotion.valid_to < now,
            Promotion.status.notin_([PromotionStatus.EXPIRED.value, PromotionStatus.INACTIVE.value])
        ).update({Promotion.status: PromotionStatus.EXPIRED.value}, synchronize_session=False)

        activated = self.db.query(Promotion).filter(
            Promotion.status == PromotionStatus.SCHEDULED.value,
            or_(Promotion.valid_from.is_(None), Promotion.valid_from <= now),
            or_(Promotion.valid_to.is_(None), Promotion.valid_to >= now)
        ).update({Promotion.status: PromotionStatus.ACTIVE.value}, synchronize_session=False)

        self.db.commit()

        if expired or activated:
            logger.info(f"Promotion statuses refreshed: {expired} expired, {activated} activated")
        return PromotionSweepResult(expired=expired, activated=activated)
