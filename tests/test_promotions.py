import asyncio
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from flight_booking.exceptions import PromoExhausted, PromoExpired, PromoNotFound, PromoNotYetValid
from flight_booking.models import Promotion
from flight_booking.promotions.service import PromotionService, apply_discount
from flight_booking.promotions.sweeper import PromotionStatusSweeper

from conftest import add_promotion


def test_apply_discount_examples():
    assert apply_discount(1000000, "percent", 25) == Decimal("750000")
    assert apply_discount(1000000, "fixed", 200000) == Decimal("800000")
    assert apply_discount(100000, "fixed", 200000) == Decimal("0")


def test_validate_returns_active_promotion(db):
    add_promotion(db, code="SALE25")
    promo = PromotionService(db).validate("SALE25")
    assert promo.discount_value == Decimal("25")


def test_validate_rejection_reasons(db):
    now = datetime.now()
    add_promotion(db, code="OFF", status="inactive")
    add_promotion(db, code="FULL", usage_limit=2, used_count=2)
    add_promotion(db, code="SOON", valid_from=now + timedelta(days=2))
    add_promotion(db, code="OLD", valid_from=now - timedelta(days=10), valid_to=now - timedelta(days=1))
    service = PromotionService(db)

    with pytest.raises(PromoNotFound):
        service.validate("MISSING")
    with pytest.raises(PromoNotFound):
        service.validate("OFF")
    with pytest.raises(PromoExhausted):
        service.validate("FULL")
    with pytest.raises(PromoNotYetValid):
        service.validate("SOON")
    with pytest.raises(PromoExpired):
        service.validate("OLD")


def test_record_usage_respects_cap(db):
    promo = add_promotion(db, code="ONCE", usage_limit=1)
    service = PromotionService(db)

    assert service.record_usage(promo.promo_id)
    assert not service.record_usage(promo.promo_id)
    db.commit()
    db.refresh(promo)
    assert promo.used_count == 1


def test_record_usage_uncapped(db):
    promo = add_promotion(db, code="OPEN", usage_limit=None)
    service = PromotionService(db)
    for _ in range(3):
        assert service.record_usage(promo.promo_id)
    db.commit()
    db.refresh(promo)
    assert promo.used_count == 3


def test_refresh_statuses_expires_and_activates(db):
    now = datetime.now()
    add_promotion(db, code="PAST", valid_from=now - timedelta(days=5), valid_to=now - timedelta(days=1))
    add_promotion(db, code="LIVE", status="scheduled")
    add_promotion(db, code="LATER", status="scheduled", valid_from=now + timedelta(days=3))
    add_promotion(db, code="PAUSED", status="inactive", valid_to=now - timedelta(days=1))

    result = PromotionService(db).refresh_statuses(now)

    assert result.expired == 1
    assert result.activated == 1
    statuses = {p.code: p.status for p in db.query(Promotion).all()}
    assert statuses == {"PAST": "expired", "LIVE": "active", "LATER": "scheduled", "PAUSED": "inactive"}


def test_sweeper_runs_until_stopped(session_factory):
    with session_factory() as session:
        now = datetime.now()
        add_promotion(session, code="PAST", valid_from=now - timedelta(days=5), valid_to=now - timedelta(days=1))

    sweeper = PromotionStatusSweeper(session_factory=session_factory, interval_seconds=3600)

    async def run_briefly():
        sweeper.start()
        for _ in range(50):
            if sweeper.last_result is not None:
                break
            await asyncio.sleep(0.1)
        await sweeper.stop()

    asyncio.run(run_briefly())

    with session_factory() as session:
        assert session.query(Promotion).filter(Promotion.code == "PAST").one().status == "expired"
