import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from flight_booking.bookings.schemas import PaymentInfo, PaymentMethod, PaymentStatus
from flight_booking.exceptions import (
    BookingNotFound, InvalidRequest, PaymentAlreadyRecorded, PaymentNotFound
)
from flight_booking.models import Booking, Payment

logger = logging.getLogger(__name__)

class PaymentService:
    """Payment records attached to bookings"""

    def __init__(self, db: Session):
        self.db = db

    def submit_payment(
        self,
        booking_id: str,
        method: Optional[str],
        transaction_info: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Payment:
        """Record how a booking is being paid and mark it pending"""
        if method not in {m.value for m in PaymentMethod}:
            raise InvalidRequest(
                "Invalid payment method",
                method=method,
                allowed_methods=[m.value for m in PaymentMethod]
            )

        booking = self.db.query(Booking).filter(Booking.booking_id == booking_id).first()
        if not booking:
            raise BookingNotFound(booking_id)

        if booking.payment:
            raise PaymentAlreadyRecorded(booking_id)

        payment = Payment(
            booking_id=booking_id,
            method=method,
            transaction_info=transaction_info,
            payment_date=now or datetime.now()
        )
        self.db.add(payment)

        self.db.query(Booking).filter(
            Booking.booking_id == booking_id,
            Booking.payment_status == PaymentStatus.UNPAID.value
        ).update(
            {Booking.payment_status: PaymentStatus.PENDING.value},
            synchronize_session=False
        )

        try:
            self.db.commit()
        except IntegrityError as e:
            # Another request recorded the payment first
            self.db.rollback()
            raise PaymentAlreadyRecorded(booking_id) from e

        self.db.refresh(payment)
        logger.info(f"Payment via {method} recorded for booking {booking_id}")
        return payment

    def get_payment(self, booking_id: str) -> PaymentInfo:
        booking = self.db.query(Booking).filter(Booking.booking_id == booking_id).first()
        if not booking:
            raise BookingNotFound(booking_id)
        if not booking.payment:
            raise PaymentNotFound(booking_id)
        return PaymentInfo.model_validate(booking.payment)
