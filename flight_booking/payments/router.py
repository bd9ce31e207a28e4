from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from flight_booking.database import get_db
from flight_booking.bookings.schemas import PaymentInfo
from flight_booking.payments.schemas import PaymentSubmission, PaymentSubmitted
from flight_booking.payments.service import PaymentService

router = APIRouter()

@router.post("/", response_model=PaymentSubmitted, status_code=status.HTTP_201_CREATED)
def submit_payment(submission: PaymentSubmission, db: Session = Depends(get_db)):
    """Record payment information for a booking"""
    payment = PaymentService(db).submit_payment(
        submission.booking_id, submission.method, submission.transaction_info
    )
    return PaymentSubmitted.model_validate(payment)

@router.get("/{booking_id}", response_model=PaymentInfo)
def get_payment(booking_id: str, db: Session = Depends(get_db)):
    """Get the payment record of a booking"""
    return PaymentService(db).get_payment(booking_id)
