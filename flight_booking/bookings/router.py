from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from flight_booking.database import get_db
from flight_booking.bookings.schemas import (
    BookingCreated, BookingRequest, BookingSearch, BookingSummary, BookingView,
    PaymentStatus, PaymentStatusUpdate, PaymentStatusUpdated
)
from flight_booking.bookings.booking_service import BookingService

router = APIRouter()

@router.post("/", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingRequest,
    db: Session = Depends(get_db)
):
    """Create a one-way or round-trip booking"""

    booking_service = BookingService(db)
    return booking_service.create_booking(request)

@router.get("/", response_model=List[BookingSummary])
def search_bookings(
    booking_id: Optional[str] = Query(None, alias="bookingId", description="Exact booking ID"),
    contact_name: Optional[str] = Query(None, alias="contactName", description="Part of the contact name"),
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus", description="Payment status"),
    from_date: Optional[date] = Query(None, alias="fromDate", description="Booked on or after (YYYY-MM-DD)"),
    to_date: Optional[date] = Query(None, alias="toDate", description="Booked on or before (YYYY-MM-DD)"),
    db: Session = Depends(get_db)
):
    """List bookings, newest first"""

    search = BookingSearch(
        booking_id=booking_id,
        contact_name=contact_name,
        payment_status=payment_status,
        from_date=from_date,
        to_date=to_date
    )
    booking_service = BookingService(db)
    return booking_service.search_bookings(search)

@router.get("/{booking_id}", response_model=BookingView)
def get_booking(
    booking_id: str,
    db: Session = Depends(get_db)
):
    """Get booking details with flights, passengers and payment"""

    booking_service = BookingService(db)
    return booking_service.get_booking(booking_id)

@router.patch("/{booking_id}/payment", response_model=PaymentStatusUpdated)
def update_payment_status(
    booking_id: str,
    update: PaymentStatusUpdate,
    db: Session = Depends(get_db)
):
    """Change the payment status of a booking"""

    booking_service = BookingService(db)
    return booking_service.update_payment_status(booking_id, update.payment_status)
