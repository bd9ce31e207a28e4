"""
Booking Module

This module coordinates the booking transaction for the flight booking
system. It includes:

- Fare calculation per passenger category (adult, child, infant)
- One-way and round-trip booking creation as a single unit of work
- Promo code discounts with conditional usage accounting
- Payment status lifecycle with seat release on cancellation or refund

Key Components:
- fare_service.py: Passenger classification and fare totals
- booking_service.py: Booking creation, lookup, search and payment status changes
- router.py: FastAPI endpoints for bookings
- schemas.py: Pydantic models for booking requests and responses
"""

from .router import router
from .fare_service import FareCalculationService
from .booking_service import BookingService, generate_booking_id
from .schemas import (
    BookingRequest, BookingCreated, BookingSearch, BookingSummary, BookingView, PassengerType,
    PaymentMethod, PaymentStatus, PaymentStatusUpdated
)

__all__ = [
    "router",
    "FareCalculationService",
    "BookingService",
    "generate_booking_id",
    "BookingRequest",
    "BookingCreated",
    "BookingSearch",
    "BookingSummary",
    "BookingView",
    "PassengerType",
    "PaymentMethod",
    "PaymentStatus",
    "PaymentStatusUpdated"
]
