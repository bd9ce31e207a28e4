"""
Error taxonomy for the booking system.

Every error carries a machine-readable ``kind``, a human ``message`` and
optional structured ``details``. The API layer renders them uniformly; the
services raise them without knowing about HTTP beyond the status hint.
"""

from typing import Any, Dict, List, Optional


class BookingSystemError(Exception):
    """Base class for all recoverable booking-system errors"""

    kind = "booking_error"
    status_code = 400

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error": self.kind, "detail": self.message}
        payload.update(self.details)
        return payload


class InvalidRequest(BookingSystemError):
    kind = "invalid_request"

    def __init__(self, message: str = "Missing required booking information",
                 missing_fields: Optional[List[str]] = None, **details: Any):
        if missing_fields:
            details["missing_fields"] = missing_fields
        super().__init__(message, **details)
        self.missing_fields = missing_fields or []


class InvalidStatus(BookingSystemError):
    kind = "invalid_status"


# Not found
class NotFound(BookingSystemError):
    kind = "not_found"
    status_code = 404


class FlightNotFound(NotFound):
    kind = "flight_not_found"

    def __init__(self, reference: Any, leg: Optional[str] = None):
        label = f"{leg.capitalize()} flight" if leg else "Flight"
        details = {"provided_id": str(reference)}
        if leg:
            details["leg"] = leg
            details["lookup_type"] = "database_id" if str(reference).isdigit() else "display_id"
        super().__init__(f"{label} not found", **details)
        self.reference = reference
        self.leg = leg


class BookingNotFound(NotFound):
    kind = "booking_not_found"

    def __init__(self, booking_id: str):
        super().__init__("Booking not found", booking_id=booking_id)
        self.booking_id = booking_id


class PaymentNotFound(NotFound):
    kind = "payment_not_found"

    def __init__(self, booking_id: str):
        super().__init__("Payment information not found", booking_id=booking_id)


# Promotions
class PromoInvalid(NotFound):
    kind = "promo_invalid"

    def __init__(self, code: str, message: str):
        super().__init__(message, code=code)
        self.code = code


class PromoNotFound(PromoInvalid):
    kind = "promo_not_found"

    def __init__(self, code: str):
        super().__init__(code, "Invalid or inactive promotion code")


class PromoExhausted(PromoInvalid):
    kind = "promo_exhausted"

    def __init__(self, code: str):
        super().__init__(code, "Promotion code usage limit reached")


class PromoNotYetValid(PromoInvalid):
    kind = "promo_not_yet_valid"

    def __init__(self, code: str):
        super().__init__(code, "Promotion code is not valid yet")


class PromoExpired(PromoInvalid):
    kind = "promo_expired"

    def __init__(self, code: str):
        super().__init__(code, "Promotion code has expired")


# Business-rule rejections
class InsufficientSeats(BookingSystemError):
    kind = "insufficient_seats"
    status_code = 409

    def __init__(self, available: int, requested: int, seat_class: str, leg: str = "departure"):
        super().__init__(
            f"Not enough {seat_class.lower()} seats available on {leg} flight",
            available=available,
            requested=requested,
            seat_class=seat_class,
            leg=leg,
        )
        self.available = available
        self.requested = requested
        self.seat_class = seat_class
        self.leg = leg


class NoFareAvailable(BookingSystemError):
    kind = "no_fare_available"
    status_code = 409

    def __init__(self, flight_code: str, fare_class: str):
        super().__init__(
            f"No {fare_class.lower()} or economy fare available on flight {flight_code}",
            flight=flight_code,
            seat_class=fare_class,
        )


class FlightHasBookings(BookingSystemError):
    kind = "flight_has_bookings"
    status_code = 409

    def __init__(self, count: int):
        super().__init__("Cannot delete flight with existing bookings", bookings_count=count)


class PaymentAlreadyRecorded(BookingSystemError):
    kind = "payment_already_recorded"
    status_code = 409

    def __init__(self, booking_id: str):
        super().__init__("Payment information already recorded for this booking", booking_id=booking_id)


# Storage
class BookingPersistenceFailed(BookingSystemError):
    kind = "booking_persistence_failed"
    status_code = 500


class StorageConstraintViolation(BookingSystemError):
    kind = "storage_constraint_violation"
    status_code = 500
