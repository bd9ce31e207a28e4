"""
Payments Module

Records the payment method and transaction reference for a booking. A
booking carries at most one payment record and it is never overwritten;
status changes after that go through the booking payment lifecycle.
"""

from .router import router
from .service import PaymentService
from .schemas import PaymentSubmission, PaymentSubmitted

__all__ = [
    "router",
    "PaymentService",
    "PaymentSubmission",
    "PaymentSubmitted"
]
