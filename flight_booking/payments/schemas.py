from typing import Optional

from flight_booking.bookings.schemas import PaymentInfo, RequestModel

class PaymentSubmission(RequestModel):
    """Payment details submitted for an existing booking"""
    booking_id: str
    method: Optional[str] = None
    transaction_info: Optional[str] = None

class PaymentSubmitted(PaymentInfo):
    success: bool = True
    message: str = "Payment information saved successfully"
