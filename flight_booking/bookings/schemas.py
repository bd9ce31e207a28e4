from pydantic import BaseModel, Field, root_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Dict, Union
from datetime import datetime, date
from decimal import Decimal
from enum import Enum

from flight_booking.flights.schemas import FlightSnapshot

class PaymentStatus(str, Enum):
    """Booking payment status enumeration"""
    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"

class PaymentMethod(str, Enum):
    """Accepted payment methods"""
    BANK_TRANSFER = "bank_transfer"
    MOMO = "momo"

class PassengerType(str, Enum):
    """Passenger fare category"""
    ADULT = "ADULT"
    CHILD = "CHILD"
    INFANT = "INFANT"

class RequestModel(BaseModel):
    """Accepts camelCase and snake_case field names alike"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

# Booking Request Models
class CustomerInfo(RequestModel):
    """Booking contact and fare class"""
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    seat_class: Optional[str] = "ECONOMY"

class PassengerInput(RequestModel):
    """Individual passenger on a booking request"""
    full_name: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[date] = None
    id_number: Optional[str] = None
    passenger_type: Optional[str] = None

    @root_validator(pre=True)
    def fold_alternate_names(cls, values):
        if isinstance(values, dict):
            values = dict(values)
            if not values.get('passenger_type') and not values.get('passengerType') and values.get('type'):
                values['passenger_type'] = values.pop('type')
            for alternate in ('passport_number', 'passportNumber'):
                if not values.get('id_number') and not values.get('idNumber') and values.get(alternate):
                    values['id_number'] = values.pop(alternate)
            if values.get('dob') == "":
                values['dob'] = None
        return values

class SelectedServices(RequestModel):
    """Ancillaries applied to every passenger on the booking"""
    luggage: bool = False
    insurance: bool = False
    meal: bool = False
    food: bool = False

    @property
    def wants_meal(self) -> bool:
        return self.meal or self.food

class PassengerCounts(RequestModel):
    num_adults: int = 0
    num_children: int = 0
    num_infants: int = 0

class BookingRequest(RequestModel):
    """Request to book a one-way or round-trip itinerary"""
    departure_flight_id: Optional[Union[int, str]] = None
    return_flight_id: Optional[Union[int, str]] = None
    is_round_trip: bool = False
    customer_info: Optional[CustomerInfo] = None
    passengers: List[PassengerInput] = Field(default_factory=list)
    selected_services: Optional[SelectedServices] = None
    promo_code: Optional[str] = None
    total_amount: Optional[Decimal] = None
    passenger_counts: Optional[PassengerCounts] = None
    payment_method: Optional[str] = None
    transaction_info: Optional[str] = None

class PaymentStatusUpdate(RequestModel):
    payment_status: Optional[str] = None

class BookingSearch(BaseModel):
    """Filters for the booking listing; all optional"""
    booking_id: Optional[str] = None
    contact_name: Optional[str] = None
    payment_status: Optional[PaymentStatus] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None

# Response Models
class BookingCreated(BaseModel):
    success: bool = True
    booking_id: str
    total_amount: Decimal
    message: str = "Booking created successfully"
    flight_details: FlightSnapshot

class BookingRecord(BaseModel):
    booking_id: str
    departure_flight_id: int
    return_flight_id: Optional[int] = None
    is_round_trip: bool
    contact_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    travel_class: str
    total_amount: Decimal
    booking_time: Optional[datetime] = None
    payment_status: PaymentStatus
    promo_code: Optional[str] = None

    class Config:
        from_attributes = True

class PassengerDetail(BaseModel):
    detail_id: int
    full_name: str
    gender: Optional[str] = None
    dob: Optional[str] = None
    passport_number: str
    passenger_type: PassengerType
    luggage_weight: Decimal
    insurance: bool
    meal: bool

    class Config:
        from_attributes = True

class PaymentInfo(BaseModel):
    booking_id: str
    method: PaymentMethod
    transaction_info: Optional[str] = None
    payment_date: Optional[datetime] = None

    class Config:
        from_attributes = True

class FlightSummary(BaseModel):
    airline: str
    airline_code: str
    flight_number: str
    departure_airport: str
    arrival_airport: str

    class Config:
        from_attributes = True

class BookingSummary(BookingRecord):
    """Booking row in a listing, with passenger count and route"""
    passenger_count: int = 0
    flight_info: Optional[FlightSummary] = None
    return_flight_info: Optional[FlightSummary] = None

class BookingView(BaseModel):
    """Full booking with flights, passengers and payment"""
    booking: BookingRecord
    passenger_counts: Optional[Dict[str, int]] = None
    departure_flight: FlightSnapshot
    return_flight: Optional[FlightSnapshot] = None
    passengers: List[PassengerDetail]
    payment_info: Optional[PaymentInfo] = None

class PaymentStatusUpdated(BaseModel):
    success: bool = True
    message: str = "Payment status updated successfully"
    payment_status: PaymentStatus
    seats_released: int = 0
