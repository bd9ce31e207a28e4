from pydantic import BaseModel, Field, validator
from typing import List, Optional, Dict
from datetime import datetime, date
from decimal import Decimal
from enum import Enum

class FareClass(str, Enum):
    """Fare class enumeration"""
    ECONOMY = "ECONOMY"
    PREMIUM_ECONOMY = "PREMIUM_ECONOMY"
    BUSINESS = "BUSINESS"
    FIRST = "FIRST"

    @classmethod
    def normalize(cls, value: Optional[str]) -> "FareClass":
        """Case-insensitive lookup, ECONOMY when missing or unknown"""
        if isinstance(value, cls):
            return value
        try:
            return cls((value or cls.ECONOMY.value).strip().upper())
        except ValueError:
            return cls.ECONOMY

class FlightStatus(str, Enum):
    """Flight operational status"""
    SCHEDULED = "scheduled"
    BOARDING = "boarding"
    DEPARTED = "departed"
    CANCELLED = "cancelled"

class FlightBase(BaseModel):
    airline: str
    airline_code: str = Field(..., min_length=2, max_length=3)
    flight_number: str = Field(..., min_length=1, max_length=10)
    departure_airport: str = Field(..., min_length=3, max_length=3)
    arrival_airport: str = Field(..., min_length=3, max_length=3)
    departure_time: datetime
    arrival_time: datetime
    price_economy: Optional[Decimal] = None
    price_premium_economy: Optional[Decimal] = None
    price_business: Optional[Decimal] = None
    price_first: Optional[Decimal] = None
    seats_economy: int = 0
    seats_premium_economy: int = 0
    seats_business: int = 0
    seats_first: int = 0
    status: FlightStatus = FlightStatus.SCHEDULED
    available_classes: List[FareClass]

    @validator('available_classes', pre=True)
    def split_available_classes(cls, v):
        # Accept the stored comma-separated form as well as a list
        if isinstance(v, str):
            v = [c for c in v.split(',') if c.strip()]
        return [c.strip().upper() if isinstance(c, str) else c for c in v]

    @validator('airline_code', 'departure_airport', 'arrival_airport')
    def upper_codes(cls, v):
        return v.upper()

class FlightCreate(FlightBase):
    pass

class FlightUpdate(FlightBase):
    """Full replacement of an existing flight's editable fields"""
    pass

class FlightSearch(BaseModel):
    departure: Optional[str] = None
    destination: Optional[str] = None
    depart_date: Optional[date] = None
    seat_class: Optional[FareClass] = None
    status: Optional[FlightStatus] = None

class FlightSnapshot(BaseModel):
    """Client-facing view of a flight"""
    id: str  # display code, e.g. VN123
    flight_id: int
    airline: str
    airline_code: str
    flight_number: str
    departure_airport: str
    arrival_airport: str
    departure_time: datetime
    arrival_time: datetime
    departure_clock: str
    arrival_clock: str
    date: str
    duration: str
    price: Optional[Decimal] = None
    prices: Dict[FareClass, Optional[Decimal]]
    seats: Dict[FareClass, int]
    available_seats: int
    status: str
    available_classes: List[str]

