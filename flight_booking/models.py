from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Numeric, JSON, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from flight_booking.database import Base

FARE_CLASSES = ("ECONOMY", "PREMIUM_ECONOMY", "BUSINESS", "FIRST")

# ================================
# Flights & Seat Inventory
# ================================
class Flight(Base):
    __tablename__ = "flights"
    __table_args__ = (
        CheckConstraint("seats_economy >= 0", name="ck_seats_economy_non_negative"),
        CheckConstraint("seats_premium_economy >= 0", name="ck_seats_premium_economy_non_negative"),
        CheckConstraint("seats_business >= 0", name="ck_seats_business_non_negative"),
        CheckConstraint("seats_first >= 0", name="ck_seats_first_non_negative"),
        CheckConstraint("available_seats >= 0", name="ck_available_seats_non_negative"),
        CheckConstraint(
            "status IN ('scheduled', 'boarding', 'departed', 'cancelled')",
            name="ck_flight_status",
        ),
    )

    id = Column("flight_id", Integer, primary_key=True, index=True)
    airline = Column(String(100), nullable=False)
    airline_code = Column(String(3), nullable=False, index=True)
    flight_number = Column(String(10), nullable=False, index=True)
    departure_airport = Column(String(3), nullable=False, index=True)
    arrival_airport = Column(String(3), nullable=False, index=True)
    departure_time = Column(DateTime, nullable=False)
    arrival_time = Column(DateTime, nullable=False)
    duration = Column(String(20), nullable=False)

    price_economy = Column(Numeric(12, 2))
    price_premium_economy = Column(Numeric(12, 2))
    price_business = Column(Numeric(12, 2))
    price_first = Column(Numeric(12, 2))

    seats_economy = Column(Integer, nullable=False, default=0)
    seats_premium_economy = Column(Integer, nullable=False, default=0)
    seats_business = Column(Integer, nullable=False, default=0)
    seats_first = Column(Integer, nullable=False, default=0)
    available_seats = Column(Integer, nullable=False, default=0)  # sum of the per-class counts

    status = Column(String(20), nullable=False, default="scheduled")
    available_classes = Column(String(100), nullable=False)

    # Relationships
    departing_bookings = relationship(
        "Booking", foreign_keys="Booking.departure_flight_id", back_populates="departure_flight"
    )
    returning_bookings = relationship(
        "Booking", foreign_keys="Booking.return_flight_id", back_populates="return_flight"
    )

    @property
    def display_code(self) -> str:
        return f"{self.airline_code}{self.flight_number}"

    @property
    def sellable_classes(self):
        return [c.strip().upper() for c in (self.available_classes or "").split(",") if c.strip()]

    @staticmethod
    def seat_column(fare_class: str):
        """Seat-count column for a fare class (ECONOMY for anything unknown)"""
        return getattr(Flight, f"seats_{_column_suffix(fare_class)}")

    @staticmethod
    def price_column(fare_class: str):
        return getattr(Flight, f"price_{_column_suffix(fare_class)}")

    def seats_for(self, fare_class: str) -> int:
        return getattr(self, f"seats_{_column_suffix(fare_class)}") or 0

    def price_of(self, fare_class: str):
        return getattr(self, f"price_{_column_suffix(fare_class)}")


def _column_suffix(fare_class: str) -> str:
    normalized = (fare_class or "ECONOMY").upper()
    if normalized not in FARE_CLASSES:
        normalized = "ECONOMY"
    return normalized.lower()

# ================================
# Bookings
# ================================
class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_total_amount_non_negative"),
        CheckConstraint(
            "payment_status IN ('unpaid', 'pending', 'paid', 'refunded', 'cancelled')",
            name="ck_payment_status",
        ),
        CheckConstraint(
            "(is_round_trip AND return_flight_id IS NOT NULL) OR "
            "(NOT is_round_trip AND return_flight_id IS NULL)",
            name="ck_round_trip_return_flight",
        ),
    )

    booking_id = Column(String(16), primary_key=True, index=True)
    departure_flight_id = Column(Integer, ForeignKey("flights.flight_id"), nullable=False, index=True)
    return_flight_id = Column(Integer, ForeignKey("flights.flight_id"), index=True)
    is_round_trip = Column(Boolean, nullable=False, default=False)
    contact_name = Column(String(255), nullable=False)
    email = Column(String(255))
    phone = Column(String(50))
    travel_class = Column(String(20), nullable=False, default="ECONOMY")
    total_amount = Column(Numeric(12, 2), nullable=False)
    booking_time = Column(DateTime, server_default=func.now())
    payment_status = Column(String(20), nullable=False, default="unpaid", index=True)
    promo_code = Column(String(50))
    passengers_info = Column(JSON)

    # Relationships
    departure_flight = relationship("Flight", foreign_keys=[departure_flight_id], back_populates="departing_bookings")
    return_flight = relationship("Flight", foreign_keys=[return_flight_id], back_populates="returning_bookings")
    passengers = relationship("BookingDetail", back_populates="booking", order_by="BookingDetail.detail_id")
    payment = relationship("Payment", back_populates="booking", uselist=False)

class BookingDetail(Base):
    __tablename__ = "booking_details"
    __table_args__ = (
        CheckConstraint("passenger_type IN ('ADULT', 'CHILD', 'INFANT')", name="ck_passenger_type"),
    )

    detail_id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(String(16), ForeignKey("bookings.booking_id"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    gender = Column(String(20))
    dob = Column(String(10))
    passport_number = Column(String(50), nullable=False)
    passenger_type = Column(String(10), nullable=False, default="ADULT")
    luggage_weight = Column(Numeric(5, 1), default=0)
    insurance = Column(Boolean, default=False)
    meal = Column(Boolean, default=False)

    # Relationships
    booking = relationship("Booking", back_populates="passengers")

# ================================
# Payments
# ================================
class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("method IN ('bank_transfer', 'momo')", name="ck_payment_method"),
    )

    booking_id = Column(String(16), ForeignKey("bookings.booking_id"), primary_key=True)
    method = Column(String(20), nullable=False)
    transaction_info = Column(Text)
    payment_date = Column(DateTime, server_default=func.now())

    # Relationships
    booking = relationship("Booking", back_populates="payment")

# ================================
# Promotions
# ================================
class Promotion(Base):
    __tablename__ = "promotions"
    __table_args__ = (
        UniqueConstraint("code", name="uq_promotion_code"),
        CheckConstraint("discount_type IN ('percent', 'fixed')", name="ck_discount_type"),
        CheckConstraint(
            "status IN ('active', 'inactive', 'scheduled', 'expired')",
            name="ck_promotion_status",
        ),
    )

    promo_id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    discount_type = Column(String(10), nullable=False)
    discount_value = Column(Numeric(12, 2), nullable=False)
    valid_from = Column(DateTime)
    valid_to = Column(DateTime)
    usage_limit = Column(Integer)  # NULL means uncapped
    used_count = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active", index=True)
