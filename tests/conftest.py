import tempfile
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from flight_booking.bookings.schemas import BookingRequest
from flight_booking.database import Base, create_session_factory, get_db
from flight_booking.main import app
from flight_booking.models import Flight, Promotion


def make_session_factory():
    db_file = Path(tempfile.mkstemp(prefix="flight-booking-test", suffix=".db")[1])
    engine, session_factory = create_session_factory(f"sqlite+pysqlite:///{db_file}", echo=False)
    Base.metadata.create_all(engine)
    return session_factory


@pytest.fixture
def session_factory():
    return make_session_factory()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def add_flight(
    session,
    airline_code="VN",
    flight_number="123",
    departure_airport="SGN",
    arrival_airport="HAN",
    departure_time=None,
    price_economy=Decimal("1000000"),
    price_business=None,
    seats_economy=10,
    seats_business=0,
):
    departure_time = departure_time or datetime.now().replace(microsecond=0) + timedelta(days=7)
    classes = ["ECONOMY"] + (["BUSINESS"] if price_business is not None else [])
    flight = Flight(
        airline="Vietnam Airlines",
        airline_code=airline_code,
        flight_number=flight_number,
        departure_airport=departure_airport,
        arrival_airport=arrival_airport,
        departure_time=departure_time,
        arrival_time=departure_time + timedelta(hours=2, minutes=10),
        duration="2h 10m",
        price_economy=price_economy,
        price_business=price_business,
        seats_economy=seats_economy,
        seats_business=seats_business,
        available_seats=seats_economy + seats_business,
        status="scheduled",
        available_classes=",".join(classes),
    )
    session.add(flight)
    session.commit()
    session.refresh(flight)
    return flight


def add_promotion(
    session,
    code="SALE25",
    discount_type="percent",
    discount_value=Decimal("25"),
    valid_from=None,
    valid_to=None,
    usage_limit=None,
    used_count=0,
    status="active",
):
    now = datetime.now()
    promo = Promotion(
        code=code,
        name=f"Promotion {code}",
        discount_type=discount_type,
        discount_value=discount_value,
        valid_from=valid_from or now - timedelta(days=1),
        valid_to=valid_to or now + timedelta(days=30),
        usage_limit=usage_limit,
        used_count=used_count,
        status=status,
    )
    session.add(promo)
    session.commit()
    session.refresh(promo)
    return promo


def adult(name="Nguyen Van A"):
    return {"fullName": name, "gender": "MALE", "dob": "1990-05-01", "idNumber": "B1234567"}


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # Not entered as a context manager so the lifespan (table creation, sweeper) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


def booking_request(departure, passengers, **extra):
    payload = {
        "departureFlightId": departure,
        "customerInfo": {"fullName": "Nguyen Van A", "email": "a@example.com", "phone": "0900000000"},
        "passengers": passengers,
    }
    payload.update(extra)
    return BookingRequest.model_validate(payload)
