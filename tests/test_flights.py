from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from flight_booking.bookings.booking_service import BookingService
from flight_booking.exceptions import FlightHasBookings, InvalidRequest
from flight_booking.flights.schemas import FlightCreate, FlightSearch
from flight_booking.flights.service import FlightService

from conftest import add_flight, adult, booking_request

DEPARTURE = datetime(2030, 3, 15, 8, 30)


def flight_data(**overrides):
    data = {
        "airline": "Vietjet Air",
        "airline_code": "vj",
        "flight_number": "789",
        "departure_airport": "sgn",
        "arrival_airport": "dad",
        "departure_time": DEPARTURE,
        "arrival_time": DEPARTURE + timedelta(hours=1, minutes=25),
        "price_economy": Decimal("900000"),
        "price_business": Decimal("2500000"),
        "seats_economy": 150,
        "seats_business": 12,
        "available_classes": "ECONOMY,BUSINESS",
    }
    data.update(overrides)
    return FlightCreate(**data)


def test_create_flight_derives_duration_and_aggregate(db):
    flight = FlightService.create_flight(db, flight_data())

    assert flight.display_code == "VJ789"
    assert flight.duration == "1h 25m"
    assert flight.available_seats == 162
    assert flight.sellable_classes == ["ECONOMY", "BUSINESS"]


def test_price_required_for_each_sellable_class(db):
    with pytest.raises(InvalidRequest) as exc_info:
        FlightService.create_flight(db, flight_data(price_business=None))
    assert "price_business is required for a sellable class" in exc_info.value.details["errors"]


def test_price_rejected_for_unsellable_class(db):
    with pytest.raises(InvalidRequest):
        FlightService.create_flight(db, flight_data(price_first=Decimal("9000000")))


def test_arrival_must_follow_departure(db):
    with pytest.raises(InvalidRequest):
        FlightService.create_flight(db, flight_data(arrival_time=DEPARTURE))


def test_resolve_by_id_or_display_code(db):
    flight = add_flight(db, airline_code="QH", flight_number="202")

    assert FlightService.resolve_flight(db, flight.id).id == flight.id
    assert FlightService.resolve_flight(db, str(flight.id)).id == flight.id
    assert FlightService.resolve_flight(db, "qh202").id == flight.id
    assert FlightService.resolve_flight(db, "") is None


def test_search_filters_route_and_date(db):
    add_flight(db, flight_number="1", departure_time=DEPARTURE)
    add_flight(db, flight_number="2", departure_time=DEPARTURE + timedelta(days=1))
    add_flight(db, flight_number="3", departure_airport="DAD", departure_time=DEPARTURE)

    found = FlightService.search_flights(db, FlightSearch(departure="sgn", depart_date=DEPARTURE.date()))

    assert [f.display_code for f in found] == ["VN1"]


def test_snapshot_formats_clock_and_date(db):
    flight = add_flight(db, departure_time=DEPARTURE)

    snapshot = FlightService.format_flight_for_client(flight)

    assert snapshot.id == "VN123"
    assert snapshot.departure_clock == "08:30"
    assert snapshot.arrival_clock == "10:40"
    assert snapshot.date == "15-03-2030"
    assert snapshot.seats["ECONOMY"] == 10


def test_delete_refused_while_booked(db):
    flight = add_flight(db)
    BookingService(db).create_booking(booking_request(flight.id, [adult()]))

    with pytest.raises(FlightHasBookings):
        FlightService.delete_flight(db, flight.id)
