from concurrent.futures import ThreadPoolExecutor

import pytest

from flight_booking.exceptions import InsufficientSeats
from flight_booking.flights.inventory import InventoryLedger
from flight_booking.models import Flight

from conftest import add_flight


def test_reserve_then_release_restores_counts(db):
    flight = add_flight(db, seats_economy=10, seats_business=4, price_business=3000000)
    ledger = InventoryLedger(db)

    assert ledger.reserve(flight, "BUSINESS", 3)
    db.commit()
    assert flight.seats_business == 1
    assert flight.available_seats == 11
    assert flight.seats_economy == 10

    ledger.release(flight, "BUSINESS", 3)
    db.commit()
    assert flight.seats_business == 4
    assert flight.available_seats == 14


def test_reserve_refuses_to_go_negative(db):
    flight = add_flight(db, seats_economy=2)
    ledger = InventoryLedger(db)

    assert not ledger.reserve(flight, "ECONOMY", 3)
    assert flight.seats_economy == 2
    assert flight.available_seats == 2


def test_check_availability_raises_with_counts(db):
    flight = add_flight(db, seats_economy=3)
    with pytest.raises(InsufficientSeats) as exc_info:
        InventoryLedger(db).check_availability(flight, "economy", 5, "return")

    assert exc_info.value.available == 3
    assert exc_info.value.requested == 5
    assert exc_info.value.leg == "return"


def test_concurrent_reservations_never_oversell(session_factory):
    with session_factory() as session:
        flight_id = add_flight(session, seats_economy=5).id

    def reserve_one(_):
        with session_factory() as session:
            flight = session.get(Flight, flight_id)
            reserved = InventoryLedger(session).reserve(flight, "ECONOMY", 1)
            session.commit()
            return reserved

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(reserve_one, range(12)))

    assert results.count(True) == 5
    with session_factory() as session:
        flight = session.get(Flight, flight_id)
        assert flight.seats_economy == 0
        assert flight.available_seats == 0
