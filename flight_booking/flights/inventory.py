"""
Seat inventory ledger.

Seat counts live on the ``flights`` row, one column per fare class plus the
``available_seats`` aggregate. Every mutation touches a class column and the
aggregate in the same UPDATE statement so the two can never drift apart, and
reservations are conditional updates so a concurrent booking cannot drive a
count below zero between the availability check and the write.
"""

import logging

from sqlalchemy.orm import Session

from flight_booking.exceptions import InsufficientSeats
from flight_booking.flights.schemas import FareClass
from flight_booking.models import Flight

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Per-class seat bookkeeping for flights"""

    def __init__(self, db: Session):
        self.db = db

    def available(self, flight: Flight, fare_class: str) -> int:
        return flight.seats_for(FareClass.normalize(fare_class).value)

    def check_availability(
        self,
        flight: Flight,
        fare_class: str,
        requested_seats: int,
        leg: str = "departure"
    ) -> None:
        """Raise InsufficientSeats when the class cannot seat ``requested_seats``"""
        seat_class = FareClass.normalize(fare_class).value
        available = flight.seats_for(seat_class)

        logger.debug(
            f"Checking {leg} flight {flight.display_code} class {seat_class}: "
            f"available={available}, requested={requested_seats}"
        )

        if available < requested_seats:
            raise InsufficientSeats(
                available=available,
                requested=requested_seats,
                seat_class=seat_class,
                leg=leg
            )

    def reserve(self, flight: Flight, fare_class: str, count: int) -> bool:
        """Atomically take ``count`` seats; False if that would go negative"""
        if count <= 0:
            return True

        column = Flight.seat_column(FareClass.normalize(fare_class).value)
        updated = self.db.query(Flight).filter(
            Flight.id == flight.id,
            column >= count,
            Flight.available_seats >= count
        ).update(
            {
                column: column - count,
                Flight.available_seats: Flight.available_seats - count
            },
            synchronize_session=False
        )
        self.db.refresh(flight)

        if updated:
            logger.info(f"Reserved {count} {column.key} on flight {flight.display_code}")
        else:
            logger.warning(f"Conditional reserve of {count} {column.key} failed on flight {flight.display_code}")
        return bool(updated)

    def release(self, flight: Flight, fare_class: str, count: int) -> None:
        """Give ``count`` seats back to the class and the aggregate"""
        # No capacity ceiling is stored, so repeated releases can overshoot
        if count <= 0:
            return

        column = Flight.seat_column(FareClass.normalize(fare_class).value)
        self.db.query(Flight).filter(Flight.id == flight.id).update(
            {
                column: column + count,
                Flight.available_seats: Flight.available_seats + count
            },
            synchronize_session=False
        )
        self.db.refresh(flight)
        logger.info(f"Released {count} {column.key} on flight {flight.display_code}")
