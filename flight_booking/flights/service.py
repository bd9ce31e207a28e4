import logging
from datetime import datetime, timedelta
from typing import List, Optional, Union

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from flight_booking.exceptions import FlightHasBookings, FlightNotFound, InvalidRequest
from flight_booking.flights.schemas import FareClass, FlightBase, FlightSearch, FlightSnapshot
from flight_booking.models import Booking, Flight

logger = logging.getLogger(__name__)

class FlightService:
    @staticmethod
    def get_flight(db: Session, flight_id: int) -> Optional[Flight]:
        """Get flight by store ID"""
        return db.query(Flight).filter(Flight.id == flight_id).first()

    @staticmethod
    def get_flight_by_code(db: Session, code: str) -> Optional[Flight]:
        """Get flight by display code (airline code + flight number)"""
        return db.query(Flight).filter(
            (Flight.airline_code + Flight.flight_number) == str(code).upper()
        ).first()

    @staticmethod
    def resolve_flight(db: Session, reference: Union[int, str, None]) -> Optional[Flight]:
        """Resolve a numeric store id first, then a display code"""
        if reference is None or str(reference).strip() == "":
            return None

        flight = None
        text = str(reference).strip()
        if text.isdigit():
            flight = FlightService.get_flight(db, int(text))
        if not flight:
            flight = FlightService.get_flight_by_code(db, text)
        return flight

    @staticmethod
    def search_flights(db: Session, search: Optional[FlightSearch] = None) -> List[Flight]:
        """List flights with optional route, date, class and status filters"""
        query = db.query(Flight)

        if search:
            if search.departure:
                query = query.filter(Flight.departure_airport == search.departure.upper())

            if search.destination:
                query = query.filter(Flight.arrival_airport == search.destination.upper())

            if search.depart_date:
                start = datetime.combine(search.depart_date, datetime.min.time())
                query = query.filter(
                    Flight.departure_time >= start,
                    Flight.departure_time < start + timedelta(days=1)
                )

            if search.seat_class:
                query = query.filter(Flight.available_classes.like(f"%{search.seat_class.value}%"))

            if search.status:
                query = query.filter(Flight.status == search.status.value)

        return query.order_by(Flight.departure_time).all()

    @staticmethod
    def create_flight(db: Session, data: FlightBase) -> Flight:
        """Create a flight with derived duration and aggregate seat count"""
        FlightService._validate_flight_data(data)

        flight = Flight()
        FlightService._apply_flight_data(flight, data)
        db.add(flight)
        db.commit()
        db.refresh(flight)

        logger.info(f"Created flight {flight.display_code} ({flight.id})")
        return flight

    @staticmethod
    def update_flight(db: Session, reference: Union[int, str], data: FlightBase) -> Flight:
        """Replace a flight's editable fields"""
        flight = FlightService.resolve_flight(db, reference)
        if not flight:
            raise FlightNotFound(reference)

        FlightService._validate_flight_data(data)
        FlightService._apply_flight_data(flight, data)
        db.commit()
        db.refresh(flight)

        logger.info(f"Updated flight {flight.display_code} ({flight.id})")
        return flight

    @staticmethod
    def delete_flight(db: Session, reference: Union[int, str]) -> None:
        """Delete a flight that no booking references"""
        flight = FlightService.resolve_flight(db, reference)
        if not flight:
            raise FlightNotFound(reference)

        bookings_count = db.query(func.count(Booking.booking_id)).filter(
            or_(
                Booking.departure_flight_id == flight.id,
                Booking.return_flight_id == flight.id
            )
        ).scalar()
        if bookings_count:
            raise FlightHasBookings(bookings_count)

        db.delete(flight)
        db.commit()
        logger.info(f"Deleted flight {flight.display_code} ({flight.id})")

    @staticmethod
    def format_duration(departure_time: datetime, arrival_time: datetime) -> str:
        minutes = int((arrival_time - departure_time).total_seconds() // 60)
        return f"{minutes // 60}h {minutes % 60}m"

    @staticmethod
    def format_flight_for_client(flight: Flight) -> FlightSnapshot:
        """Build the client-facing flight snapshot"""
        prices = {fc: flight.price_of(fc.value) for fc in FareClass}
        seats = {fc: flight.seats_for(fc.value) for fc in FareClass}

        return FlightSnapshot(
            id=flight.display_code,
            flight_id=flight.id,
            airline=flight.airline,
            airline_code=flight.airline_code,
            flight_number=flight.flight_number,
            departure_airport=flight.departure_airport,
            arrival_airport=flight.arrival_airport,
            departure_time=flight.departure_time,
            arrival_time=flight.arrival_time,
            departure_clock=flight.departure_time.strftime("%H:%M"),
            arrival_clock=flight.arrival_time.strftime("%H:%M"),
            date=flight.departure_time.strftime("%d-%m-%Y"),
            duration=flight.duration,
            price=flight.price_economy,
            prices=prices,
            seats=seats,
            available_seats=flight.available_seats,
            status=flight.status,
            available_classes=flight.sellable_classes
        )

    @staticmethod
    def _validate_flight_data(data: FlightBase) -> None:
        errors = []

        if data.arrival_time <= data.departure_time:
            errors.append("arrival_time must be after departure_time")

        if not data.available_classes:
            errors.append("available_classes must not be empty")

        sellable = {fc.value for fc in data.available_classes}
        for fare_class in FareClass:
            suffix = fare_class.value.lower()
            price = getattr(data, f"price_{suffix}")
            seats = getattr(data, f"seats_{suffix}")

            if seats < 0:
                errors.append(f"seats_{suffix} must not be negative")
            if fare_class.value in sellable and price is None:
                errors.append(f"price_{suffix} is required for a sellable class")
            if fare_class.value not in sellable and price is not None:
                errors.append(f"price_{suffix} given for a class that is not sellable")
            if price is not None and price < 0:
                errors.append(f"price_{suffix} must not be negative")

        if errors:
            raise InvalidRequest("Invalid flight information", errors=errors)

    @staticmethod
    def _apply_flight_data(flight: Flight, data: FlightBase) -> None:
        flight.airline = data.airline
        flight.airline_code = data.airline_code
        flight.flight_number = data.flight_number
        flight.departure_airport = data.departure_airport
        flight.arrival_airport = data.arrival_airport
        flight.departure_time = data.departure_time
        flight.arrival_time = data.arrival_time
        flight.duration = FlightService.format_duration(data.departure_time, data.arrival_time)

        flight.price_economy = data.price_economy
        flight.price_premium_economy = data.price_premium_economy
        flight.price_business = data.price_business
        flight.price_first = data.price_first

        flight.seats_economy = data.seats_economy
        flight.seats_premium_economy = data.seats_premium_economy
        flight.seats_business = data.seats_business
        flight.seats_first = data.seats_first
        flight.available_seats = (
            data.seats_economy + data.seats_premium_economy + data.seats_business + data.seats_first
        )

        flight.status = data.status.value
        flight.available_classes = ",".join(fc.value for fc in data.available_classes)
