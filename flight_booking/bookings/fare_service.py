from typing import Iterable, Optional, Union
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
import logging

from flight_booking.bookings.schemas import PassengerType
from flight_booking.exceptions import NoFareAvailable
from flight_booking.flights.schemas import FareClass
from flight_booking.models import Flight

logger = logging.getLogger(__name__)

PASSENGER_MULTIPLIERS = {
    PassengerType.ADULT: Decimal("1.00"),
    PassengerType.CHILD: Decimal("0.75"),
    PassengerType.INFANT: Decimal("0.10"),
}

INFANT_MAX_AGE = 2
CHILD_MAX_AGE = 12
DAYS_PER_YEAR = 365.25


class FareCalculationService:
    """Fare calculation from class prices and passenger categories"""

    @staticmethod
    def price_for(flight: Flight, fare_class: Union[FareClass, str]) -> Decimal:
        """Base fare for a class, falling back to the economy price"""
        seat_class = FareClass.normalize(fare_class)
        price = flight.price_of(seat_class.value)
        if price is None:
            price = flight.price_economy
        if price is None:
            raise NoFareAvailable(flight.display_code, seat_class.value)
        return Decimal(str(price))

    @staticmethod
    def passenger_multiplier(passenger_type: Union[PassengerType, str, None]) -> Decimal:
        if isinstance(passenger_type, PassengerType):
            return PASSENGER_MULTIPLIERS[passenger_type]
        try:
            return PASSENGER_MULTIPLIERS[PassengerType((passenger_type or "").upper())]
        except (KeyError, ValueError):
            return Decimal("1.00")

    @staticmethod
    def classify_passenger(
        explicit_type: Optional[str],
        date_of_birth: Union[date, str, None],
        on: Optional[date] = None
    ) -> PassengerType:
        """Explicit type wins; otherwise derive the category from age"""
        if explicit_type:
            try:
                return PassengerType(explicit_type.strip().upper())
            except ValueError:
                return PassengerType.ADULT

        if not date_of_birth:
            return PassengerType.ADULT

        if isinstance(date_of_birth, str):
            try:
                date_of_birth = date.fromisoformat(date_of_birth[:10])
            except ValueError:
                logger.warning(f"Unparseable date of birth {date_of_birth!r}, assuming adult")
                return PassengerType.ADULT
        elif isinstance(date_of_birth, datetime):
            date_of_birth = date_of_birth.date()

        on = on or date.today()
        age_in_years = (on - date_of_birth).days / DAYS_PER_YEAR

        if age_in_years < INFANT_MAX_AGE:
            return PassengerType.INFANT
        elif age_in_years < CHILD_MAX_AGE:
            return PassengerType.CHILD
        return PassengerType.ADULT

    @staticmethod
    def total_fare(
        passenger_types: Iterable[Union[PassengerType, str]],
        base_price: Decimal,
        return_base_price: Optional[Decimal] = None
    ) -> Decimal:
        """Sum of base fare times multiplier per passenger, per leg"""
        total = Decimal("0")
        for passenger_type in passenger_types:
            multiplier = FareCalculationService.passenger_multiplier(passenger_type)
            total += Decimal(str(base_price)) * multiplier
            if return_base_price is not None:
                total += Decimal(str(return_base_price)) * multiplier
        return total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
