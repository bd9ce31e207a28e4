from typing import Callable, Dict, List, Optional, Tuple
from datetime import datetime, timedelta
from decimal import Decimal
import logging
import secrets
import string

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from flight_booking.bookings.fare_service import FareCalculationService
from flight_booking.bookings.schemas import (
    BookingCreated, BookingRecord, BookingRequest, BookingSearch, BookingSummary, BookingView,
    FlightSummary, PassengerDetail, PassengerType, PaymentInfo, PaymentMethod, PaymentStatus,
    PaymentStatusUpdated
)
from flight_booking.config import settings
from flight_booking.exceptions import (
    BookingNotFound, BookingPersistenceFailed, BookingSystemError, FlightNotFound,
    InsufficientSeats, InvalidRequest, InvalidStatus, PromoInvalid, StorageConstraintViolation
)
from flight_booking.flights.inventory import InventoryLedger
from flight_booking.flights.schemas import FareClass
from flight_booking.flights.service import FlightService
from flight_booking.models import Booking, BookingDetail, Flight, Payment, Promotion
from flight_booking.promotions.service import PromotionService

logger = logging.getLogger(__name__)

BOOKING_ID_ALPHABET = string.ascii_uppercase + string.digits

ALLOWED_TRANSITIONS = {
    PaymentStatus.UNPAID: {PaymentStatus.PENDING, PaymentStatus.PAID, PaymentStatus.CANCELLED},
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.CANCELLED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED, PaymentStatus.CANCELLED},
    PaymentStatus.REFUNDED: set(),
    PaymentStatus.CANCELLED: set(),
}

# Seats go back to inventory only when leaving one of these statuses
SEAT_RESTORING_SOURCES = {PaymentStatus.PAID, PaymentStatus.UNPAID}
SEAT_RESTORING_TARGETS = {PaymentStatus.CANCELLED, PaymentStatus.REFUNDED}


def generate_booking_id(length: Optional[int] = None) -> str:
    """Random uppercase alphanumeric booking token"""
    length = length or settings.BOOKING_ID_LENGTH
    return "".join(secrets.choice(BOOKING_ID_ALPHABET) for _ in range(length))


class BookingService:
    """Booking transactions: creation, lookup and payment status changes"""

    def __init__(
        self,
        db: Session,
        id_generator: Callable[[], str] = generate_booking_id,
        double_count_promos: Optional[bool] = None
    ):
        self.db = db
        self.inventory = InventoryLedger(db)
        self.promotions = PromotionService(db)
        self.id_generator = id_generator
        self.double_count_promos = (
            settings.PROMO_DOUBLE_COUNT if double_count_promos is None else double_count_promos
        )

    def create_booking(self, request: BookingRequest, now: Optional[datetime] = None) -> BookingCreated:
        """Validate, price, reserve and persist a booking as one unit of work"""
        now = now or datetime.now()
        self._validate_request(request)

        logger.info(
            f"Booking request: departure={request.departure_flight_id} "
            f"return={request.return_flight_id} round_trip={request.is_round_trip} "
            f"passengers={len(request.passengers)}"
        )

        departure_flight = self._resolve_leg(request.departure_flight_id, "departure")
        return_flight = None
        if request.is_round_trip:
            return_flight = self._resolve_leg(request.return_flight_id, "return")

        fare_class = FareClass.normalize(request.customer_info.seat_class).value
        passenger_count = len(request.passengers)

        # Reject before any mutation
        self.inventory.check_availability(departure_flight, fare_class, passenger_count, "departure")
        if return_flight:
            self.inventory.check_availability(return_flight, fare_class, passenger_count, "return")

        passenger_types = [
            FareCalculationService.classify_passenger(p.passenger_type, p.dob, on=now.date())
            for p in request.passengers
        ]
        total_amount, undiscounted_amount, promo = self._compute_total(
            request, departure_flight, return_flight, fare_class, passenger_types, now
        )

        try:
            booking_id = self._generate_unique_booking_id()

            self._reserve_seats(departure_flight, fare_class, passenger_count, "departure")
            if return_flight:
                self._reserve_seats(return_flight, fare_class, passenger_count, "return")

            booking = self._persist_booking(
                booking_id, request, departure_flight, return_flight, fare_class,
                passenger_types, total_amount, promo, now
            )

            if promo and not self.promotions.record_usage(promo.promo_id):
                # Cap reached by a concurrent booking after validation
                logger.warning(f"Promo code {promo.code} exhausted during booking {booking_id}; discount dropped")
                booking.total_amount = undiscounted_amount
                booking.promo_code = None
                total_amount = undiscounted_amount

            self.db.commit()
        except BookingSystemError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating booking: {e}")
            raise BookingPersistenceFailed(f"Failed to create booking: {e}") from e

        logger.info(f"Booking {booking_id} created, total {total_amount}")
        return BookingCreated(
            booking_id=booking_id,
            total_amount=total_amount,
            flight_details=FlightService.format_flight_for_client(departure_flight)
        )

    def get_booking(self, booking_id: str) -> BookingView:
        """Booking with flight snapshots, passengers and payment info"""
        booking = self._get_booking_row(booking_id)

        departure_flight = FlightService.get_flight(self.db, booking.departure_flight_id)
        if not departure_flight:
            raise FlightNotFound(booking.departure_flight_id, leg="departure")

        return_flight = None
        if booking.is_round_trip and booking.return_flight_id:
            return_flight = FlightService.get_flight(self.db, booking.return_flight_id)

        return BookingView(
            booking=BookingRecord.model_validate(booking),
            passenger_counts=booking.passengers_info,
            departure_flight=FlightService.format_flight_for_client(departure_flight),
            return_flight=FlightService.format_flight_for_client(return_flight) if return_flight else None,
            passengers=[PassengerDetail.model_validate(p) for p in booking.passengers],
            payment_info=PaymentInfo.model_validate(booking.payment) if booking.payment else None
        )

    def search_bookings(self, search: Optional[BookingSearch] = None) -> List[BookingSummary]:
        """List bookings, newest first, with optional id, contact, status and date filters"""
        passenger_count = select(func.count(BookingDetail.detail_id)).where(
            BookingDetail.booking_id == Booking.booking_id
        ).correlate(Booking).scalar_subquery()

        query = self.db.query(Booking, passenger_count.label("passenger_count"))

        if search:
            if search.booking_id:
                query = query.filter(Booking.booking_id == search.booking_id.upper())

            if search.contact_name:
                query = query.filter(Booking.contact_name.like(f"%{search.contact_name}%"))

            if search.payment_status:
                query = query.filter(Booking.payment_status == search.payment_status.value)

            if search.from_date:
                query = query.filter(Booking.booking_time >= datetime.combine(search.from_date, datetime.min.time()))

            if search.to_date:
                end = datetime.combine(search.to_date, datetime.min.time()) + timedelta(days=1)
                query = query.filter(Booking.booking_time < end)

        results = []
        for booking, count in query.order_by(Booking.booking_time.desc()).all():
            return_flight = booking.return_flight if booking.is_round_trip else None
            results.append(BookingSummary(
                **BookingRecord.model_validate(booking).model_dump(),
                passenger_count=count or 0,
                flight_info=FlightSummary.model_validate(booking.departure_flight) if booking.departure_flight else None,
                return_flight_info=FlightSummary.model_validate(return_flight) if return_flight else None
            ))
        return results

    def update_payment_status(self, booking_id: str, new_status: Optional[str]) -> PaymentStatusUpdated:
        """Move a booking through its payment lifecycle"""
        if not new_status:
            raise InvalidRequest("Payment status is required", missing_fields=["payment_status"])
        try:
            target = PaymentStatus(new_status)
        except ValueError:
            raise InvalidStatus("Invalid payment status", payment_status=new_status)

        booking = self._get_booking_row(booking_id)
        current = PaymentStatus(booking.payment_status)

        if target == current:
            return PaymentStatusUpdated(payment_status=target)

        if target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidStatus(
                f"Cannot change payment status from {current.value} to {target.value}",
                current_status=current.value,
                payment_status=target.value
            )

        seats_released = 0
        try:
            # Compare-and-set: only one concurrent transition out of ``current`` wins
            updated = self.db.query(Booking).filter(
                Booking.booking_id == booking_id,
                Booking.payment_status == current.value
            ).update(
                {Booking.payment_status: target.value},
                synchronize_session=False
            )
            if not updated:
                latest = self.db.query(Booking.payment_status).filter(
                    Booking.booking_id == booking_id
                ).scalar()
                if latest is None:
                    raise BookingNotFound(booking_id)
                raise InvalidStatus(
                    f"Payment status changed concurrently from {current.value} to {latest}",
                    current_status=latest,
                    payment_status=target.value
                )

            if target == PaymentStatus.PAID and booking.promo_code and self.double_count_promos:
                promo = self.promotions.get_by_code(booking.promo_code)
                if promo:
                    self.promotions.record_usage(promo.promo_id)
                    logger.info(f"Promo code {booking.promo_code} usage confirmed with payment")

            if target in SEAT_RESTORING_TARGETS and current in SEAT_RESTORING_SOURCES:
                seats_released = self._restore_seats(booking)

            self.db.commit()
        except BookingSystemError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Constraint violation updating payment status for {booking_id}: {e}")
            raise StorageConstraintViolation(
                "Failed to update payment status due to database constraint",
                booking_id=booking_id,
                constraint=str(e.orig)
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating payment status for {booking_id}: {e}")
            raise BookingPersistenceFailed(
                f"Failed to update payment status: {e}", booking_id=booking_id
            ) from e

        logger.info(f"Booking {booking_id} payment status {current.value} -> {target.value}")
        return PaymentStatusUpdated(payment_status=target, seats_released=seats_released)

    def _validate_request(self, request: BookingRequest) -> None:
        missing_fields = []
        if request.departure_flight_id in (None, ""):
            missing_fields.append("departure_flight_id")
        if not request.customer_info:
            missing_fields.append("customer_info")
        if not request.passengers:
            missing_fields.append("passengers")
        if request.is_round_trip and request.return_flight_id in (None, ""):
            missing_fields.append("return_flight_id")

        if missing_fields:
            logger.warning(f"Missing required booking information: {missing_fields}")
            raise InvalidRequest(
                "Missing required booking information",
                missing_fields=missing_fields,
                passengers_count=len(request.passengers)
            )

        if not request.customer_info.full_name:
            raise InvalidRequest(
                "Missing required booking information",
                missing_fields=["customer_info.full_name"]
            )

        if any(not p.full_name for p in request.passengers):
            raise InvalidRequest(
                "Passenger data missing required fields",
                missing_fields=["passengers.full_name"]
            )

    def _resolve_leg(self, reference, leg: str) -> Flight:
        flight = FlightService.resolve_flight(self.db, reference)
        if not flight:
            raise FlightNotFound(reference, leg=leg)
        return flight

    def _compute_total(
        self,
        request: BookingRequest,
        departure_flight: Flight,
        return_flight: Optional[Flight],
        fare_class: str,
        passenger_types: List[PassengerType],
        now: datetime
    ) -> Tuple[Decimal, Decimal, Optional[Promotion]]:
        """Return (final total, total before discount, applied promotion)"""
        if request.total_amount is not None:
            # Caller-supplied totals are trusted and never discounted
            if request.promo_code:
                logger.warning(
                    f"Promo code {request.promo_code} not applied: explicit total amount supplied"
                )
            amount = max(Decimal("0"), request.total_amount)
            return amount, amount, None

        base_price = FareCalculationService.price_for(departure_flight, fare_class)
        return_base_price = None
        if return_flight:
            return_base_price = FareCalculationService.price_for(return_flight, fare_class)

        calculated = FareCalculationService.total_fare(passenger_types, base_price, return_base_price)

        promo = None
        final_amount = calculated
        if request.promo_code:
            try:
                promo = self.promotions.validate(request.promo_code, now)
                final_amount = self.promotions.apply(promo, calculated)
                logger.info(f"Promo code {promo.code} applied: {calculated} -> {final_amount}")
            except PromoInvalid as e:
                logger.info(f"Promo code {request.promo_code} ignored: {e.message}")
                promo = None

        return max(Decimal("0"), final_amount), calculated, promo

    def _generate_unique_booking_id(self) -> str:
        while True:
            booking_id = self.id_generator()
            exists = self.db.query(Booking.booking_id).filter(Booking.booking_id == booking_id).first()
            if not exists:
                return booking_id
            logger.debug(f"Booking id collision on {booking_id}, retrying")

    def _reserve_seats(self, flight: Flight, fare_class: str, count: int, leg: str) -> None:
        if not self.inventory.reserve(flight, fare_class, count):
            raise InsufficientSeats(
                available=self.inventory.available(flight, fare_class),
                requested=count,
                seat_class=fare_class,
                leg=leg
            )

    def _persist_booking(
        self,
        booking_id: str,
        request: BookingRequest,
        departure_flight: Flight,
        return_flight: Optional[Flight],
        fare_class: str,
        passenger_types: List[PassengerType],
        total_amount: Decimal,
        promo: Optional[Promotion],
        now: datetime
    ) -> Booking:
        customer = request.customer_info
        booking = Booking(
            booking_id=booking_id,
            departure_flight_id=departure_flight.id,
            return_flight_id=return_flight.id if return_flight else None,
            is_round_trip=return_flight is not None,
            contact_name=customer.full_name,
            email=customer.email,
            phone=customer.phone,
            travel_class=fare_class,
            total_amount=total_amount,
            booking_time=now,
            payment_status=PaymentStatus.UNPAID.value,
            promo_code=promo.code if promo else None,
            passengers_info=self._passenger_counts(request, passenger_types)
        )
        self.db.add(booking)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise StorageConstraintViolation(
                "Failed to create booking due to database constraint",
                constraint=str(e.orig)
            ) from e

        services = request.selected_services
        try:
            for passenger, passenger_type in zip(request.passengers, passenger_types):
                self.db.add(BookingDetail(
                    booking_id=booking_id,
                    full_name=passenger.full_name,
                    gender=passenger.gender or "UNKNOWN",
                    dob=passenger.dob.isoformat() if passenger.dob else None,
                    passport_number=passenger.id_number or "UNKNOWN_ID",
                    passenger_type=passenger_type.value,
                    luggage_weight=settings.CHECKED_LUGGAGE_KG if services and services.luggage else 0,
                    insurance=bool(services and services.insurance),
                    meal=bool(services and services.wants_meal)
                ))
            self.db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error inserting passenger booking details: {e}")
            raise BookingPersistenceFailed(
                f"Failed to save passenger details: {e}", booking_id=booking_id
            ) from e

        if request.payment_method:
            method = request.payment_method
            if method not in {m.value for m in PaymentMethod}:
                logger.warning(
                    f"Invalid payment method: {method}. Defaulting to {settings.DEFAULT_PAYMENT_METHOD}."
                )
                method = settings.DEFAULT_PAYMENT_METHOD
            self.db.add(Payment(
                booking_id=booking_id,
                method=method,
                transaction_info=request.transaction_info,
                payment_date=now
            ))
            try:
                self.db.flush()
            except IntegrityError as e:
                raise StorageConstraintViolation(
                    "Failed to record payment due to database constraint",
                    constraint=str(e.orig)
                ) from e

        return booking

    def _passenger_counts(self, request: BookingRequest, passenger_types: List[PassengerType]) -> Dict[str, int]:
        if request.passenger_counts:
            return request.passenger_counts.model_dump(by_alias=True)
        return {
            "numAdults": passenger_types.count(PassengerType.ADULT),
            "numChildren": passenger_types.count(PassengerType.CHILD),
            "numInfants": passenger_types.count(PassengerType.INFANT)
        }

    def _restore_seats(self, booking: Booking) -> int:
        passenger_count = self.db.query(func.count(BookingDetail.detail_id)).filter(
            BookingDetail.booking_id == booking.booking_id
        ).scalar() or 0
        fare_class = booking.travel_class or FareClass.ECONOMY.value

        departure_flight = FlightService.get_flight(self.db, booking.departure_flight_id)
        if departure_flight:
            self.inventory.release(departure_flight, fare_class, passenger_count)

        if booking.is_round_trip and booking.return_flight_id:
            return_flight = FlightService.get_flight(self.db, booking.return_flight_id)
            if return_flight:
                self.inventory.release(return_flight, fare_class, passenger_count)

        return passenger_count

    def _get_booking_row(self, booking_id: str) -> Booking:
        booking = self.db.query(Booking).populate_existing().filter(
            Booking.booking_id == booking_id
        ).first()
        if not booking:
            raise BookingNotFound(booking_id)
        return booking
