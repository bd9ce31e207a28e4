from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from flight_booking.database import get_db
from flight_booking.exceptions import FlightNotFound
from flight_booking.flights.schemas import (
    FareClass, FlightCreate, FlightUpdate, FlightSearch, FlightSnapshot, FlightStatus
)
from flight_booking.flights.service import FlightService

router = APIRouter()

@router.get("/", response_model=List[FlightSnapshot])
def list_flights(
    departure: Optional[str] = Query(None, description="Departure airport code"),
    destination: Optional[str] = Query(None, description="Arrival airport code"),
    depart_date: Optional[date] = Query(None, alias="departDate", description="Departure date (YYYY-MM-DD)"),
    seat_class: Optional[FareClass] = Query(None, alias="seatClass", description="Sellable fare class"),
    flight_status: Optional[FlightStatus] = Query(None, alias="status", description="Operational status"),
    db: Session = Depends(get_db)
):
    """Search flights"""
    search = FlightSearch(
        departure=departure,
        destination=destination,
        depart_date=depart_date,
        seat_class=seat_class,
        status=flight_status
    )
    flights = FlightService.search_flights(db, search)
    return [FlightService.format_flight_for_client(f) for f in flights]

@router.get("/{reference}", response_model=FlightSnapshot)
def get_flight(reference: str, db: Session = Depends(get_db)):
    """Get a flight by store ID or display code"""
    flight = FlightService.resolve_flight(db, reference)
    if not flight:
        raise FlightNotFound(reference)
    return FlightService.format_flight_for_client(flight)

@router.post("/", response_model=FlightSnapshot, status_code=status.HTTP_201_CREATED)
def create_flight(data: FlightCreate, db: Session = Depends(get_db)):
    """Create a new flight"""
    flight = FlightService.create_flight(db, data)
    return FlightService.format_flight_for_client(flight)

@router.put("/{reference}", response_model=FlightSnapshot)
def update_flight(reference: str, data: FlightUpdate, db: Session = Depends(get_db)):
    """Update a flight by store ID or display code"""
    flight = FlightService.update_flight(db, reference, data)
    return FlightService.format_flight_for_client(flight)

@router.delete("/{reference}")
def delete_flight(reference: str, db: Session = Depends(get_db)):
    """Delete a flight that has no bookings"""
    FlightService.delete_flight(db, reference)
    return {"success": True, "message": "Flight deleted successfully"}
