"""
Flight Inventory Module

This module owns the flight catalogue and its seat inventory:

- Flight lookup by store ID or display code (airline code + flight number)
- Flight search and operator create/update/delete
- Per-class seat ledger with atomic conditional reservations

Key Components:
- service.py: Flight catalogue queries, invariants and client snapshots
- inventory.py: Seat reservation and release against the flights table
- router.py: FastAPI endpoints for the flight catalogue
- schemas.py: Pydantic models and fare class / status enumerations
"""

from .router import router
from .service import FlightService
from .inventory import InventoryLedger
from .schemas import FareClass, FlightStatus, FlightCreate, FlightUpdate, FlightSearch, FlightSnapshot

__all__ = [
    "router",
    "FlightService",
    "InventoryLedger",
    "FareClass",
    "FlightStatus",
    "FlightCreate",
    "FlightUpdate",
    "FlightSearch",
    "FlightSnapshot"
]
