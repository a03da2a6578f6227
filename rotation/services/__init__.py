"""
Core services for the application.

This package contains the rotation calculators, the calendar/clock
abstractions, the placement repository protocol and the rotation service
that ties them together.
"""

from .clock import Calendar, Clock, FixedClock, LocalCalendar, SystemClock
from .repository import InMemoryPlacementRepository, PlacementNotFoundError, PlacementRepository
from .rotation_service import RotationService

__all__ = [
    "Calendar",
    "Clock",
    "FixedClock",
    "LocalCalendar",
    "SystemClock",
    "PlacementRepository",
    "InMemoryPlacementRepository",
    "PlacementNotFoundError",
    "RotationService",
]
