"""Core framework components for the prize wheel."""

from .state import WheelPhase, PhaseMachine
from .events import EventBus, Event, EventType
from .errors import (
    WheelError,
    CapacityError,
    ValidationError,
    IntegrityError,
    StateError,
    PrizeIndexError,
)

__all__ = [
    "WheelPhase",
    "PhaseMachine",
    "EventBus",
    "Event",
    "EventType",
    "WheelError",
    "CapacityError",
    "ValidationError",
    "IntegrityError",
    "StateError",
    "PrizeIndexError",
]
