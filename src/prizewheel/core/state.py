"""
Phase machine for the prize wheel.

Phases:
    IDLE: Wheel at rest (or coasting on residual drag velocity)
    DRAGGING: Pointer is down, input drives the rotation directly
    SPINNING: A spin is running and will resolve a winner
    RESOLVED: Winner is shown, waiting for the claim action
"""

from enum import Enum, auto
from typing import Callable, Protocol
import logging

logger = logging.getLogger(__name__)


class WheelPhase(Enum):
    """Wheel phases."""
    IDLE = auto()
    DRAGGING = auto()
    SPINNING = auto()
    RESOLVED = auto()


class HasPhase(Protocol):
    phase: WheelPhase


PhaseListener = Callable[[WheelPhase, WheelPhase], None]


class PhaseMachine:
    """
    Validates and applies phase transitions on a state object.

    The machine does not own the phase value; it writes it onto the
    state it wraps so the rotation state stays the single record of
    where the wheel is.
    """

    # Valid phase transitions
    VALID_TRANSITIONS: list[tuple[WheelPhase, WheelPhase]] = [
        (WheelPhase.IDLE, WheelPhase.DRAGGING),
        (WheelPhase.IDLE, WheelPhase.SPINNING),  # Spin button

        (WheelPhase.DRAGGING, WheelPhase.SPINNING),  # Release-driven spin
        (WheelPhase.DRAGGING, WheelPhase.IDLE),  # Slow release

        (WheelPhase.SPINNING, WheelPhase.RESOLVED),

        (WheelPhase.RESOLVED, WheelPhase.IDLE),  # Claim
    ]

    def __init__(self, target: HasPhase) -> None:
        self._target = target
        self._listeners: list[PhaseListener] = []
        self._valid_transitions = set(self.VALID_TRANSITIONS)
        logger.debug(f"PhaseMachine initialized with phase: {target.phase.name}")

    @property
    def phase(self) -> WheelPhase:
        """Get current phase."""
        return self._target.phase

    def can_transition(self, to_phase: WheelPhase) -> bool:
        """Check if transition to given phase is valid."""
        return (self._target.phase, to_phase) in self._valid_transitions

    def transition(self, to_phase: WheelPhase) -> bool:
        """
        Attempt to transition to a new phase.

        Returns:
            True if transition successful, False otherwise
        """
        if not self.can_transition(to_phase):
            logger.warning(
                f"Invalid transition: {self._target.phase.name} -> {to_phase.name}"
            )
            return False

        old_phase = self._target.phase
        self._target.phase = to_phase
        logger.info(f"Phase transition: {old_phase.name} -> {to_phase.name}")

        for listener in self._listeners:
            try:
                listener(old_phase, to_phase)
            except Exception as e:
                logger.error(f"Error in phase listener: {e}")

        return True

    def add_listener(self, callback: PhaseListener) -> None:
        """Add a phase change listener."""
        self._listeners.append(callback)

    def remove_listener(self, callback: PhaseListener) -> None:
        """Remove a phase change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)
