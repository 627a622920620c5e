"""Rotation state of the wheel."""

from dataclasses import dataclass

from prizewheel.core.state import WheelPhase
from prizewheel.wheel.resolver import normalize_degrees


@dataclass
class RotationState:
    """Accumulated rotation and angular velocity.

    Attributes:
        rotation_degrees: Unbounded; keeps accumulating across full turns
        angular_velocity: Degrees per normalized 16ms frame, signed
        phase: Current wheel phase
    """
    rotation_degrees: float = 0.0
    angular_velocity: float = 0.0
    phase: WheelPhase = WheelPhase.IDLE

    @property
    def normalized_degrees(self) -> float:
        """Rotation folded into [0, 360) for display."""
        return normalize_degrees(self.rotation_degrees)
