"""Drag gestures to wheel rotation and release velocity."""

from dataclasses import dataclass
import logging
import math

from prizewheel.wheel.rotation import RotationState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PointerSample:
    """One pointer position during a drag.

    Attributes:
        y: Vertical position in pixels (screen coordinates, down is positive)
        t: Timestamp in milliseconds
    """
    y: float
    t: float

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.y) and math.isfinite(self.t)


class InputTranslator:
    """Converts vertical drag samples into rotation and angular velocity.

    The drag tracks the pointer directly: every pixel of vertical
    movement turns the wheel by `sensitivity` degrees. Velocity is the
    latest instantaneous estimate, normalized to a `frame_ms` frame.
    """

    def __init__(
        self,
        sensitivity: float = 0.5,
        frame_ms: float = 16.0,
        max_velocity: float = 50.0,
        spin_threshold: float = 2.0,
    ) -> None:
        self.sensitivity = sensitivity
        self.frame_ms = frame_ms
        self.max_velocity = max_velocity
        self.spin_threshold = spin_threshold
        self._previous: PointerSample | None = None

    @property
    def is_tracking(self) -> bool:
        return self._previous is not None

    def begin(self, sample: PointerSample) -> None:
        """Start a drag at `sample`."""
        if not sample.is_finite:
            logger.warning(f"Ignoring non-finite drag start: {sample}")
            # The first finite move becomes the baseline
            self._previous = None
            return
        self._previous = sample

    def move(self, state: RotationState, sample: PointerSample) -> float:
        """Apply one drag sample. Returns the rotation delta applied."""
        if not sample.is_finite:
            logger.warning(f"Ignoring non-finite drag sample: {sample}")
            return 0.0
        previous = self._previous
        if previous is None:
            self._previous = sample
            return 0.0

        delta_rotation = (sample.y - previous.y) * self.sensitivity
        if not math.isfinite(state.rotation_degrees + delta_rotation):
            logger.warning(f"Ignoring drag sample that overflows rotation: {sample}")
            return 0.0
        state.rotation_degrees += delta_rotation

        dt = sample.t - previous.t
        if dt > 0:
            state.angular_velocity = delta_rotation / (dt / self.frame_ms)

        self._previous = sample
        return delta_rotation

    def release(self, state: RotationState) -> bool:
        """End the drag.

        Clamps the velocity to `max_velocity` (sign preserved) and
        returns True when the release is fast enough to count as a spin.
        """
        self._previous = None
        velocity = state.angular_velocity
        if abs(velocity) > self.max_velocity:
            velocity = math.copysign(self.max_velocity, velocity)
            state.angular_velocity = velocity
        return abs(velocity) > self.spin_threshold
