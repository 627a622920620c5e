"""Spin models.

A controller runs exactly one policy for its whole lifetime:

- DecayPolicy: continuous integration. Velocity carries the wheel and a
  per-tick friction factor bleeds it off until it drops below the stop
  threshold.
- TimedPolicy: the final angle is decided up front and the spin resolves
  after a fixed duration of tick time. Drag momentum is ignored.
"""

from abc import ABC, abstractmethod
import logging
import random

from prizewheel.animation.easing import Easing, interpolate
from prizewheel.config.settings import Settings
from prizewheel.core.state import WheelPhase
from prizewheel.wheel.rotation import RotationState

logger = logging.getLogger(__name__)


class SpinPolicy(ABC):
    """Strategy that owns how a spin advances and when it stops."""

    name: str = "base"

    @abstractmethod
    def launch(self, state: RotationState, rng: random.Random) -> None:
        """Start a spin from the spin button."""

    @abstractmethod
    def release(self, state: RotationState, rng: random.Random) -> None:
        """Start a spin from a fast drag release (velocity already clamped)."""

    @abstractmethod
    def settle(self, state: RotationState) -> None:
        """A slow drag release returned the wheel to idle."""

    @abstractmethod
    def is_active(self, state: RotationState) -> bool:
        """Whether ticks still change anything."""

    @abstractmethod
    def step(self, state: RotationState, dt_ms: float) -> bool:
        """Advance by `dt_ms`. Returns True when a running spin should resolve."""

    def finish(self, state: RotationState) -> None:
        """The spin resolved."""
        state.angular_velocity = 0.0

    def display_rotation(self, state: RotationState) -> float:
        """Angle the wheel should be drawn at."""
        return state.rotation_degrees


class DecayPolicy(SpinPolicy):
    """Frame-stepped exponential velocity decay."""

    name = "decay"

    def __init__(
        self,
        friction: float = 0.99,
        frame_ms: float = 16.0,
        stop_velocity: float = 0.1,
        rest_velocity: float = 0.01,
        impulse_min: float = 30.0,
        impulse_max: float = 50.0,
    ) -> None:
        self.friction = friction
        self.frame_ms = frame_ms
        self.stop_velocity = stop_velocity
        self.rest_velocity = rest_velocity
        self.impulse_min = impulse_min
        self.impulse_max = impulse_max

    def launch(self, state: RotationState, rng: random.Random) -> None:
        state.angular_velocity = rng.uniform(self.impulse_min, self.impulse_max)
        logger.debug(f"Spin impulse: {state.angular_velocity:.2f} deg/frame")

    def release(self, state: RotationState, rng: random.Random) -> None:
        # Keep the released momentum
        pass

    def settle(self, state: RotationState) -> None:
        # Residual velocity coasts down under friction while idle
        pass

    def is_active(self, state: RotationState) -> bool:
        return (
            state.phase == WheelPhase.SPINNING
            or abs(state.angular_velocity) > self.rest_velocity
        )

    def step(self, state: RotationState, dt_ms: float) -> bool:
        state.rotation_degrees += state.angular_velocity * (dt_ms / self.frame_ms)
        state.angular_velocity *= self.friction
        return (
            state.phase == WheelPhase.SPINNING
            and abs(state.angular_velocity) < self.stop_velocity
        )


class TimedPolicy(SpinPolicy):
    """Fixed-duration spin to a target chosen at launch."""

    name = "timed"

    def __init__(
        self,
        duration_ms: float = 5000.0,
        min_extra_turns: float = 7.0,
        extra_turns_range: float = 5.0,
        easing: Easing = Easing.EASE_OUT_CUBIC,
    ) -> None:
        self.duration_ms = duration_ms
        self.min_extra_turns = min_extra_turns
        self.extra_turns_range = extra_turns_range
        self.easing = easing
        self._running = False
        self._elapsed_ms = 0.0
        self._start_rotation = 0.0
        self._total_rotation = 0.0

    @property
    def elapsed_ms(self) -> float:
        return self._elapsed_ms

    def launch(self, state: RotationState, rng: random.Random) -> None:
        extra_turns = self.min_extra_turns + rng.random() * self.extra_turns_range
        random_stop = rng.random() * 360
        self._total_rotation = extra_turns * 360 + random_stop
        self._start_rotation = state.rotation_degrees
        self._elapsed_ms = 0.0
        self._running = True

        state.rotation_degrees += self._total_rotation
        state.angular_velocity = 0.0
        logger.debug(
            f"Timed spin: {self._total_rotation:.1f} deg over {self.duration_ms:.0f}ms"
        )

    def release(self, state: RotationState, rng: random.Random) -> None:
        self.launch(state, rng)

    def settle(self, state: RotationState) -> None:
        # No velocity model, nothing coasts
        state.angular_velocity = 0.0

    def is_active(self, state: RotationState) -> bool:
        return self._running and state.phase == WheelPhase.SPINNING

    def step(self, state: RotationState, dt_ms: float) -> bool:
        self._elapsed_ms += dt_ms
        return self._elapsed_ms >= self.duration_ms

    def finish(self, state: RotationState) -> None:
        super().finish(state)
        self._running = False

    def display_rotation(self, state: RotationState) -> float:
        if not self._running:
            return state.rotation_degrees
        progress = self._elapsed_ms / self.duration_ms
        return interpolate(
            self._start_rotation,
            self._start_rotation + self._total_rotation,
            progress,
            self.easing,
        )


def build_policy(settings: Settings) -> SpinPolicy:
    """Create the spin policy selected in settings."""
    if settings.policy == "timed":
        timed = settings.timed
        return TimedPolicy(
            duration_ms=timed.duration_ms,
            min_extra_turns=timed.min_extra_turns,
            extra_turns_range=timed.extra_turns_range,
        )

    physics = settings.physics
    return DecayPolicy(
        friction=physics.friction,
        frame_ms=physics.frame_ms,
        stop_velocity=physics.stop_velocity,
        rest_velocity=physics.rest_velocity,
        impulse_min=physics.impulse_min,
        impulse_max=physics.impulse_max,
    )
