"""Deceleration curves for the presented wheel angle.

A curve maps spin progress in [0, 1] to the share of the total turn
already shown. Only ease-out shapes exist: a wheel starts fast and
comes to rest.
"""

from enum import Enum
from typing import Callable
import math

EasingFunc = Callable[[float], float]


class Easing(Enum):
    """Curve shapes. The value is the polynomial power, or "expo"."""

    LINEAR = 1
    EASE_OUT_QUAD = 2
    EASE_OUT_CUBIC = 3
    EASE_OUT_QUART = 4
    EASE_OUT_EXPO = "expo"


def ease_out(progress: float, power: float) -> float:
    """Polynomial ease-out: 1 - (1 - t)^power."""
    return 1 - (1 - progress) ** power


def ease_out_expo(progress: float) -> float:
    if progress >= 1.0:
        return 1.0
    return 1 - math.pow(2, -10 * progress)


def get_easing(easing: Easing | str) -> EasingFunc:
    """Curve for an `Easing` member or its lower-case name.

    Raises:
        ValueError: If the name is unknown
    """
    if isinstance(easing, str):
        try:
            easing = Easing[easing.upper()]
        except KeyError:
            raise ValueError(f"Unknown easing function: {easing}") from None

    if easing is Easing.EASE_OUT_EXPO:
        return ease_out_expo
    power = easing.value
    return lambda progress: ease_out(progress, power)


def interpolate(start: float, end: float, t: float, easing: Easing | str = Easing.LINEAR) -> float:
    """Value between `start` and `end` at progress `t` (clamped to [0, 1])."""
    curve = get_easing(easing)
    return start + (end - start) * curve(min(1.0, max(0.0, t)))
