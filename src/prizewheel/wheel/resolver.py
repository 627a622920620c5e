"""Winner resolution: which slice sits under the pointer.

Angles follow the canvas convention: 0 degrees points to 3 o'clock and
angles grow clockwise. Prize 0's slice starts at 0 degrees and the
pointer is fixed at the top (270 degrees). Moving the pointer or the
slice origin changes every result.
"""

import math

POINTER_DEGREES = 270.0


def normalize_degrees(degrees: float) -> float:
    """Fold an angle into [0, 360)."""
    return ((degrees % 360) + 360) % 360


def arc_degrees(num_prizes: int) -> float:
    """Angular span of one slice."""
    if num_prizes < 1:
        raise ValueError(f"num_prizes must be positive, got {num_prizes}")
    return 360 / num_prizes


def pointer_angle(rotation_degrees: float) -> float:
    """Wheel-local angle currently under the pointer, in [0, 360)."""
    normalized = normalize_degrees(rotation_degrees)
    return ((POINTER_DEGREES - normalized) + 360) % 360


def resolve(rotation_degrees: float, num_prizes: int) -> int:
    """Index of the prize under the pointer.

    Slices are half-open, `[i*arc, (i+1)*arc)`, so a pointer exactly on
    a boundary picks the lower index. The result depends only on
    `rotation_degrees mod 360` and `num_prizes`.

    Raises:
        ValueError: If num_prizes < 1 or the rotation is not finite.
    """
    if not math.isfinite(rotation_degrees):
        raise ValueError(f"rotation must be finite, got {rotation_degrees}")
    arc = arc_degrees(num_prizes)
    index = math.floor(pointer_angle(rotation_degrees) / arc)
    # Float edge cases at exactly 360
    return max(0, min(num_prizes - 1, index))


def slice_bounds(index: int, num_prizes: int) -> tuple[float, float]:
    """Wheel-local `[start, end)` degrees of a slice."""
    if not 0 <= index < num_prizes:
        raise IndexError(f"slice {index} out of range for {num_prizes} prizes")
    arc = arc_degrees(num_prizes)
    return index * arc, (index + 1) * arc
