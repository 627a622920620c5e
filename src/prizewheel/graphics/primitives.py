"""Basic drawing primitives for wheel frame buffers."""

from typing import Tuple
import numpy as np
from numpy.typing import NDArray

# Type aliases
Color = Tuple[int, int, int]
Point = Tuple[float, float]
Buffer = NDArray[np.uint8]


def new_buffer(width: int, height: int, color: Color = (0, 0, 0)) -> Buffer:
    """Allocate an RGB buffer of shape (height, width, 3)."""
    buffer = np.zeros((height, width, 3), dtype=np.uint8)
    buffer[:, :] = color
    return buffer


def clear(buffer: Buffer, color: Color = (0, 0, 0)) -> None:
    """Clear buffer to a solid color."""
    buffer[:, :] = color


def draw_circle(
    buffer: Buffer,
    cx: float,
    cy: float,
    radius: float,
    color: Color,
    filled: bool = True,
    thickness: float = 1.0,
) -> None:
    """Draw a circle on the buffer.

    Args:
        buffer: Target numpy array (height, width, 3)
        cx: Center x coordinate
        cy: Center y coordinate
        radius: Circle radius in pixels
        color: RGB color tuple
        filled: If True, fill circle; if False, draw a ring of `thickness`
        thickness: Ring width for outlines
    """
    h, w = buffer.shape[:2]
    y_indices, x_indices = np.ogrid[:h, :w]
    dist = np.sqrt((x_indices + 0.5 - cx) ** 2 + (y_indices + 0.5 - cy) ** 2)

    if filled:
        mask = dist <= radius
    else:
        mask = np.abs(dist - radius) <= thickness / 2
    buffer[mask] = color


def fill_triangle(
    buffer: Buffer,
    p1: Point,
    p2: Point,
    p3: Point,
    color: Color,
) -> None:
    """Fill a triangle using edge functions over its bounding box."""
    h, w = buffer.shape[:2]
    xs = (p1[0], p2[0], p3[0])
    ys = (p1[1], p2[1], p3[1])
    x0, x1 = max(0, int(min(xs))), min(w, int(max(xs)) + 1)
    y0, y1 = max(0, int(min(ys))), min(h, int(max(ys)) + 1)
    if x0 >= x1 or y0 >= y1:
        return

    py, px = np.mgrid[y0:y1, x0:x1]
    px = px + 0.5
    py = py + 0.5

    def edge(a: Point, b: Point) -> NDArray[np.float64]:
        return (b[0] - a[0]) * (py - a[1]) - (b[1] - a[1]) * (px - a[0])

    e1 = edge(p1, p2)
    e2 = edge(p2, p3)
    e3 = edge(p3, p1)
    mask = ((e1 >= 0) & (e2 >= 0) & (e3 >= 0)) | ((e1 <= 0) & (e2 <= 0) & (e3 <= 0))
    buffer[y0:y1, x0:x1][mask] = color
