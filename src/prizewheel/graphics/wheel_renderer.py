"""Render collaborator: draws the wheel into an RGB frame buffer.

Slice i covers wheel-local angles [i*arc, (i+1)*arc), 0 degrees at
3 o'clock, clockwise; the whole wheel is then turned by the rotation.
The pointer sits fixed at the top.
"""

from dataclasses import dataclass
from typing import Callable, Sequence
import math

import numpy as np

from prizewheel.core.events import Event, EventBus, EventType
from prizewheel.graphics.primitives import (
    Buffer,
    Color,
    clear,
    draw_circle,
    fill_triangle,
    new_buffer,
)

# Deep greens and darks
WHEEL_COLORS: list[Color] = [
    (15, 61, 46),
    (26, 30, 28),
    (20, 90, 58),
    (37, 37, 37),
    (31, 122, 80),
    (17, 17, 17),
]
BACKGROUND_COLOR: Color = (5, 8, 7)
SEPARATOR_COLOR: Color = (5, 8, 7)
RIM_COLOR: Color = (31, 122, 80)
HUB_COLOR: Color = (224, 224, 224)
POINTER_COLOR: Color = (224, 224, 224)
TEXT_COLOR: Color = (224, 224, 224)


@dataclass(frozen=True)
class LabelAnchor:
    """Where and at what angle to draw one prize label."""
    label: str
    x: float
    y: float
    angle: float  # Screen degrees, clockwise from 3 o'clock


def slice_color(index: int) -> Color:
    """Fill color of slice `index`."""
    return WHEEL_COLORS[index % len(WHEEL_COLORS)]


class WheelRenderer:
    """Draws slices, separators, rim, hub and pointer with numpy masks."""

    def __init__(self, size: int = 480, margin: int = 14, separator_px: float = 2.0):
        self.size = size
        self.cx = size / 2
        self.cy = size / 2
        self.radius = size / 2 - margin
        self.separator_px = separator_px

        # Per-pixel polar coordinates, computed once
        ys, xs = np.mgrid[:size, :size]
        dx = xs + 0.5 - self.cx
        dy = ys + 0.5 - self.cy
        self._theta = np.degrees(np.arctan2(dy, dx)) % 360
        self._dist = np.hypot(dx, dy)
        self._inside = self._dist <= self.radius

        self.frame: Buffer = new_buffer(size, size, BACKGROUND_COLOR)
        self.anchors: list[LabelAnchor] = []

    def render(self, prizes: Sequence[str], rotation: float) -> Buffer:
        """Draw the wheel turned by `rotation` degrees and return the frame."""
        n = len(prizes)
        if n < 1:
            raise ValueError("Cannot render a wheel without prizes")
        arc = 360 / n

        local = (self._theta - rotation) % 360
        index = np.minimum((local // arc).astype(np.int64), n - 1)
        palette = np.array([slice_color(i) for i in range(n)], dtype=np.uint8)

        frame = self.frame
        clear(frame, BACKGROUND_COLOR)
        frame[self._inside] = palette[index[self._inside]]

        # Separators: arc-length distance to the nearest slice boundary
        offset = local % arc
        to_edge = np.minimum(offset, arc - offset)
        edge_px = np.radians(to_edge) * self._dist
        separators = self._inside & (edge_px < self.separator_px / 2)
        frame[separators] = SEPARATOR_COLOR

        draw_circle(frame, self.cx, self.cy, self.radius, RIM_COLOR, filled=False, thickness=3)
        draw_circle(frame, self.cx, self.cy, self.radius * 0.08, HUB_COLOR)
        self._draw_pointer(frame)

        self.anchors = self.label_anchors(prizes, rotation)
        return frame

    def _draw_pointer(self, frame: Buffer) -> None:
        """Downward triangle whose tip dips just inside the rim at the top."""
        tip_y = self.cy - self.radius + self.radius * 0.08
        base_y = max(0.0, self.cy - self.radius - self.radius * 0.05)
        half_width = self.radius * 0.06
        fill_triangle(
            frame,
            (self.cx - half_width, base_y),
            (self.cx + half_width, base_y),
            (self.cx, tip_y),
            POINTER_COLOR,
        )

    def label_anchors(self, prizes: Sequence[str], rotation: float) -> list[LabelAnchor]:
        """Label positions at 65% radius along each slice's center line."""
        n = len(prizes)
        arc = 360 / n
        anchors = []
        for i, label in enumerate(prizes):
            angle = (i * arc + arc / 2 + rotation) % 360
            rad = math.radians(angle)
            anchors.append(LabelAnchor(
                label=label,
                x=self.cx + math.cos(rad) * self.radius * 0.65,
                y=self.cy + math.sin(rad) * self.radius * 0.65,
                angle=angle,
            ))
        return anchors

    def on_wheel_updated(self, event: Event) -> None:
        prizes = event.data.get("prizes")
        rotation = event.data.get("display_rotation", event.data.get("rotation", 0.0))
        if prizes:
            self.render(prizes, rotation)

    def attach(self, event_bus: EventBus) -> Callable[[], None]:
        """Redraw on every WHEEL_UPDATED. Returns an unsubscribe function."""
        return event_bus.subscribe(EventType.WHEEL_UPDATED, self.on_wheel_updated)
