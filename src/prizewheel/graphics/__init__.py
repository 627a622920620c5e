"""Wheel rendering into numpy frame buffers."""

from .wheel_renderer import WheelRenderer, LabelAnchor, slice_color, WHEEL_COLORS

__all__ = ["WheelRenderer", "LabelAnchor", "slice_color", "WHEEL_COLORS"]
