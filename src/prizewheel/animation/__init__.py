"""Presentation easing for the prize wheel."""

from .easing import Easing, get_easing, interpolate

__all__ = ["Easing", "get_easing", "interpolate"]
