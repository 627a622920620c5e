"""Wheel audio cues."""

from .engine import WheelAudio

__all__ = ["WheelAudio"]
