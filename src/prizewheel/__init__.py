"""PRIZEWHEEL - spinning prize wheel with drag physics."""

__version__ = "0.1.0"
