"""Typed rejections raised by the wheel engine.

None of these are fatal: each one means the requested operation was
refused and the engine state is unchanged.
"""


class WheelError(Exception):
    """Base class for rejected wheel operations."""


class CapacityError(WheelError):
    """Adding a prize would exceed the maximum wheel size."""


class ValidationError(WheelError, ValueError):
    """A prize label is empty after trimming."""


class IntegrityError(WheelError):
    """Removing a prize would drop the wheel below its minimum size."""


class StateError(WheelError):
    """The operation is not allowed in the current phase."""


class PrizeIndexError(WheelError, IndexError):
    """A prize index is out of bounds."""
