"""Host frame timestamps to tick deltas."""


class FrameClock:
    """Turns a stream of frame timestamps (ms) into elapsed deltas.

    The first timestamp after construction or `reset()` only sets the
    baseline and yields 0.
    """

    def __init__(self) -> None:
        self._last: float | None = None

    @property
    def has_baseline(self) -> bool:
        return self._last is not None

    def advance(self, timestamp_ms: float) -> float:
        """Return ms since the previous timestamp (never negative)."""
        last = self._last
        self._last = timestamp_ms
        if last is None:
            return 0.0
        return max(0.0, timestamp_ms - last)

    def reset(self) -> None:
        """Forget the baseline (tick stream suspended)."""
        self._last = None
