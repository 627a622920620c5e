"""Ordered prize list shown on the wheel."""

from typing import Iterable, Iterator
import logging

from prizewheel.core.errors import (
    CapacityError,
    ValidationError,
    IntegrityError,
    PrizeIndexError,
)

logger = logging.getLogger(__name__)

MIN_PRIZES = 2
MAX_PRIZES = 20

DEFAULT_PRIZES = (
    "STICKER PACK",
    "COURSE GUIDE",
    "T-SHIRT",
    "USB KEY",
    "HACKME VOUCHER",
    "CTF PASS",
    "LANYARD",
    "RETRY",
)


def normalize_label(label: str) -> str:
    """Trim and upper-case a prize label.

    Raises:
        ValidationError: If the label is empty after trimming.
    """
    if not isinstance(label, str):
        raise ValidationError(f"Prize label must be a string, got {type(label).__name__}")
    value = label.strip().upper()
    if not value:
        raise ValidationError("Prize label must not be empty")
    return value


class PrizeSet:
    """Ordered prize labels with a 2..20 size invariant.

    Positions identify prizes, so duplicate labels are allowed. The set
    only changes through `add` and `remove`; persisting the result is
    the caller's job.
    """

    def __init__(self, labels: Iterable[str]) -> None:
        items = [normalize_label(label) for label in labels]
        if len(items) < MIN_PRIZES:
            raise IntegrityError(
                f"A wheel needs at least {MIN_PRIZES} prizes, got {len(items)}"
            )
        if len(items) > MAX_PRIZES:
            raise CapacityError(
                f"A wheel holds at most {MAX_PRIZES} prizes, got {len(items)}"
            )
        self._items: list[str] = items

    @classmethod
    def default(cls) -> "PrizeSet":
        """The fixed prize list used when nothing is persisted."""
        return cls(DEFAULT_PRIZES)

    def add(self, label: str) -> str:
        """Append a prize. Returns the normalized label that was stored."""
        if len(self._items) >= MAX_PRIZES:
            raise CapacityError(f"Wheel is full ({MAX_PRIZES} prizes)")
        value = normalize_label(label)
        self._items.append(value)
        logger.debug(f"Prize added: {value} ({len(self._items)} total)")
        return value

    def remove(self, index: int) -> str:
        """Remove the prize at `index`. Returns the removed label."""
        if len(self._items) - 1 < MIN_PRIZES:
            raise IntegrityError(f"Minimum {MIN_PRIZES} sectors required")
        if not 0 <= index < len(self._items):
            raise PrizeIndexError(
                f"Prize index {index} out of range (0..{len(self._items) - 1})"
            )
        value = self._items.pop(index)
        logger.debug(f"Prize removed: {value} ({len(self._items)} total)")
        return value

    def all(self) -> tuple[str, ...]:
        """Read-only ordered snapshot."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._items))

    def __getitem__(self, index: int) -> str:
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrizeSet):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"PrizeSet({self._items!r})"
