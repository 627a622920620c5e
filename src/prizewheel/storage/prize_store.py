"""Prize list persistence.

The wheel only needs `load()` and `save()`. Stored data lives under a
single named record; anything missing or malformed reads as absent and
the caller falls back to the default prize list.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from prizewheel.core.errors import WheelError
from prizewheel.wheel.prizes import PrizeSet

logger = logging.getLogger(__name__)

DEFAULT_RECORD_KEY = "zeroday_prizes"


class PrizeStore(Protocol):
    """Load/save contract for the prize list."""

    def load(self) -> Optional[PrizeSet]:
        ...

    def save(self, prizes: PrizeSet) -> bool:
        ...


class MemoryPrizeStore:
    """Keeps the record in memory. Useful for embedding and tests."""

    def __init__(self, labels: Optional[list[str]] = None):
        self.record: Optional[list[str]] = list(labels) if labels is not None else None
        self.save_count = 0

    def load(self) -> Optional[PrizeSet]:
        if self.record is None:
            return None
        try:
            return PrizeSet(self.record)
        except WheelError as e:
            logger.warning(f"Stored prizes rejected: {e}")
            return None

    def save(self, prizes: PrizeSet) -> bool:
        self.record = list(prizes.all())
        self.save_count += 1
        return True


class JsonPrizeStore:
    """Stores the prize list as one named record in a JSON file.

    File layout:
        {"zeroday_prizes": ["STICKER PACK", "T-SHIRT", ...]}

    Other keys in the file are preserved on save.
    """

    def __init__(self, path: Path, record_key: str = DEFAULT_RECORD_KEY):
        self.path = Path(path)
        self.record_key = record_key

    def _read_document(self) -> Optional[dict]:
        """Read the whole JSON document, or None if unusable."""
        if not self.path.exists():
            return None
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read prize store {self.path}: {e}")
            return None
        if not isinstance(document, dict):
            logger.warning(f"Prize store {self.path} is not a JSON object")
            return None
        return document

    def load(self) -> Optional[PrizeSet]:
        document = self._read_document()
        if document is None:
            return None

        record = document.get(self.record_key)
        if not isinstance(record, list) or not all(isinstance(x, str) for x in record):
            logger.warning(f"Prize record '{self.record_key}' missing or malformed")
            return None

        try:
            prizes = PrizeSet(record)
        except WheelError as e:
            logger.warning(f"Stored prizes rejected: {e}")
            return None

        logger.info(f"Loaded {len(prizes)} prizes from {self.path}")
        return prizes

    def save(self, prizes: PrizeSet) -> bool:
        document = self._read_document() or {}
        document[self.record_key] = list(prizes.all())

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(
                json.dumps(document, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to save prizes to {self.path}: {e}")
            return False

        logger.debug(f"Saved {len(prizes)} prizes to {self.path}")
        return True


def load_or_default(store: PrizeStore) -> PrizeSet:
    """Load the stored prize list, or persist and return the default."""
    prizes = store.load()
    if prizes is not None:
        return prizes

    logger.info("No usable stored prizes, using defaults")
    prizes = PrizeSet.default()
    store.save(prizes)
    return prizes
