"""Prize list persistence."""

from .prize_store import PrizeStore, JsonPrizeStore, MemoryPrizeStore, load_or_default

__all__ = ["PrizeStore", "JsonPrizeStore", "MemoryPrizeStore", "load_or_default"]
