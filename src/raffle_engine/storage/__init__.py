"""State store implementations."""

from raffle_engine.storage.sqlite import SQLiteStateStore

__all__ = ["SQLiteStateStore"]
