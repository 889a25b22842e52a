"""Clock protocol - the host chain's block timestamp."""

from __future__ import annotations

from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        """Current timestamp in whole seconds."""
        ...
