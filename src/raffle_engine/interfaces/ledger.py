"""Ledger protocol - the host chain's balance book."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol


class Ledger(Protocol):
    """Holds native-currency balances and moves value between addresses."""

    def balance_of(self, address: str) -> int:
        ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move value. Returns False when the recipient rejects it."""
        ...

    def atomic(self) -> AbstractContextManager[None]:
        """Restore all balances if the enclosed block raises."""
        ...
