"""In-memory host ledger with revertible transfers and receive hooks."""

from __future__ import annotations

import hashlib
import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from raffle_engine.errors import InsufficientFunds

log = logging.getLogger(__name__)

# Called after value lands on an address; raising or returning False rejects it.
ReceiveHook = Callable[[str, int], "bool | None"]


def new_address(label: str) -> str:
    """Deterministic 20-byte hex address for a human-readable label."""
    return "0x" + hashlib.sha256(label.encode("utf-8")).hexdigest()[:40]


class InMemoryLedger:
    """Native-currency balance book of the simulated chain.

    Recipients can register a receive hook to model contracts that run code
    when paid. A hook may call back into other contracts (reentrancy) or
    reject the payment, in which case the transfer and everything the hook
    did on this ledger is reverted and ``transfer`` returns False.
    """

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._receivers: dict[str, ReceiveHook] = {}

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def set_balance(self, address: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"balance must be non-negative (got {amount})")
        self._balances[address] = amount

    def register_receiver(self, address: str, hook: ReceiveHook) -> None:
        self._receivers[address] = hook

    def unregister_receiver(self, address: str) -> None:
        self._receivers.pop(address, None)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        saved = dict(self._balances)
        try:
            yield
        except BaseException:
            self._balances = saved
            raise

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        if amount < 0:
            raise ValueError(f"transfer amount must be non-negative (got {amount})")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientFunds(sender, balance, amount)

        saved = dict(self._balances)
        self._balances[sender] = balance - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

        hook = self._receivers.get(recipient)
        if hook is None:
            return True
        try:
            accepted = hook(sender, amount)
        except Exception as exc:
            log.warning("Transfer of %d wei to %s rejected: %s", amount, recipient, exc)
            self._balances = saved
            return False
        if accepted is False:
            log.warning("Transfer of %d wei to %s rejected by receiver", amount, recipient)
            self._balances = saved
            return False
        return True
