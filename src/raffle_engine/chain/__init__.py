"""Simulated host chain: balances and block time."""

from raffle_engine.chain.clock import ManualClock, SystemClock
from raffle_engine.chain.ledger import InMemoryLedger, new_address

__all__ = ["InMemoryLedger", "ManualClock", "SystemClock", "new_address"]
