"""Protocol interfaces for the raffle engine's collaborators."""

from raffle_engine.interfaces.clock import Clock
from raffle_engine.interfaces.coordinator import RandomnessConsumer, RandomnessCoordinator
from raffle_engine.interfaces.ledger import Ledger
from raffle_engine.interfaces.store import StateStore

__all__ = [
    "Clock",
    "RandomnessConsumer", "RandomnessCoordinator",
    "Ledger",
    "StateStore",
]
