"""The raffle state machine."""

from raffle_engine.raffle.engine import Raffle, RaffleStorage

__all__ = ["Raffle", "RaffleStorage"]
