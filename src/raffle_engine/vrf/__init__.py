"""Randomness coordinator implementations."""

from raffle_engine.vrf.coordinator import LocalVRFCoordinator, derive_random_words

__all__ = ["LocalVRFCoordinator", "derive_random_words"]
