"""Randomness protocols - the request side and the callback side."""

from __future__ import annotations

from typing import Protocol, Sequence

from raffle_engine.models.records import RandomWordsRequest


class RandomnessConsumer(Protocol):
    """Contract that receives random words from a coordinator."""

    @property
    def address(self) -> str:
        ...

    def raw_fulfill_random_words(
        self, sender: str, request_id: int, random_words: Sequence[int]
    ) -> None:
        """Deliver random words. Only the coordinator itself may call this."""
        ...


class RandomnessCoordinator(Protocol):
    """External randomness service the raffle requests words from."""

    @property
    def address(self) -> str:
        ...

    def request_random_words(
        self, consumer: RandomnessConsumer, request: RandomWordsRequest
    ) -> int:
        """Register a request and return its id. Fulfillment arrives later."""
        ...
