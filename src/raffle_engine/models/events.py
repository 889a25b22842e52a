"""Events emitted by the raffle engine.

Events are buffered during a transaction and only published once it commits,
so a reverted operation never leaks a notification.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Entered:
    """A participant paid in and joined the current round."""

    participant: str
    amount: int  # wei
    timestamp: int


@dataclass(frozen=True)
class DrawRequested:
    """Entry closed and randomness was requested."""

    request_id: int
    participant_count: int
    timestamp: int


@dataclass(frozen=True)
class WinnerPicked:
    """Randomness arrived, the winner was selected and paid."""

    winner: str
    prize: int  # wei
    request_id: int
    timestamp: int


@dataclass(frozen=True)
class DrawCancelled:
    """The owner abandoned an in-flight draw and reopened entry."""

    request_id: int
    timestamp: int


RaffleEvent = Union[Entered, DrawRequested, WinnerPicked, DrawCancelled]

EVENT_KINDS: dict[type, str] = {
    Entered: "entered",
    DrawRequested: "draw_requested",
    WinnerPicked: "winner_picked",
    DrawCancelled: "draw_cancelled",
}


def event_kind(event: RaffleEvent) -> str:
    return EVENT_KINDS[type(event)]
