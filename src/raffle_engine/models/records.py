"""Record types for engine queries, coordinator results and persisted history."""

from __future__ import annotations

from dataclasses import dataclass

from raffle_engine.models.state import RaffleState


@dataclass(frozen=True)
class UpkeepCheck:
    """Result of the draw-readiness check, with the per-condition diagnostics."""

    upkeep_needed: bool
    is_open: bool
    interval_elapsed: bool
    has_balance: bool
    has_players: bool
    state: RaffleState
    balance: int  # wei
    participant_count: int
    elapsed: int  # seconds since the last draw


@dataclass(frozen=True)
class RandomWordsRequest:
    """Parameters sent to the randomness coordinator with each draw."""

    key_hash: str
    subscription_id: int
    request_confirmations: int
    callback_gas_limit: int
    num_words: int = 1


@dataclass(frozen=True)
class RandomWordsRequested:
    """Coordinator-side log entry for an accepted request."""

    request_id: int
    consumer: str
    request: RandomWordsRequest


@dataclass
class FulfillmentResult:
    """Outcome of delivering random words to a consumer."""

    request_id: int
    success: bool
    random_words: list[int]
    error: str | None = None


@dataclass
class RoundRecord:
    """One draw as persisted in the history store."""

    id: int
    session: str  # deployment the request id belongs to
    request_id: int
    status: str  # "calculating", "completed", "cancelled"
    participant_count: int
    requested_at: int
    winner: str | None = None
    prize: int | None = None  # wei
    completed_at: int | None = None


@dataclass
class EventRecord:
    """A raffle event as persisted in the history store."""

    id: int
    session: str
    kind: str
    participant: str | None
    request_id: int | None
    amount: int | None  # wei
    timestamp: int


@dataclass
class ActivityRecord:
    """A single activity log entry."""

    id: int
    event_type: str
    message: str
    request_id: int | None
    amount: int | None  # wei
    created_at: str
