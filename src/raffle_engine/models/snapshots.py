"""JSON-serializable snapshot models for the Data API and CLI output."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


def to_dict(obj: Any) -> dict:
    """Recursively convert a dataclass to a plain dict."""
    return asdict(obj)


@dataclass
class RoundSnapshot:
    request_id: int
    status: str
    participant_count: int
    requested_at: int
    winner: str | None = None
    prize_wei: int | None = None
    prize_eth: str | None = None  # "0.0300 ETH"
    completed_at: int | None = None


@dataclass
class RaffleSnapshot:
    state: str
    entrance_fee_wei: int
    entrance_fee_eth: str
    interval: int
    balance_wei: int
    balance_eth: str
    participants: list[str]
    participant_count: int
    last_timestamp: int
    seconds_until_draw: int  # 0 once the interval has elapsed
    upkeep_needed: bool
    pending_request_id: int | None = None
    recent_winner: str | None = None
    total_paid_out_wei: int = 0
    recent_rounds: list[RoundSnapshot] = field(default_factory=list)
