"""StateStore protocol - persists raffle history for the keeper and frontends."""

from __future__ import annotations

from typing import Protocol

from raffle_engine.models.events import RaffleEvent
from raffle_engine.models.records import ActivityRecord, EventRecord, RoundRecord


class StateStore(Protocol):
    """Persists engine events, draw rounds and keeper activity."""

    # ── Lifecycle ──────────────────────────────────────────

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        ...

    async def close(self) -> None:
        ...

    # ── Events & rounds ────────────────────────────────────

    async def record_event(self, event: RaffleEvent, session: str = "") -> None:
        """Store an event and update the matching round of the session."""
        ...

    async def get_events(self, kind: str | None = None) -> list[EventRecord]:
        ...

    async def get_rounds(
        self, limit: int = 20, session: str | None = None
    ) -> list[RoundRecord]:
        ...

    async def get_round_by_request(
        self, request_id: int, session: str | None = None
    ) -> RoundRecord | None:
        ...

    async def get_total_paid_out(self, session: str | None = None) -> int:
        ...

    # ── Activity log ───────────────────────────────────────

    async def log_activity(
        self,
        event_type: str,
        message: str,
        request_id: int | None = None,
        amount: int | None = None,
    ) -> None:
        ...

    async def get_recent_activity(self, limit: int = 50) -> list[ActivityRecord]:
        ...
