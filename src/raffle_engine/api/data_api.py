"""Data API aggregator - builds snapshots from engine and store state."""

from __future__ import annotations

import logging

from raffle_engine.interfaces.store import StateStore
from raffle_engine.models.config import WEI_PER_ETH
from raffle_engine.models.records import RoundRecord
from raffle_engine.models.snapshots import RaffleSnapshot, RoundSnapshot
from raffle_engine.raffle.engine import Raffle

log = logging.getLogger(__name__)


def eth_str(wei: int) -> str:
    """Format wei as human-readable ETH string."""
    return f"{wei / WEI_PER_ETH:.4f} ETH"


def _round_to_snapshot(record: RoundRecord) -> RoundSnapshot:
    return RoundSnapshot(
        request_id=record.request_id,
        status=record.status,
        participant_count=record.participant_count,
        requested_at=record.requested_at,
        winner=record.winner,
        prize_wei=record.prize,
        prize_eth=eth_str(record.prize) if record.prize is not None else None,
        completed_at=record.completed_at,
    )


class DataAggregator:
    """Builds JSON-serializable snapshots of a raffle and its history."""

    def __init__(
        self,
        raffle: Raffle,
        store: StateStore | None = None,
        session: str | None = None,
    ) -> None:
        self._raffle = raffle
        self._store = store
        self._session = session

    async def get_snapshot(self, rounds: int = 5) -> RaffleSnapshot:
        raffle = self._raffle
        check = raffle.check_draw_ready()

        total_paid = 0
        recent: list[RoundSnapshot] = []
        if self._store is not None:
            total_paid = await self._store.get_total_paid_out(self._session)
            records = await self._store.get_rounds(rounds, self._session)
            recent = [_round_to_snapshot(r) for r in records]

        return RaffleSnapshot(
            state=raffle.state.value,
            entrance_fee_wei=raffle.entrance_fee,
            entrance_fee_eth=eth_str(raffle.entrance_fee),
            interval=raffle.interval,
            balance_wei=check.balance,
            balance_eth=eth_str(check.balance),
            participants=raffle.participants,
            participant_count=check.participant_count,
            last_timestamp=raffle.last_timestamp,
            seconds_until_draw=max(0, raffle.interval - check.elapsed),
            upkeep_needed=check.upkeep_needed,
            pending_request_id=raffle.pending_request_id,
            recent_winner=raffle.recent_winner,
            total_paid_out_wei=total_paid,
            recent_rounds=recent,
        )

    async def get_rounds(self, limit: int = 20) -> list[RoundSnapshot]:
        if self._store is None:
            return []
        return [_round_to_snapshot(r) for r in await self._store.get_rounds(limit, self._session)]
