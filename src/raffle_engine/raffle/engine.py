"""Raffle engine - entry, draw trigger and randomness-driven payout.

Every state-changing call runs as one transaction: engine storage, ledger
balances and buffered events are restored if it raises. Bookkeeping always
completes before the engine calls out (randomness request, prize transfer),
so a reentrant call observes the post-update state.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Callable, Iterator, Sequence

from raffle_engine.errors import (
    InsufficientPayment,
    NotOwner,
    OnlyCoordinatorCanFulfill,
    RaffleNotCalculating,
    RaffleNotOpen,
    TransferFailed,
    UnknownRequest,
    UpkeepNotNeeded,
)
from raffle_engine.interfaces.clock import Clock
from raffle_engine.interfaces.coordinator import RandomnessCoordinator
from raffle_engine.interfaces.ledger import Ledger
from raffle_engine.models.config import RaffleConfig
from raffle_engine.models.events import (
    DrawCancelled,
    DrawRequested,
    Entered,
    RaffleEvent,
    WinnerPicked,
)
from raffle_engine.models.records import RandomWordsRequest, UpkeepCheck
from raffle_engine.models.state import Operation, RaffleState

log = logging.getLogger(__name__)

EventListener = Callable[[RaffleEvent], None]


@dataclass
class RaffleStorage:
    """Mutable contract storage, snapshotted per transaction."""

    state: RaffleState
    last_timestamp: int
    participants: list[str] = field(default_factory=list)
    pending_request_id: int | None = None
    recent_winner: str | None = None

    def copy(self) -> RaffleStorage:
        return replace(self, participants=list(self.participants))


class Raffle:
    """Single-fee raffle paying one winner per round."""

    def __init__(
        self,
        config: RaffleConfig,
        coordinator: RandomnessCoordinator,
        ledger: Ledger,
        clock: Clock,
        address: str,
        owner: str,
    ) -> None:
        self._config = config
        self._coordinator = coordinator
        self._ledger = ledger
        self._clock = clock
        self._address = address
        self._owner = owner

        self._storage = RaffleStorage(state=RaffleState.OPEN, last_timestamp=clock.now())

        self._depth = 0
        self._pending_events: list[RaffleEvent] = []
        self._listeners: list[EventListener] = []
        self.events: list[RaffleEvent] = []

        log.info(
            "Raffle %s deployed: fee=%d wei interval=%ds",
            address, config.entrance_fee, config.interval,
        )

    # ── Read accessors ─────────────────────────────────────

    @property
    def address(self) -> str:
        return self._address

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def config(self) -> RaffleConfig:
        return self._config

    @property
    def entrance_fee(self) -> int:
        return self._config.entrance_fee

    @property
    def interval(self) -> int:
        return self._config.interval

    @property
    def num_words(self) -> int:
        return self._config.num_words

    @property
    def request_confirmations(self) -> int:
        return self._config.request_confirmations

    @property
    def state(self) -> RaffleState:
        return self._storage.state

    @property
    def participants(self) -> list[str]:
        return list(self._storage.participants)

    @property
    def participant_count(self) -> int:
        return len(self._storage.participants)

    def get_participant(self, index: int) -> str:
        if not 0 <= index < len(self._storage.participants):
            raise IndexError(f"no participant at index {index}")
        return self._storage.participants[index]

    @property
    def last_timestamp(self) -> int:
        return self._storage.last_timestamp

    @property
    def recent_winner(self) -> str | None:
        return self._storage.recent_winner

    @property
    def pending_request_id(self) -> int | None:
        return self._storage.pending_request_id

    @property
    def balance(self) -> int:
        return self._ledger.balance_of(self._address)

    # ── Events ─────────────────────────────────────────────

    def subscribe(self, listener: EventListener) -> None:
        """Register a callback for committed events."""
        self._listeners.append(listener)

    def _emit(self, event: RaffleEvent) -> None:
        self._pending_events.append(event)

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        snapshot = self._storage.copy()
        mark = len(self._pending_events)
        self._depth += 1
        try:
            with self._ledger.atomic():
                yield
        except BaseException:
            self._storage = snapshot
            del self._pending_events[mark:]
            raise
        finally:
            self._depth -= 1

        if self._depth == 0:
            committed, self._pending_events = self._pending_events, []
            self.events.extend(committed)
            self._publish(committed)

    def _publish(self, committed: list[RaffleEvent]) -> None:
        # Runs after commit: listener failures are logged, never raised
        for event in committed:
            for listener in self._listeners:
                try:
                    listener(event)
                except Exception:
                    log.exception("Event listener %r failed on %s", listener, event)

    # ── Entry ──────────────────────────────────────────────

    def enter(self, sender: str, value: int) -> None:
        """Join the current round by paying at least the entrance fee."""
        with self._transaction():
            if value < self._config.entrance_fee:
                raise InsufficientPayment(value, self._config.entrance_fee)
            if not self._storage.state.allows(Operation.ENTER):
                raise RaffleNotOpen(self._storage.state)

            if not self._ledger.transfer(sender, self._address, value):
                raise TransferFailed(self._address, value)
            self._storage.participants.append(sender)

            self._emit(Entered(participant=sender, amount=value, timestamp=self._clock.now()))
            log.debug("Entered: %s (%d wei)", sender, value)

    # ── Draw ───────────────────────────────────────────────

    def check_draw_ready(self, check_data: bytes = b"") -> UpkeepCheck:
        """Report whether a draw may be performed now. Never mutates state."""
        storage = self._storage
        elapsed = self._clock.now() - storage.last_timestamp
        balance = self.balance

        is_open = storage.state.allows(Operation.PERFORM_DRAW)
        interval_elapsed = elapsed >= self._config.interval
        has_balance = balance > 0
        has_players = len(storage.participants) > 0

        return UpkeepCheck(
            upkeep_needed=is_open and interval_elapsed and has_balance and has_players,
            is_open=is_open,
            interval_elapsed=interval_elapsed,
            has_balance=has_balance,
            has_players=has_players,
            state=storage.state,
            balance=balance,
            participant_count=len(storage.participants),
            elapsed=elapsed,
        )

    def perform_draw(self, perform_data: bytes = b"") -> int:
        """Close entry and request randomness. Returns the request id."""
        with self._transaction():
            check = self.check_draw_ready()
            if not check.upkeep_needed:
                raise UpkeepNotNeeded(check.balance, check.participant_count, check.state)

            # Close entry before calling out to the coordinator
            self._storage.state = RaffleState.CALCULATING

            request = RandomWordsRequest(
                key_hash=self._config.key_hash,
                subscription_id=self._config.subscription_id,
                request_confirmations=self._config.request_confirmations,
                callback_gas_limit=self._config.callback_gas_limit,
                num_words=self._config.num_words,
            )
            request_id = self._coordinator.request_random_words(self, request)
            self._storage.pending_request_id = request_id

            self._emit(DrawRequested(
                request_id=request_id,
                participant_count=check.participant_count,
                timestamp=self._clock.now(),
            ))
            log.info(
                "Draw requested: request=%d participants=%d pot=%d wei",
                request_id, check.participant_count, check.balance,
            )
            return request_id

    # ── Fulfillment ────────────────────────────────────────

    def raw_fulfill_random_words(
        self, sender: str, request_id: int, random_words: Sequence[int]
    ) -> None:
        """Coordinator callback. Rejects any caller but the coordinator."""
        if sender != self._coordinator.address:
            raise OnlyCoordinatorCanFulfill(sender, self._coordinator.address)
        self._fulfill_random_words(request_id, random_words)

    def _fulfill_random_words(self, request_id: int, random_words: Sequence[int]) -> None:
        with self._transaction():
            storage = self._storage
            if not storage.state.allows(Operation.FULFILL):
                raise RaffleNotCalculating(storage.state)
            if request_id != storage.pending_request_id:
                raise UnknownRequest(request_id, storage.pending_request_id)
            if not random_words:
                raise ValueError("fulfillment carried no random words")

            index = random_words[0] % len(storage.participants)
            winner = storage.participants[index]

            now = self._clock.now()
            storage.participants = []
            storage.last_timestamp = now
            storage.state = RaffleState.OPEN
            storage.pending_request_id = None
            storage.recent_winner = winner

            prize = self.balance
            if not self._ledger.transfer(self._address, winner, prize):
                raise TransferFailed(winner, prize)

            self._emit(WinnerPicked(
                winner=winner, prize=prize, request_id=request_id,
                timestamp=now,
            ))
            log.info("Winner picked: %s (index %d) won %d wei", winner, index, prize)

    # ── Recovery ───────────────────────────────────────────

    def cancel_draw(self, sender: str) -> int:
        """Abandon the in-flight draw and reopen entry with the pool intact.

        Used when a fulfillment can never succeed, for example because the
        selected winner cannot receive funds. Returns the cancelled id.
        """
        with self._transaction():
            if sender != self._owner:
                raise NotOwner(sender, self._owner)
            storage = self._storage
            if not storage.state.allows(Operation.CANCEL_DRAW):
                raise RaffleNotCalculating(storage.state)

            request_id = storage.pending_request_id
            storage.pending_request_id = None
            storage.state = RaffleState.OPEN

            self._emit(DrawCancelled(request_id=request_id, timestamp=self._clock.now()))
            log.warning("Draw cancelled by owner: request=%s", request_id)
            return request_id
