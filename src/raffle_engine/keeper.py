"""Automation keeper - polls draw readiness and triggers draws."""

from __future__ import annotations

import asyncio
import logging
import signal
import uuid

from raffle_engine.chain.clock import SystemClock
from raffle_engine.chain.local import deploy_local
from raffle_engine.errors import RaffleError
from raffle_engine.interfaces.store import StateStore
from raffle_engine.models.config import EngineConfig, KeeperConfig
from raffle_engine.models.events import (
    DrawCancelled,
    DrawRequested,
    RaffleEvent,
    WinnerPicked,
)
from raffle_engine.raffle.engine import Raffle
from raffle_engine.storage.sqlite import SQLiteStateStore
from raffle_engine.vrf.coordinator import LocalVRFCoordinator

log = logging.getLogger(__name__)


class KeeperDaemon:
    """Upkeep loop for a raffle.

    Each cycle persists the events the raffle committed since the last
    cycle, then asks the raffle whether a draw is due and performs it. On a
    local chain there is no external oracle, so when a local coordinator is
    given the keeper also answers the pending randomness requests.
    """

    def __init__(
        self,
        raffle: Raffle,
        store: StateStore,
        cfg: KeeperConfig,
        local_coordinator: LocalVRFCoordinator | None = None,
        session: str | None = None,
    ) -> None:
        self.raffle = raffle
        # Request ids restart with every deployment, so history is keyed per session
        self.session = session or uuid.uuid4().hex
        self.store = store
        self._cfg = cfg
        self._local_coordinator = local_coordinator
        self._running = False
        self._queued: list[RaffleEvent] = []
        raffle.subscribe(self._queued.append)

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Run cycles until stop() is called."""
        log.info("Starting keeper for raffle %s", self.raffle.address)
        log.info("  Check interval: %ds", self._cfg.check_interval)
        log.info("  History session: %s", self.session)
        self._running = True
        await self.store.log_activity("keeper_started", "Keeper started")

        try:
            await self._main_loop()
        finally:
            await self.flush_events()
            await self.store.log_activity("keeper_stopped", "Keeper stopped")
            log.info("Keeper shut down cleanly")

    async def stop(self) -> None:
        log.info("Stop requested")
        self._running = False

    async def _main_loop(self) -> None:
        while self._running:
            try:
                await self.run_once()
                await asyncio.sleep(self._cfg.check_interval)

            except asyncio.CancelledError:
                log.info("Keeper loop cancelled")
                break
            except Exception as exc:
                log.error("Keeper loop error: %s", exc, exc_info=True)
                await self.store.log_activity("error", str(exc))
                await asyncio.sleep(self._cfg.error_backoff)

    async def run_once(self) -> int | None:
        """One upkeep cycle. Returns the request id if a draw was performed."""
        await self.flush_events()

        check = self.raffle.check_draw_ready()
        if not check.upkeep_needed:
            log.debug(
                "Upkeep not needed: open=%s elapsed=%s balance=%s players=%s",
                check.is_open, check.interval_elapsed, check.has_balance, check.has_players,
            )
            if self._local_coordinator is not None:
                await self._answer_pending()
            return None

        try:
            request_id = self.raffle.perform_draw()
        except RaffleError as exc:
            log.warning("Draw failed: %s", exc)
            await self.store.log_activity("draw_failed", str(exc))
            return None

        await self.flush_events()
        if self._local_coordinator is not None:
            await self._answer_pending()
        return request_id

    async def flush_events(self) -> None:
        """Persist events committed since the last flush."""
        while self._queued:
            event = self._queued[0]
            await self.store.record_event(event, session=self.session)
            self._queued.pop(0)
            await self._log_event(event)

    async def _answer_pending(self) -> None:
        coordinator = self._local_coordinator
        for request_id in coordinator.pending_requests:
            result = coordinator.fulfill_random_words(request_id)
            if not result.success:
                await self.store.log_activity(
                    "fulfillment_failed",
                    f"Request {request_id} failed: {result.error}",
                    request_id=request_id,
                )
        await self.flush_events()

    async def _log_event(self, event: RaffleEvent) -> None:
        if isinstance(event, DrawRequested):
            await self.store.log_activity(
                "draw_requested",
                f"Draw requested with {event.participant_count} participants",
                request_id=event.request_id,
            )
        elif isinstance(event, WinnerPicked):
            await self.store.log_activity(
                "winner_picked",
                f"{event.winner} won {event.prize} wei",
                request_id=event.request_id,
                amount=event.prize,
            )
        elif isinstance(event, DrawCancelled):
            await self.store.log_activity(
                "draw_cancelled",
                f"Draw {event.request_id} cancelled by owner",
                request_id=event.request_id,
            )


async def run_keeper(cfg: EngineConfig) -> None:
    """Entry point: deploy on a wall-clock local chain and run the keeper."""
    deployment = deploy_local(cfg, clock=SystemClock())
    store = SQLiteStateStore(cfg.db_path)
    await store.initialize()
    keeper = KeeperDaemon(
        deployment.raffle, store, cfg.keeper, local_coordinator=deployment.coordinator,
    )

    loop = asyncio.get_running_loop()

    def _signal_handler():
        asyncio.ensure_future(keeper.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    try:
        await keeper.start()
    finally:
        await store.close()
