"""Wire a raffle onto an in-memory chain with a local coordinator."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from raffle_engine.chain.clock import ManualClock, SystemClock
from raffle_engine.chain.ledger import InMemoryLedger
from raffle_engine.models.config import EngineConfig
from raffle_engine.raffle.engine import Raffle
from raffle_engine.vrf.coordinator import LocalVRFCoordinator

log = logging.getLogger(__name__)


@dataclass
class LocalDeployment:
    raffle: Raffle
    ledger: InMemoryLedger
    coordinator: LocalVRFCoordinator
    clock: ManualClock | SystemClock


def deploy_local(
    cfg: EngineConfig, clock: ManualClock | SystemClock | None = None
) -> LocalDeployment:
    """Deploy the configured raffle on a fresh in-memory chain."""
    clock = clock or ManualClock()
    ledger = InMemoryLedger()
    coordinator = LocalVRFCoordinator(cfg.accounts.coordinator)
    raffle = Raffle(
        config=cfg.raffle,
        coordinator=coordinator,
        ledger=ledger,
        clock=clock,
        address=cfg.accounts.raffle,
        owner=cfg.accounts.owner,
    )
    log.info("Local deployment ready (coordinator %s)", coordinator.address)
    return LocalDeployment(raffle=raffle, ledger=ledger, coordinator=coordinator, clock=clock)
