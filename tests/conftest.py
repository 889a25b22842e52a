"""Shared fixtures for raffle_engine tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from raffle_engine.chain.clock import ManualClock
from raffle_engine.chain.ledger import InMemoryLedger, new_address
from raffle_engine.keeper import KeeperDaemon
from raffle_engine.models.config import KeeperConfig, RaffleConfig, WEI_PER_ETH
from raffle_engine.raffle.engine import Raffle
from raffle_engine.storage.sqlite import SQLiteStateStore
from raffle_engine.vrf.coordinator import LocalVRFCoordinator

ENTRANCE_FEE = WEI_PER_ETH // 10  # 0.1 ETH
INTERVAL = 30
STARTING_BALANCE = 10 * WEI_PER_ETH

OWNER = new_address("owner")
RAFFLE_ADDRESS = new_address("raffle")
COORDINATOR_ADDRESS = new_address("coordinator")

PLAYER_A = new_address("player-a")
PLAYER_B = new_address("player-b")
PLAYER_C = new_address("player-c")
PLAYER_D = new_address("player-d")
PLAYERS = [PLAYER_A, PLAYER_B, PLAYER_C, PLAYER_D]


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add raffle parameters to the report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Entrance Fee (wei)"] = str(ENTRANCE_FEE)
    meta["Draw Interval (s)"] = str(INTERVAL)
    meta["Raffle Address"] = RAFFLE_ADDRESS
    meta["Coordinator Address"] = COORDINATOR_ADDRESS


def make_test_config(**overrides) -> RaffleConfig:
    """Build a RaffleConfig suitable for testing."""
    defaults = dict(
        entrance_fee=ENTRANCE_FEE,
        interval=INTERVAL,
        subscription_id=588,
        callback_gas_limit=500_000,
        request_confirmations=3,
    )
    defaults.update(overrides)
    return RaffleConfig(**defaults)


@pytest.fixture
def raffle_config():
    return make_test_config()


@pytest.fixture
def clock():
    return ManualClock(start=1_700_000_000)


@pytest.fixture
def ledger():
    """Ledger with every test player funded."""
    book = InMemoryLedger()
    for player in PLAYERS:
        book.set_balance(player, STARTING_BALANCE)
    return book


@pytest.fixture
def coordinator():
    return LocalVRFCoordinator(COORDINATOR_ADDRESS)


@pytest.fixture
def raffle(raffle_config, coordinator, ledger, clock):
    """Freshly deployed raffle wired to the local coordinator."""
    return Raffle(
        config=raffle_config,
        coordinator=coordinator,
        ledger=ledger,
        clock=clock,
        address=RAFFLE_ADDRESS,
        owner=OWNER,
    )


@pytest.fixture
async def store():
    """Initialized in-memory SQLiteStateStore."""
    s = SQLiteStateStore(":memory:")
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def keeper(raffle, store):
    """Keeper without a local coordinator; tests fulfill requests themselves."""
    return KeeperDaemon(raffle, store, KeeperConfig(check_interval=0, error_backoff=0))
