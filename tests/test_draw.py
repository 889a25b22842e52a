"""Draw readiness and draw triggering."""

from __future__ import annotations

import pytest

from raffle_engine.errors import RaffleError, UpkeepNotNeeded
from raffle_engine.models.events import DrawRequested
from raffle_engine.models.state import RaffleState
from raffle_engine.raffle.engine import Raffle

from tests.conftest import (
    COORDINATOR_ADDRESS,
    ENTRANCE_FEE,
    INTERVAL,
    OWNER,
    PLAYER_A,
    PLAYERS,
    RAFFLE_ADDRESS,
    make_test_config,
)
from tests.factories import enter_players, make_calculating, make_ready
from tests.mocks import FailingCoordinator, RecordingCoordinator


# ── Readiness check ───────────────────────────────────────────────


def test_not_ready_without_players(raffle, clock):
    clock.advance(INTERVAL + 1)

    check = raffle.check_draw_ready()

    assert not check.upkeep_needed
    assert check.is_open and check.interval_elapsed
    assert not check.has_balance
    assert not check.has_players


def test_not_ready_before_interval(raffle, clock):
    enter_players(raffle, [PLAYER_A])
    clock.advance(INTERVAL - 1)

    check = raffle.check_draw_ready()

    assert not check.upkeep_needed
    assert not check.interval_elapsed
    assert check.elapsed == INTERVAL - 1


def test_ready_exactly_at_interval(raffle, clock):
    enter_players(raffle, [PLAYER_A])
    clock.advance(INTERVAL)

    assert raffle.check_draw_ready().upkeep_needed


def test_ready_when_all_conditions_hold(raffle, clock):
    make_ready(raffle, clock, PLAYERS)

    check = raffle.check_draw_ready()

    assert check.upkeep_needed
    assert check.state == RaffleState.OPEN
    assert check.balance == ENTRANCE_FEE * len(PLAYERS)
    assert check.participant_count == len(PLAYERS)


def test_not_ready_while_calculating(raffle, clock):
    make_calculating(raffle, clock, [PLAYER_A])

    check = raffle.check_draw_ready()

    assert not check.upkeep_needed
    assert not check.is_open
    assert check.has_players and check.has_balance and check.interval_elapsed


def test_check_has_no_side_effects(raffle, clock):
    make_ready(raffle, clock, [PLAYER_A])
    before = (raffle.state, raffle.participants, raffle.last_timestamp, raffle.balance)

    for _ in range(3):
        raffle.check_draw_ready(b"\x01\x02")

    assert (raffle.state, raffle.participants, raffle.last_timestamp, raffle.balance) == before
    assert len(raffle.events) == 1


# ── Performing the draw ───────────────────────────────────────────


def test_perform_draw_on_empty_raffle(raffle, clock):
    clock.advance(INTERVAL + 1)

    with pytest.raises(UpkeepNotNeeded) as exc_info:
        raffle.perform_draw()

    err = exc_info.value
    assert (err.balance, err.participant_count, err.state) == (0, 0, RaffleState.OPEN)
    assert raffle.state == RaffleState.OPEN


def test_perform_draw_before_interval(raffle, clock):
    enter_players(raffle, [PLAYER_A])

    with pytest.raises(UpkeepNotNeeded) as exc_info:
        raffle.perform_draw()

    assert exc_info.value.participant_count == 1
    assert exc_info.value.balance == ENTRANCE_FEE


def test_perform_draw_moves_to_calculating(raffle, clock, coordinator):
    make_ready(raffle, clock, PLAYERS)

    request_id = raffle.perform_draw(b"ignored")

    assert raffle.state == RaffleState.CALCULATING
    assert raffle.pending_request_id == request_id
    assert coordinator.pending_requests == [request_id]
    assert raffle.events[-1] == DrawRequested(
        request_id=request_id, participant_count=len(PLAYERS), timestamp=clock.now(),
    )


def test_perform_draw_sends_configured_request(ledger, clock):
    coordinator = RecordingCoordinator(COORDINATOR_ADDRESS, first_id=42)
    config = make_test_config(subscription_id=7, callback_gas_limit=250_000)
    raffle = Raffle(config, coordinator, ledger, clock, RAFFLE_ADDRESS, OWNER)
    make_ready(raffle, clock, [PLAYER_A])

    assert raffle.perform_draw() == 42

    [request] = coordinator.requests
    assert request.key_hash == config.key_hash
    assert request.subscription_id == 7
    assert request.callback_gas_limit == 250_000
    assert request.request_confirmations == 3
    assert request.num_words == 1
    assert coordinator.consumers == [raffle]


def test_second_draw_rejected_while_calculating(raffle, clock, coordinator):
    make_calculating(raffle, clock, [PLAYER_A])
    clock.advance(INTERVAL * 10)

    with pytest.raises(UpkeepNotNeeded) as exc_info:
        raffle.perform_draw()

    assert exc_info.value.state == RaffleState.CALCULATING
    assert len(coordinator.pending_requests) == 1


def test_coordinator_failure_reverts_draw(ledger, clock):
    raffle = Raffle(
        make_test_config(), FailingCoordinator(COORDINATOR_ADDRESS),
        ledger, clock, RAFFLE_ADDRESS, OWNER,
    )
    make_ready(raffle, clock, [PLAYER_A])

    with pytest.raises(RuntimeError):
        raffle.perform_draw()

    assert raffle.state == RaffleState.OPEN
    assert raffle.pending_request_id is None
    assert not any(isinstance(e, DrawRequested) for e in raffle.events)


def test_engine_errors_share_a_base_class():
    assert issubclass(UpkeepNotNeeded, RaffleError)
