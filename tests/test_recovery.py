"""Failed payouts and the owner's path out of a stuck draw."""

from __future__ import annotations

import pytest

from raffle_engine.errors import (
    NonexistentRequest,
    NotOwner,
    RaffleNotCalculating,
    TransferFailed,
    UnknownRequest,
)
from raffle_engine.models.events import DrawCancelled, WinnerPicked
from raffle_engine.models.state import RaffleState

from tests.conftest import COORDINATOR_ADDRESS, ENTRANCE_FEE, OWNER, PLAYER_A, PLAYER_B
from tests.factories import make_calculating
from tests.mocks import RejectingReceiver


@pytest.fixture
def rejecting_winner(ledger):
    address = "0x" + "dd" * 20
    ledger.set_balance(address, ENTRANCE_FEE * 10)
    return RejectingReceiver(ledger, address)


def test_failed_payout_rolls_back_fulfillment(raffle, clock, rejecting_winner):
    request_id = make_calculating(raffle, clock, [rejecting_winner.address, PLAYER_A])
    last_timestamp = raffle.last_timestamp
    events_before = list(raffle.events)
    clock.advance(10)

    with pytest.raises(TransferFailed) as exc_info:
        raffle.raw_fulfill_random_words(COORDINATOR_ADDRESS, request_id, [0])

    assert exc_info.value.recipient == rejecting_winner.address
    assert exc_info.value.amount == 2 * ENTRANCE_FEE
    assert raffle.state == RaffleState.CALCULATING
    assert raffle.pending_request_id == request_id
    assert raffle.participants == [rejecting_winner.address, PLAYER_A]
    assert raffle.balance == 2 * ENTRANCE_FEE
    assert raffle.recent_winner is None
    assert raffle.last_timestamp == last_timestamp
    assert raffle.events == events_before


def test_coordinator_reports_failed_fulfillment(raffle, clock, coordinator, rejecting_winner):
    request_id = make_calculating(raffle, clock, [rejecting_winner.address])

    result = coordinator.fulfill_random_words(request_id, [0])

    assert not result.success
    assert "failed" in (result.error or "")
    assert raffle.state == RaffleState.CALCULATING
    # The coordinator consumed the request; it will not be delivered again
    with pytest.raises(NonexistentRequest):
        coordinator.fulfill_random_words(request_id, [0])


def test_owner_cancels_stuck_draw_and_redraws(raffle, clock, coordinator, ledger, rejecting_winner):
    request_id = make_calculating(raffle, clock, [rejecting_winner.address, PLAYER_B])
    coordinator.fulfill_random_words(request_id, [0])
    assert raffle.state == RaffleState.CALCULATING

    cancelled = raffle.cancel_draw(OWNER)

    assert cancelled == request_id
    assert raffle.state == RaffleState.OPEN
    assert raffle.pending_request_id is None
    assert raffle.participants == [rejecting_winner.address, PLAYER_B]
    assert raffle.balance == 2 * ENTRANCE_FEE
    assert raffle.events[-1] == DrawCancelled(request_id=request_id, timestamp=clock.now())

    # Interval already elapsed, so the next draw can go straight away
    assert raffle.check_draw_ready().upkeep_needed
    retry = raffle.perform_draw()
    assert retry != request_id
    coordinator.fulfill_random_words(retry, [1])

    assert raffle.recent_winner == PLAYER_B
    assert raffle.balance == 0
    assert isinstance(raffle.events[-1], WinnerPicked)


def test_cancelled_request_cannot_be_fulfilled_late(raffle, clock):
    request_id = make_calculating(raffle, clock, [PLAYER_A])
    raffle.cancel_draw(OWNER)
    retry = raffle.perform_draw()

    with pytest.raises(UnknownRequest):
        raffle.raw_fulfill_random_words(COORDINATOR_ADDRESS, request_id, [0])

    assert raffle.pending_request_id == retry


def test_cancel_requires_owner(raffle, clock):
    make_calculating(raffle, clock, [PLAYER_A])

    with pytest.raises(NotOwner):
        raffle.cancel_draw(PLAYER_A)

    assert raffle.state == RaffleState.CALCULATING


def test_cancel_requires_draw_in_flight(raffle):
    with pytest.raises(RaffleNotCalculating):
        raffle.cancel_draw(OWNER)
