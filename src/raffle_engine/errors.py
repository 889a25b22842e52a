"""Exception hierarchy for the raffle engine and its host collaborators.

Every engine error aborts the triggering operation atomically: storage,
ledger balances and buffered events are restored before the error escapes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from raffle_engine.models.state import RaffleState


class RaffleError(Exception):
    """Base class for errors raised by the raffle engine."""


class InsufficientPayment(RaffleError):
    """Entry payment below the entrance fee."""

    def __init__(self, value: int, entrance_fee: int) -> None:
        self.value = value
        self.entrance_fee = entrance_fee
        super().__init__(
            f"payment of {value} wei is below the entrance fee of {entrance_fee} wei"
        )


class RaffleNotOpen(RaffleError):
    """Entry attempted while the raffle is not accepting entries."""

    def __init__(self, state: RaffleState) -> None:
        self.state = state
        super().__init__(f"raffle is not open (state={state.value})")


class RaffleNotCalculating(RaffleError):
    """Fulfillment or cancellation attempted with no draw in flight."""

    def __init__(self, state: RaffleState) -> None:
        self.state = state
        super().__init__(f"raffle is not calculating a winner (state={state.value})")


class UpkeepNotNeeded(RaffleError):
    """Draw triggered before the raffle is ready.

    Carries the same diagnostics the readiness check reports so the caller
    can tell which condition failed.
    """

    def __init__(self, balance: int, participant_count: int, state: RaffleState) -> None:
        self.balance = balance
        self.participant_count = participant_count
        self.state = state
        super().__init__(
            f"upkeep not needed (balance={balance}, "
            f"participants={participant_count}, state={state.value})"
        )


class TransferFailed(RaffleError):
    """The prize payout could not be delivered to the winner."""

    def __init__(self, recipient: str, amount: int) -> None:
        self.recipient = recipient
        self.amount = amount
        super().__init__(f"transfer of {amount} wei to {recipient} failed")


class UnknownRequest(RaffleError):
    """Fulfillment for a request id this raffle is not waiting on."""

    def __init__(self, request_id: int, pending_request_id: int | None) -> None:
        self.request_id = request_id
        self.pending_request_id = pending_request_id
        super().__init__(
            f"request {request_id} does not match pending request {pending_request_id}"
        )


class OnlyCoordinatorCanFulfill(RaffleError):
    """Fulfillment callback invoked by someone other than the coordinator."""

    def __init__(self, sender: str, coordinator: str) -> None:
        self.sender = sender
        self.coordinator = coordinator
        super().__init__(f"only coordinator {coordinator} can fulfill, got {sender}")


class NotOwner(RaffleError):
    """Owner-only operation invoked by another account."""

    def __init__(self, sender: str, owner: str) -> None:
        self.sender = sender
        self.owner = owner
        super().__init__(f"{sender} is not the raffle owner")


# ── Host ledger ────────────────────────────────────────


class LedgerError(Exception):
    """Base class for host ledger errors."""


class InsufficientFunds(LedgerError):
    def __init__(self, address: str, balance: int, amount: int) -> None:
        self.address = address
        self.balance = balance
        self.amount = amount
        super().__init__(f"{address} holds {balance} wei, cannot send {amount} wei")


# ── Randomness coordinator ─────────────────────────────


class CoordinatorError(Exception):
    """Base class for randomness coordinator errors."""


class NonexistentRequest(CoordinatorError):
    def __init__(self, request_id: int) -> None:
        self.request_id = request_id
        super().__init__(f"no pending randomness request with id {request_id}")


class InvalidRequest(CoordinatorError):
    """Randomness request parameters outside the coordinator's limits."""


# ── Configuration ──────────────────────────────────────


class ConfigError(ValueError):
    """Invalid configuration value."""
