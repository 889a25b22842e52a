"""Raffle state machine: states, operations and the transitions allowed in each."""

from __future__ import annotations

from enum import Enum


class RaffleState(str, Enum):
    """Lifecycle state of the raffle."""

    OPEN = "open"  # Accepting entries and draw triggers
    CALCULATING = "calculating"  # Waiting on the randomness callback

    def allows(self, operation: Operation) -> bool:
        return operation in ALLOWED_OPERATIONS[self]


class Operation(str, Enum):
    """State-changing entry points of the engine."""

    ENTER = "enter"
    PERFORM_DRAW = "perform_draw"
    FULFILL = "fulfill"
    CANCEL_DRAW = "cancel_draw"


ALLOWED_OPERATIONS: dict[RaffleState, frozenset[Operation]] = {
    RaffleState.OPEN: frozenset({Operation.ENTER, Operation.PERFORM_DRAW}),
    RaffleState.CALCULATING: frozenset({Operation.FULFILL, Operation.CANCEL_DRAW}),
}
