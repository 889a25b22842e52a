"""Data models for the raffle engine."""

from raffle_engine.models.config import (
    AccountsConfig,
    EngineConfig,
    KeeperConfig,
    RaffleConfig,
    WEI_PER_ETH,
)
from raffle_engine.models.events import (
    DrawCancelled,
    DrawRequested,
    Entered,
    RaffleEvent,
    WinnerPicked,
    event_kind,
)
from raffle_engine.models.records import (
    ActivityRecord,
    EventRecord,
    FulfillmentResult,
    RandomWordsRequest,
    RandomWordsRequested,
    RoundRecord,
    UpkeepCheck,
)
from raffle_engine.models.snapshots import RaffleSnapshot, RoundSnapshot
from raffle_engine.models.state import ALLOWED_OPERATIONS, Operation, RaffleState

__all__ = [
    "AccountsConfig", "EngineConfig", "KeeperConfig", "RaffleConfig", "WEI_PER_ETH",
    "DrawCancelled", "DrawRequested", "Entered", "RaffleEvent", "WinnerPicked",
    "event_kind",
    "ActivityRecord", "EventRecord", "FulfillmentResult", "RandomWordsRequest",
    "RandomWordsRequested", "RoundRecord", "UpkeepCheck",
    "RaffleSnapshot", "RoundSnapshot",
    "ALLOWED_OPERATIONS", "Operation", "RaffleState",
]
