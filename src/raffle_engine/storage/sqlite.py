"""SQLite implementation of the StateStore protocol."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from raffle_engine.models.events import (
    DrawCancelled,
    DrawRequested,
    Entered,
    RaffleEvent,
    WinnerPicked,
    event_kind,
)
from raffle_engine.models.records import ActivityRecord, EventRecord, RoundRecord

SCHEMA = """
-- Raffle events in commit order
CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session TEXT NOT NULL DEFAULT '',
    kind TEXT NOT NULL,
    participant TEXT,
    request_id INTEGER,
    amount INTEGER,
    timestamp INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_events_kind ON events(kind);

-- One row per draw request; request ids restart with every deployment
CREATE TABLE IF NOT EXISTS rounds (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session TEXT NOT NULL DEFAULT '',
    request_id INTEGER NOT NULL,
    status TEXT NOT NULL DEFAULT 'calculating',
    participant_count INTEGER NOT NULL,
    requested_at INTEGER NOT NULL,
    winner TEXT,
    prize INTEGER,
    completed_at INTEGER,
    UNIQUE(session, request_id)
);
CREATE INDEX IF NOT EXISTS idx_rounds_status ON rounds(status);

-- Activity log
CREATE TABLE IF NOT EXISTS activity_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    event_type TEXT NOT NULL,
    message TEXT NOT NULL,
    request_id INTEGER,
    amount INTEGER,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_activity_created ON activity_log(created_at);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteStateStore:
    """SQLite-backed implementation of the StateStore protocol."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(SCHEMA)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    # ── Events & rounds ────────────────────────────────────

    async def record_event(self, event: RaffleEvent, session: str = "") -> None:
        """Store an event and update the matching round of this session."""
        participant = None
        request_id = None
        amount = None
        if isinstance(event, Entered):
            participant, amount = event.participant, event.amount
        elif isinstance(event, DrawRequested):
            request_id = event.request_id
            await self.db.execute(
                "INSERT INTO rounds (session, request_id, participant_count, requested_at)"
                " VALUES (?, ?, ?, ?)",
                (session, event.request_id, event.participant_count, event.timestamp),
            )
        elif isinstance(event, WinnerPicked):
            participant, request_id, amount = event.winner, event.request_id, event.prize
            await self.db.execute(
                "UPDATE rounds SET status='completed', winner=?, prize=?, completed_at=?"
                " WHERE session=? AND request_id=?",
                (event.winner, event.prize, event.timestamp, session, event.request_id),
            )
        elif isinstance(event, DrawCancelled):
            request_id = event.request_id
            await self.db.execute(
                "UPDATE rounds SET status='cancelled', completed_at=?"
                " WHERE session=? AND request_id=?",
                (event.timestamp, session, event.request_id),
            )

        await self.db.execute(
            "INSERT INTO events (session, kind, participant, request_id, amount, timestamp)"
            " VALUES (?, ?, ?, ?, ?, ?)",
            (session, event_kind(event), participant, request_id, amount, event.timestamp),
        )
        await self.db.commit()

    async def get_events(self, kind: str | None = None) -> list[EventRecord]:
        if kind:
            sql, params = "SELECT * FROM events WHERE kind=? ORDER BY id", (kind,)
        else:
            sql, params = "SELECT * FROM events ORDER BY id", ()
        async with self.db.execute(sql, params) as cur:
            return [
                EventRecord(
                    id=row["id"],
                    session=row["session"],
                    kind=row["kind"],
                    participant=row["participant"],
                    request_id=row["request_id"],
                    amount=row["amount"],
                    timestamp=row["timestamp"],
                )
                async for row in cur
            ]

    async def get_rounds(
        self, limit: int = 20, session: str | None = None
    ) -> list[RoundRecord]:
        if session is None:
            sql, params = "SELECT * FROM rounds ORDER BY id DESC LIMIT ?", (limit,)
        else:
            sql = "SELECT * FROM rounds WHERE session=? ORDER BY id DESC LIMIT ?"
            params = (session, limit)
        async with self.db.execute(sql, params) as cur:
            return [_row_to_round(row) async for row in cur]

    async def get_round_by_request(
        self, request_id: int, session: str | None = None
    ) -> RoundRecord | None:
        """Round for a request id; the most recent one unless a session is given."""
        if session is None:
            sql = "SELECT * FROM rounds WHERE request_id=? ORDER BY id DESC LIMIT 1"
            params: tuple = (request_id,)
        else:
            sql = "SELECT * FROM rounds WHERE session=? AND request_id=?"
            params = (session, request_id)
        async with self.db.execute(sql, params) as cur:
            row = await cur.fetchone()
            return _row_to_round(row) if row else None

    async def get_total_paid_out(self, session: str | None = None) -> int:
        sql = "SELECT COALESCE(SUM(prize), 0) as total FROM rounds WHERE status='completed'"
        params: tuple = ()
        if session is not None:
            sql += " AND session=?"
            params = (session,)
        async with self.db.execute(sql, params) as cur:
            row = await cur.fetchone()
            return row["total"] if row else 0

    # ── Activity log ───────────────────────────────────────

    async def log_activity(
        self,
        event_type: str,
        message: str,
        request_id: int | None = None,
        amount: int | None = None,
    ) -> None:
        await self.db.execute(
            "INSERT INTO activity_log (event_type, message, request_id, amount, created_at)"
            " VALUES (?, ?, ?, ?, ?)",
            (event_type, message, request_id, amount, _now()),
        )
        await self.db.commit()

    async def get_recent_activity(self, limit: int = 50) -> list[ActivityRecord]:
        async with self.db.execute(
            "SELECT * FROM activity_log ORDER BY id DESC LIMIT ?", (limit,)
        ) as cur:
            return [
                ActivityRecord(
                    id=row["id"],
                    event_type=row["event_type"],
                    message=row["message"],
                    request_id=row["request_id"],
                    amount=row["amount"],
                    created_at=row["created_at"],
                )
                async for row in cur
            ]


def _row_to_round(row: aiosqlite.Row) -> RoundRecord:
    return RoundRecord(
        id=row["id"],
        session=row["session"],
        request_id=row["request_id"],
        status=row["status"],
        participant_count=row["participant_count"],
        requested_at=row["requested_at"],
        winner=row["winner"],
        prize=row["prize"],
        completed_at=row["completed_at"],
    )
