"""SQLite trace storage implementation."""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import aiosqlite

from ..config import resolve_db_path
from ..models import TraceEvent


class IStorage(Protocol):
    """Persistent storage for trace events (SQLite)."""

    async def init(self) -> None:
        """Initialize database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    async def save_trace_event(self, event: TraceEvent) -> None:
        """Save a trace event."""
        ...

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        correlation_id: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters, newest first."""
        ...

    async def clear(self) -> None:
        """Clear all data."""
        ...


class Storage:
    """SQLite storage implementation."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            self._db_path = resolve_db_path()
        else:
            self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Initialize database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def save_trace_event(self, event: TraceEvent) -> None:
        """Save a trace event."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute(
            """
            INSERT INTO trace_events (id, event_type, actor, correlation_id, data, timestamp)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                event.id or str(uuid.uuid4()),
                event.event_type,
                event.actor,
                event.correlation_id,
                json.dumps(event.data, default=str),
                event.timestamp.isoformat(),
            ),
        )
        await self._conn.commit()

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        correlation_id: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters, newest first."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        conditions = []
        params: list = []

        if after:
            conditions.append("timestamp > ?")
            params.append(after.isoformat())
        if event_types:
            placeholders = ",".join("?" * len(event_types))
            conditions.append(f"event_type IN ({placeholders})")
            params.extend(event_types)
        if actor:
            conditions.append("actor = ?")
            params.append(actor)
        if correlation_id:
            conditions.append("correlation_id = ?")
            params.append(correlation_id)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        query = f"""
            SELECT id, event_type, actor, correlation_id, data, timestamp
            FROM trace_events
            {where_clause}
            ORDER BY timestamp DESC
            LIMIT ?
        """
        params.append(limit)

        cursor = await self._conn.execute(query, params)
        rows = await cursor.fetchall()

        return [
            TraceEvent(
                id=row[0],
                event_type=row[1],
                actor=row[2],
                correlation_id=row[3],
                data=json.loads(row[4]),
                timestamp=_parse_timestamp(row[5]),
            )
            for row in rows
        ]

    async def clear(self) -> None:
        """Clear all data."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute("DELETE FROM trace_events")
        await self._conn.commit()


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
