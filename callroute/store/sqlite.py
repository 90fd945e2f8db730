# file: callroute/store/sqlite.py
"""
SQLite-backed route and blocklist store.

The schema mirrors the back-office `routes` and `blocklist` tables. Payloads
are stored as JSON text and handed to the engine as raw bytes. Queries run in
a worker thread so the event loop is never blocked.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

from callroute.core.models import BlocklistEntry, Route
from callroute.store.source import RouteSource, RouteSourceError

_ROUTE_COLUMNS = (
    "id, did_id, priority, name, condition_type, condition_data, "
    "action_type, action_data, enabled"
)


def _to_text(data: bytes | str | Mapping[str, Any] | None) -> str | None:
    if data is None:
        return None
    if isinstance(data, bytes):
        return data.decode("utf-8")
    if isinstance(data, str):
        return data
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def _to_bytes(text: str | bytes | None) -> bytes | None:
    if text is None:
        return None
    if isinstance(text, bytes):
        return text
    return text.encode("utf-8")


def _route_from_row(row: sqlite3.Row) -> Route:
    return Route(
        id=int(row["id"]),
        did_id=int(row["did_id"]) if row["did_id"] is not None else None,
        priority=int(row["priority"]),
        name=str(row["name"]),
        condition_type=str(row["condition_type"] or ""),
        condition_data=_to_bytes(row["condition_data"]),
        action_type=str(row["action_type"] or ""),
        action_data=_to_bytes(row["action_data"]),
        enabled=bool(row["enabled"]),
    )


def _entry_from_row(row: sqlite3.Row) -> BlocklistEntry:
    created_raw = row["created_at"]
    created_at: datetime | None = None
    if isinstance(created_raw, str) and created_raw:
        try:
            created_at = datetime.fromisoformat(created_raw)
        except ValueError:
            created_at = None
    return BlocklistEntry(
        id=int(row["id"]),
        pattern=str(row["pattern"]),
        pattern_type=str(row["pattern_type"] or ""),
        reason=str(row["reason"] or ""),
        created_at=created_at,
    )


class SQLiteRouteStore(RouteSource):
    def __init__(self, path: Path) -> None:
        self.path = path
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        return conn

    def _init_db(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as conn, conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS routes (
                    id INTEGER PRIMARY KEY,
                    did_id INTEGER,
                    priority INTEGER NOT NULL DEFAULT 0,
                    name TEXT NOT NULL,
                    condition_type TEXT,
                    condition_data JSON,
                    action_type TEXT,
                    action_data JSON,
                    enabled BOOLEAN DEFAULT TRUE
                );
                """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS blocklist (
                    id INTEGER PRIMARY KEY,
                    pattern TEXT NOT NULL,
                    pattern_type TEXT CHECK(pattern_type IN ('exact', 'prefix', 'regex')),
                    reason TEXT,
                    created_at DATETIME NOT NULL
                );
                """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_routes_did_id ON routes(did_id);")

    def _query(self, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
        try:
            with closing(self._connect()) as conn:
                return conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            raise RouteSourceError(f"query failed: {exc}") from exc

    # Engine-facing queries.

    def list_blocklist(self) -> list[BlocklistEntry]:
        rows = self._query(
            "SELECT id, pattern, pattern_type, reason, created_at "
            "FROM blocklist ORDER BY created_at DESC, id DESC"
        )
        return [_entry_from_row(r) for r in rows]

    def routes_for_did(self, did_id: int) -> list[Route]:
        rows = self._query(
            f"SELECT {_ROUTE_COLUMNS} FROM routes "
            "WHERE did_id = ? AND enabled = 1 ORDER BY priority, id",
            (did_id,),
        )
        return [_route_from_row(r) for r in rows]

    def global_routes(self) -> list[Route]:
        rows = self._query(
            f"SELECT {_ROUTE_COLUMNS} FROM routes "
            "WHERE did_id IS NULL AND enabled = 1 ORDER BY priority, id"
        )
        return [_route_from_row(r) for r in rows]

    async def blocklist_entries(self) -> list[BlocklistEntry]:
        return await asyncio.to_thread(self.list_blocklist)

    async def enabled_routes_for_did(self, did_id: int) -> list[Route]:
        return await asyncio.to_thread(self.routes_for_did, did_id)

    async def enabled_global_routes(self) -> list[Route]:
        return await asyncio.to_thread(self.global_routes)

    # Management helpers used by tooling and tests.

    def list_routes(self) -> list[Route]:
        rows = self._query(f"SELECT {_ROUTE_COLUMNS} FROM routes ORDER BY priority, id")
        return [_route_from_row(r) for r in rows]

    def add_route(
        self,
        *,
        name: str,
        priority: int = 0,
        did_id: int | None = None,
        condition_type: str = "default",
        condition_data: bytes | str | Mapping[str, Any] | None = None,
        action_type: str = "voicemail",
        action_data: bytes | str | Mapping[str, Any] | None = None,
        enabled: bool = True,
    ) -> Route:
        try:
            with closing(self._connect()) as conn, conn:
                cur = conn.execute(
                    "INSERT INTO routes (did_id, priority, name, condition_type, condition_data, "
                    "action_type, action_data, enabled) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        did_id,
                        priority,
                        name,
                        condition_type,
                        _to_text(condition_data),
                        action_type,
                        _to_text(action_data),
                        int(enabled),
                    ),
                )
                route_id = int(cur.lastrowid or 0)
        except sqlite3.Error as exc:
            raise RouteSourceError(f"insert failed: {exc}") from exc

        return Route(
            id=route_id,
            did_id=did_id,
            priority=priority,
            name=name,
            condition_type=condition_type,
            condition_data=_to_bytes(_to_text(condition_data)),
            action_type=action_type,
            action_data=_to_bytes(_to_text(action_data)),
            enabled=enabled,
        )

    def add_blocklist_entry(
        self, pattern: str, *, pattern_type: str = "exact", reason: str = ""
    ) -> BlocklistEntry:
        created_at = datetime.now(tz=timezone.utc)
        try:
            with closing(self._connect()) as conn, conn:
                cur = conn.execute(
                    "INSERT INTO blocklist (pattern, pattern_type, reason, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (pattern, pattern_type, reason, created_at.isoformat()),
                )
                entry_id = int(cur.lastrowid or 0)
        except sqlite3.Error as exc:
            raise RouteSourceError(f"insert failed: {exc}") from exc

        return BlocklistEntry(
            id=entry_id,
            pattern=pattern,
            pattern_type=pattern_type,
            reason=reason,
            created_at=created_at,
        )

    def set_priorities(self, priorities: Mapping[int, int]) -> None:
        """Update several route priorities in one transaction."""

        try:
            with closing(self._connect()) as conn, conn:
                conn.executemany(
                    "UPDATE routes SET priority = ? WHERE id = ?",
                    [(priority, route_id) for route_id, priority in priorities.items()],
                )
        except sqlite3.Error as exc:
            raise RouteSourceError(f"update failed: {exc}") from exc

    def delete_route(self, route_id: int) -> None:
        self._execute("DELETE FROM routes WHERE id = ?", (route_id,))

    def delete_blocklist_entry(self, entry_id: int) -> None:
        self._execute("DELETE FROM blocklist WHERE id = ?", (entry_id,))

    def _execute(self, sql: str, params: Iterable[Any] = ()) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(sql, tuple(params))
        except sqlite3.Error as exc:
            raise RouteSourceError(f"statement failed: {exc}") from exc
