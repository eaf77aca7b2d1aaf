"""SQLite persistence helpers for SimpLab sessions."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from simplab.models import HistoryEntry

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS session (
  id INTEGER PRIMARY KEY,
  name TEXT NOT NULL,
  created_utc TEXT,
  notes TEXT
);
CREATE TABLE IF NOT EXISTS history_entry (
  id INTEGER PRIMARY KEY,
  session_id INTEGER REFERENCES session(id),
  container_id TEXT NOT NULL,
  timestamp_ms INTEGER NOT NULL,
  reaction_type TEXT,
  result JSON
);
CREATE TABLE IF NOT EXISTS export (
  id INTEGER PRIMARY KEY,
  session_id INTEGER REFERENCES session(id),
  container_id TEXT NOT NULL,
  saved_utc TEXT,
  record JSON
);
"""


def connect(session_file: str | Path) -> sqlite3.Connection:
    """Open (and create) a SQLite session file."""
    path = Path(session_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(path)
    connection.execute("PRAGMA foreign_keys = ON;")
    return connection


def ensure_schema(connection: sqlite3.Connection) -> None:
    connection.executescript(SCHEMA_SQL)
    connection.commit()


def create_session(
    connection: sqlite3.Connection,
    name: str,
    notes: str | None = None,
    created_utc: str | None = None,
) -> int:
    """Create a session entry and return its ID."""
    created_utc = created_utc or _utc_now()
    cursor = connection.execute(
        "INSERT INTO session (name, created_utc, notes) VALUES (?, ?, ?)",
        (name, created_utc, notes),
    )
    connection.commit()
    return int(cursor.lastrowid)


def list_sessions(connection: sqlite3.Connection) -> list[dict[str, Any]]:
    rows = connection.execute(
        "SELECT id, name, created_utc, notes FROM session ORDER BY id"
    ).fetchall()
    return [
        {"id": row[0], "name": row[1], "created_utc": row[2], "notes": row[3]}
        for row in rows
    ]


def save_history_entry(
    connection: sqlite3.Connection,
    session_id: int,
    entry: HistoryEntry,
) -> int:
    """Append a history entry and return its row ID."""
    cursor = connection.execute(
        "INSERT INTO history_entry"
        " (session_id, container_id, timestamp_ms, reaction_type, result)"
        " VALUES (?, ?, ?, ?, ?)",
        (
            session_id,
            entry.container_id,
            entry.timestamp,
            entry.result.type,
            _json_dumps(entry.result.to_dict()),
        ),
    )
    connection.commit()
    return int(cursor.lastrowid)


def save_export(
    connection: sqlite3.Connection,
    session_id: int,
    record: Mapping[str, Any],
    saved_utc: str | None = None,
) -> int:
    """Store an export record and return its row ID."""
    cursor = connection.execute(
        "INSERT INTO export (session_id, container_id, saved_utc, record)"
        " VALUES (?, ?, ?, ?)",
        (session_id, record["container_id"], saved_utc or _utc_now(), _json_dumps(record)),
    )
    connection.commit()
    return int(cursor.lastrowid)


def load_history(connection: sqlite3.Connection, session_id: int) -> list[dict[str, Any]]:
    """Return stored history entries of a session in insertion order."""
    rows = connection.execute(
        "SELECT container_id, timestamp_ms, result FROM history_entry"
        " WHERE session_id = ? ORDER BY id",
        (session_id,),
    ).fetchall()
    return [
        {"containerId": row[0], "timestamp": row[1], "result": json.loads(row[2])}
        for row in rows
    ]


def load_exports(connection: sqlite3.Connection, session_id: int) -> list[dict[str, Any]]:
    rows = connection.execute(
        "SELECT record FROM export WHERE session_id = ? ORDER BY id", (session_id,)
    ).fetchall()
    return [json.loads(row[0]) for row in rows]


def _json_dumps(payload: Mapping[str, object]) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()
