"""Persistence helpers for SimpLab."""

from simplab.persistence.sqlite_store import (
    connect,
    create_session,
    ensure_schema,
    list_sessions,
    load_exports,
    load_history,
    save_export,
    save_history_entry,
)

__all__ = [
    "connect",
    "create_session",
    "ensure_schema",
    "list_sessions",
    "load_exports",
    "load_history",
    "save_export",
    "save_history_entry",
]
