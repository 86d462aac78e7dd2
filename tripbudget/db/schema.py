"""Shared storage schema and initialization utilities.

Tables:
  - shared_defaults: key/value store shared between the app and its widgets.
    Each row carries a `kind` tag (float, str, bool, date, datetime, blob) so
    readers can tell a missing value from one written with a different type.
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

CURRENT_SCHEMA_VERSION = 1
SCHEMA_VERSION_KEY = "schema_version"

SHARED_DEFAULTS_DDL = f"""
CREATE TABLE IF NOT EXISTS shared_defaults (
    key TEXT PRIMARY KEY,
    kind TEXT NOT NULL CHECK (kind IN ('float','str','bool','date','datetime','blob')),
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

DDL_ORDER: Sequence[str] = (SHARED_DEFAULTS_DDL,)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        conn.commit()
    finally:
        conn.close()


def apply_migrations(path: Path) -> int:
    """Ensure the schema exists and return the recorded schema version."""
    init_db(path)
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO shared_defaults (key, kind, value) VALUES (?, 'str', ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
            f"updated_at=({BASIC_UTC_NOW})",
            (SCHEMA_VERSION_KEY, str(CURRENT_SCHEMA_VERSION)),
        )
        conn.commit()
        return CURRENT_SCHEMA_VERSION
    finally:
        conn.close()
