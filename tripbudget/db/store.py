"""Shared key/value store used by the app and the widgets.

Responsibilities
----------------
- Typed get/set for scalars (floats, strings, booleans), dates, datetimes and
  opaque blobs, all scoped to one SQLite file both processes can open.
- Reads never raise: a missing row, a row written with another kind or an
  undecodable value all fall back to the caller supplied default.
- Writes report their outcome as a `SaveResult` instead of raising, so
  callers can keep in-memory state authoritative when storage fails.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from .schema import BASIC_UTC_NOW, init_db

logger = logging.getLogger("tripbudget.store")

Blob = Union[bytes, str]


@dataclass(frozen=True)
class SaveResult:
    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "SaveResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> "SaveResult":
        return cls(ok=False, error=error)


class SharedStore:
    def __init__(self, db_path: Path):
        self.db_path = db_path
        init_db(db_path)

    # ------------------------------------------------------------------
    # Connection helpers
    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _read(self, key: str, kind: str) -> Optional[str]:
        try:
            with self._connect() as conn:
                cur = conn.execute(
                    "SELECT kind, value FROM shared_defaults WHERE key = ?", (key,)
                )
                row = cur.fetchone()
        except sqlite3.Error:
            logger.warning("failed to read key %s", key, exc_info=True)
            return None
        if row is None:
            return None
        if row[0] != kind:
            logger.warning("key %s holds %s, expected %s", key, row[0], kind)
            return None
        return row[1]

    def _write(self, key: str, kind: str, value: str) -> SaveResult:
        try:
            with self._connect() as conn:
                conn.execute(
                    f"""
                    INSERT INTO shared_defaults (key, kind, value)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        kind = excluded.kind,
                        value = excluded.value,
                        updated_at = ({BASIC_UTC_NOW})
                    """,
                    (key, kind, value),
                )
        except sqlite3.Error as exc:
            logger.warning("failed to write key %s: %s", key, exc)
            return SaveResult.failure(str(exc))
        return SaveResult.success()

    def remove(self, key: str) -> SaveResult:
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM shared_defaults WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            logger.warning("failed to remove key %s: %s", key, exc)
            return SaveResult.failure(str(exc))
        return SaveResult.success()

    # ------------------------------------------------------------------
    # Scalars
    def get_float(self, key: str, default: float = 0.0) -> float:
        raw = self._read(key, "float")
        if raw is None:
            return default
        try:
            return float(raw)
        except ValueError:
            return default

    def set_float(self, key: str, value: float) -> SaveResult:
        return self._write(key, "float", repr(float(value)))

    def get_str(self, key: str, default: str = "") -> str:
        raw = self._read(key, "str")
        return default if raw is None else raw

    def set_str(self, key: str, value: str) -> SaveResult:
        return self._write(key, "str", value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        raw = self._read(key, "bool")
        if raw is None:
            return default
        return raw == "1"

    def set_bool(self, key: str, value: bool) -> SaveResult:
        return self._write(key, "bool", "1" if value else "0")

    # ------------------------------------------------------------------
    # Dates
    def get_date(self, key: str, default: Optional[date] = None) -> Optional[date]:
        raw = self._read(key, "date")
        if raw is None:
            return default
        try:
            return date.fromisoformat(raw)
        except ValueError:
            logger.warning("malformed date stored under %s", key)
            return default

    def set_date(self, key: str, value: date) -> SaveResult:
        return self._write(key, "date", value.isoformat())

    def get_datetime(
        self, key: str, default: Optional[datetime] = None
    ) -> Optional[datetime]:
        raw = self._read(key, "datetime")
        if raw is None:
            return default
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            logger.warning("malformed datetime stored under %s", key)
            return default

    def set_datetime(self, key: str, value: datetime) -> SaveResult:
        return self._write(key, "datetime", value.isoformat())

    # ------------------------------------------------------------------
    # Blobs
    def get_blob(self, key: str) -> Optional[str]:
        return self._read(key, "blob")

    def set_blob(self, key: str, data: Blob) -> SaveResult:
        if isinstance(data, bytes):
            try:
                data = data.decode("utf-8")
            except UnicodeDecodeError as exc:
                return SaveResult.failure(str(exc))
        return self._write(key, "blob", data)

    def save_encoded(self, key: str, encode: Callable[[], Blob]) -> SaveResult:
        """Encode then store a blob; an encoder failure is reported, not raised."""
        try:
            data = encode()
        except (ValueError, TypeError) as exc:
            logger.warning("failed to encode blob for %s: %s", key, exc)
            return SaveResult.failure(str(exc))
        return self.set_blob(key, data)

    def load_decoded(self, key: str, decode: Callable[[str], Any], default: Any) -> Any:
        """Decode a stored blob; missing or malformed data yields `default`."""
        raw = self.get_blob(key)
        if raw is None:
            return default
        try:
            return decode(raw)
        except ValueError:
            logger.warning("malformed blob stored under %s; treating as empty", key)
            return default
