"""SQLite-backed storage for the ``users_social_tokens`` table."""

from __future__ import annotations

import json
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from social_connect.core.errors import PersistenceError
from social_connect.models.token_record import Provider, TokenRecord, TokenStatus

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f+00:00"
_TIMESTAMP_COLUMNS = (
    "expires_at",
    "long_lived_expires_at",
    "last_synced_at",
    "created_at",
    "updated_at",
)


def _to_db(value: Optional[datetime]) -> Optional[str]:
    # Fixed-width UTC text keeps range comparisons lexicographically correct.
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)


def _from_db(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.strptime(value, _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


class SQLiteTokenStore:
    """Credential table keyed by a unique (user_id, provider) pair."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to open token store: {exc}") from exc
        try:
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise PersistenceError(f"Token store operation failed: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS users_social_tokens (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    provider TEXT NOT NULL
                        CHECK (provider IN ('facebook', 'instagram', 'threads')),
                    access_token TEXT NOT NULL,
                    refresh_token TEXT,
                    long_lived_token TEXT,
                    scopes TEXT NOT NULL DEFAULT '[]',
                    expires_at TEXT,
                    long_lived_expires_at TEXT,
                    status TEXT NOT NULL DEFAULT 'connected',
                    needs_reconnect INTEGER NOT NULL DEFAULT 0,
                    last_synced_at TEXT,
                    last_error TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE (user_id, provider)
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_users_social_tokens_refresh
                ON users_social_tokens (needs_reconnect, expires_at)
                """
            )

    def upsert_connected(
        self,
        *,
        user_id: str,
        provider: Provider,
        access_token: str,
        refresh_token: Optional[str],
        long_lived_token: Optional[str],
        scopes: List[str],
        expires_at: Optional[datetime],
        long_lived_expires_at: Optional[datetime],
        synced_at: datetime,
    ) -> TokenRecord:
        """Create or wholly overwrite the record for (user_id, provider)."""
        status = TokenStatus.CONNECTED
        now = _to_db(synced_at)
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO users_social_tokens (
                    id, user_id, provider, access_token, refresh_token,
                    long_lived_token, scopes, expires_at, long_lived_expires_at,
                    status, needs_reconnect, last_synced_at, last_error,
                    created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, NULL, ?, ?)
                ON CONFLICT(user_id, provider) DO UPDATE SET
                    access_token = excluded.access_token,
                    refresh_token = excluded.refresh_token,
                    long_lived_token = excluded.long_lived_token,
                    scopes = excluded.scopes,
                    expires_at = excluded.expires_at,
                    long_lived_expires_at = excluded.long_lived_expires_at,
                    status = excluded.status,
                    needs_reconnect = excluded.needs_reconnect,
                    last_synced_at = excluded.last_synced_at,
                    last_error = NULL,
                    updated_at = excluded.updated_at
                """,
                (
                    str(uuid.uuid4()),
                    user_id,
                    Provider(provider).value,
                    access_token,
                    refresh_token,
                    long_lived_token,
                    json.dumps(list(scopes)),
                    _to_db(expires_at),
                    _to_db(long_lived_expires_at),
                    status.value,
                    int(status.needs_reconnect),
                    now,
                    now,
                    now,
                ),
            )
            row = conn.execute(
                "SELECT * FROM users_social_tokens WHERE user_id = ? AND provider = ?",
                (user_id, Provider(provider).value),
            ).fetchone()
        return self._to_record(row)

    def mark_refreshed(
        self,
        record_id: str,
        *,
        token: str,
        expires_at: Optional[datetime],
        synced_at: datetime,
    ) -> TokenRecord:
        """Store a refreshed token in both the access and long-lived columns."""
        status = TokenStatus.CONNECTED
        expires = _to_db(expires_at)
        now = _to_db(synced_at)
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE users_social_tokens SET
                    access_token = ?,
                    long_lived_token = ?,
                    expires_at = ?,
                    long_lived_expires_at = ?,
                    status = ?,
                    needs_reconnect = ?,
                    last_synced_at = ?,
                    last_error = NULL,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    token,
                    token,
                    expires,
                    expires,
                    status.value,
                    int(status.needs_reconnect),
                    now,
                    now,
                    record_id,
                ),
            )
            if cursor.rowcount != 1:
                raise PersistenceError(f"Token record {record_id} no longer exists.")
            row = conn.execute(
                "SELECT * FROM users_social_tokens WHERE id = ?", (record_id,)
            ).fetchone()
        return self._to_record(row)

    def mark_reconnect_required(self, record_id: str, *, error: str) -> None:
        """Flag a record as needing a fresh user authorization."""
        status = TokenStatus.RECONNECT_REQUIRED
        with self._transaction() as conn:
            conn.execute(
                """
                UPDATE users_social_tokens SET
                    status = ?,
                    needs_reconnect = ?,
                    last_error = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    status.value,
                    int(status.needs_reconnect),
                    error,
                    _to_db(datetime.now(timezone.utc)),
                    record_id,
                ),
            )

    def get_item(self, *, user_id: str, provider: Provider) -> Optional[TokenRecord]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM users_social_tokens WHERE user_id = ? AND provider = ?",
                (user_id, Provider(provider).value),
            ).fetchone()
        if not row:
            return None
        return self._to_record(row)

    def list_for_user(self, user_id: str) -> List[TokenRecord]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM users_social_tokens WHERE user_id = ? ORDER BY provider",
                (user_id,),
            ).fetchall()
        return [self._to_record(row) for row in rows]

    def list_due_for_refresh(self, window_end: datetime) -> List[TokenRecord]:
        """Return connected records whose expiry falls on or before ``window_end``."""
        with self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT * FROM users_social_tokens
                WHERE expires_at IS NOT NULL
                  AND expires_at <= ?
                  AND needs_reconnect = 0
                ORDER BY expires_at
                """,
                (_to_db(window_end),),
            ).fetchall()
        return [self._to_record(row) for row in rows]

    @staticmethod
    def _to_record(row: sqlite3.Row) -> TokenRecord:
        data: Dict[str, Any] = dict(row)
        data["scopes"] = json.loads(data.get("scopes") or "[]")
        data["needs_reconnect"] = bool(data["needs_reconnect"])
        for column in _TIMESTAMP_COLUMNS:
            data[column] = _from_db(data.get(column))
        return TokenRecord(**data)


__all__ = ["SQLiteTokenStore"]
