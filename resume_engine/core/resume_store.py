"""Key/value persistence for templates and generated resumes.

Values are JSON-compatible dicts. ``InMemoryStore`` is a locked dict;
``SqliteStore`` keeps one WAL-mode connection per database path and stores
every namespace in a single table keyed by ``(namespace, key)``.
"""

from __future__ import annotations

import json
import os
import sqlite3
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

JsonDict = dict[str, Any]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class KeyValueStore(Protocol):
    def put(self, key: str, value: JsonDict) -> None: ...

    def get(self, key: str) -> JsonDict | None: ...

    def delete(self, key: str) -> bool: ...

    def list(self) -> list[JsonDict]: ...

    def purge_expired(self) -> int: ...


class InMemoryStore:
    def __init__(self, ttl_days: int | None = None):
        self._ttl = timedelta(days=ttl_days) if ttl_days else None
        self._items: dict[str, tuple[str, datetime | None]] = {}
        self._lock = threading.Lock()

    def _expired(self, expires_at: datetime | None) -> bool:
        return expires_at is not None and expires_at <= _utc_now()

    def put(self, key: str, value: JsonDict) -> None:
        expires_at = _utc_now() + self._ttl if self._ttl else None
        payload = json.dumps(value, ensure_ascii=False)
        with self._lock:
            self._items[key] = (payload, expires_at)

    def get(self, key: str) -> JsonDict | None:
        with self._lock:
            entry = self._items.get(key)
        if entry is None or self._expired(entry[1]):
            return None
        return json.loads(entry[0])

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._items.pop(key, None) is not None

    def list(self) -> list[JsonDict]:
        with self._lock:
            entries = list(self._items.values())
        return [json.loads(payload) for payload, expires_at in entries if not self._expired(expires_at)]

    def purge_expired(self) -> int:
        with self._lock:
            doomed = [key for key, (_, expires_at) in self._items.items() if self._expired(expires_at)]
            for key in doomed:
                del self._items[key]
        return len(doomed)


_connections: dict[str, sqlite3.Connection] = {}
_conn_lock = threading.Lock()


def _get_connection(db_path: str) -> sqlite3.Connection:
    with _conn_lock:
        conn = _connections.get(db_path)
        if conn is not None:
            return conn

        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv_records (
                namespace TEXT NOT NULL,
                record_key TEXT NOT NULL,
                payload_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                expires_at TEXT,
                PRIMARY KEY (namespace, record_key)
            );
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_kv_records_expiry
            ON kv_records (namespace, expires_at);
            """
        )
        _connections[db_path] = conn
        return conn


def close_connections() -> None:
    with _conn_lock:
        for conn in _connections.values():
            conn.close()
        _connections.clear()


class SqliteStore:
    def __init__(self, db_path: str, namespace: str, ttl_days: int | None = None):
        self.db_path = db_path
        self.namespace = namespace
        self._ttl = timedelta(days=max(1, int(ttl_days))) if ttl_days else None

    @property
    def _conn(self) -> sqlite3.Connection:
        return _get_connection(self.db_path)

    def put(self, key: str, value: JsonDict) -> None:
        conn = self._conn
        now = _utc_now()
        expires_at = (now + self._ttl).isoformat() if self._ttl else None
        payload_json = json.dumps(value, ensure_ascii=False)
        with _conn_lock:
            conn.execute(
                """
                INSERT INTO kv_records (namespace, record_key, payload_json, created_at, updated_at, expires_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT (namespace, record_key) DO UPDATE SET
                    payload_json = excluded.payload_json,
                    updated_at = excluded.updated_at,
                    expires_at = excluded.expires_at
                """,
                (self.namespace, key, payload_json, now.isoformat(), now.isoformat(), expires_at),
            )
            conn.commit()

    def get(self, key: str) -> JsonDict | None:
        conn = self._conn
        now_iso = _utc_now().isoformat()
        with _conn_lock:
            row = conn.execute(
                """
                SELECT payload_json FROM kv_records
                WHERE namespace = ? AND record_key = ? AND (expires_at IS NULL OR expires_at > ?)
                """,
                (self.namespace, key, now_iso),
            ).fetchone()
        if not row:
            return None
        return json.loads(row[0])

    def delete(self, key: str) -> bool:
        conn = self._conn
        with _conn_lock:
            cur = conn.execute(
                "DELETE FROM kv_records WHERE namespace = ? AND record_key = ?",
                (self.namespace, key),
            )
            conn.commit()
        return cur.rowcount > 0

    def list(self) -> list[JsonDict]:
        conn = self._conn
        now_iso = _utc_now().isoformat()
        with _conn_lock:
            rows = conn.execute(
                """
                SELECT payload_json FROM kv_records
                WHERE namespace = ? AND (expires_at IS NULL OR expires_at > ?)
                ORDER BY created_at, record_key
                """,
                (self.namespace, now_iso),
            ).fetchall()
        return [json.loads(row[0]) for row in rows]

    def purge_expired(self) -> int:
        conn = self._conn
        now_iso = _utc_now().isoformat()
        with _conn_lock:
            cur = conn.execute(
                "DELETE FROM kv_records WHERE namespace = ? AND expires_at IS NOT NULL AND expires_at <= ?",
                (self.namespace, now_iso),
            )
            conn.commit()
        return cur.rowcount
