"""SQLite-backed substitute for the DynamoDB token table."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional

from token_gate.clients.errors import StoreConflictError, StoreUnavailableError


class SQLiteTokenTable:
    """Token records in a normalized table keyed by (pk, sk)."""

    def __init__(self, db_path: str, timeout_seconds: float = 3.0) -> None:
        self._db_path = Path(db_path)
        self._timeout = timeout_seconds
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self._db_path, timeout=self._timeout, check_same_thread=False
        )
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS access_tokens (
                    pk TEXT NOT NULL,
                    sk TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (pk, sk)
                )
                """
            )

    @staticmethod
    def _keys(item: Dict[str, Any]) -> tuple[str, str]:
        pk = item.get("pk")
        sk = item.get("sk")
        if not pk or not sk:
            raise ValueError("Item must include 'pk' and 'sk' keys")
        return pk, sk

    def put_item(self, item: Dict[str, Any]) -> None:
        """Insert or overwrite an item; used by issuers and fixtures."""
        pk, sk = self._keys(item)
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO access_tokens (pk, sk, data)
                    VALUES (?, ?, ?)
                    ON CONFLICT(pk, sk) DO UPDATE SET data = excluded.data
                    """,
                    (pk, sk, json.dumps(item)),
                )
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"SQLite put failed: {exc}") from exc

    def get_item(
        self, *, partition_key: str, sort_key: str
    ) -> Optional[Dict[str, Any]]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT data FROM access_tokens WHERE pk = ? AND sk = ?",
                    (partition_key, sort_key),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"SQLite get failed: {exc}") from exc
        if not row:
            return None
        return json.loads(row["data"])

    def delete_item(self, *, partition_key: str, sort_key: str) -> bool:
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "DELETE FROM access_tokens WHERE pk = ? AND sk = ?",
                    (partition_key, sort_key),
                )
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"SQLite delete failed: {exc}") from exc
        return cursor.rowcount > 0

    def replace_item(self, item: Dict[str, Any]) -> None:
        pk, sk = self._keys(item)
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "UPDATE access_tokens SET data = ? WHERE pk = ? AND sk = ?",
                    (json.dumps(item), pk, sk),
                )
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"SQLite update failed: {exc}") from exc
        if cursor.rowcount == 0:
            raise StoreConflictError(f"Record {pk}/{sk} no longer exists.")

    def scan_by_sort_key(self, sort_key: str) -> list[Dict[str, Any]]:
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT data FROM access_tokens WHERE sk = ?",
                    (sort_key,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"SQLite scan failed: {exc}") from exc
        return [json.loads(row["data"]) for row in rows]


__all__ = ["SQLiteTokenTable"]
