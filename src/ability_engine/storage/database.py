"""SQLite persistence for the cooldown/charge ledger.

Entries survive process restarts because cooldowns span real time. Each
row is keyed by ``(owner_id, owner_type, ability_id)`` and stores the
entry's mutable state as a JSON blob.

Storage location: ``StorageSettings.database_path`` (default
``data/ability_ledger.db``).
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Generator, TypeVar

from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ability_engine.core.config import StorageSettings, get_settings
from ability_engine.core.exceptions import LedgerStoreError
from ability_engine.core.logging import get_logger
from ability_engine.models.ledger import LedgerEntry

logger = get_logger(__name__)

T = TypeVar("T")


def _is_busy(exc: BaseException) -> bool:
    """Whether SQLite reported lock contention rather than a real fault."""
    if not isinstance(exc, sqlite3.OperationalError):
        return False
    text = str(exc).lower()
    return "locked" in text or "busy" in text


class SqliteLedgerStore:
    """SQLite-backed ``LedgerStore``.

    Connections are opened per call, so one store may be shared across
    threads. Lock contention from concurrent writers is retried with
    exponential backoff; any other SQLite failure, or contention that
    outlasts the retries, surfaces as ``LedgerStoreError``.
    """

    SCHEMA_VERSION = 1

    def __init__(
        self,
        db_path: str | Path | None = None,
        settings: StorageSettings | None = None,
    ) -> None:
        """Initialize the store and create the schema if needed.

        Args:
            db_path: Path to the database file. If None, uses the configured path.
            settings: Storage settings. If None, uses the global settings.
        """
        self.settings = settings or get_settings().storage
        self.db_path = Path(db_path) if db_path is not None else self.settings.database_path

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._retry = retry(
            retry=retry_if_exception(_is_busy),
            stop=stop_after_attempt(self.settings.busy_retry_attempts),
            wait=wait_exponential(multiplier=0.05, max=1),
            reraise=True,
        )

        self._run(self._init_schema)

        logger.info("Ledger store initialized", db_path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        conn = sqlite3.connect(str(self.db_path), timeout=5.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _run(self, operation: Callable[..., T], *args: Any, **context: Any) -> T:
        """Run ``operation`` with busy retries, translating SQLite errors."""
        try:
            return self._retry(operation)(*args)
        except sqlite3.Error as exc:
            raise LedgerStoreError(
                f"Ledger storage failed: {exc}",
                owner_id=context.get("owner_id"),
                ability_id=context.get("ability_id"),
                details={"db_path": str(self.db_path)},
            ) from exc

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS ability_ledger (
                    owner_id TEXT NOT NULL,
                    owner_type TEXT NOT NULL,
                    ability_id TEXT NOT NULL,
                    state_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (owner_id, owner_type, ability_id)
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_ability_ledger_owner
                ON ability_ledger(owner_id)
            """)

            cursor.execute("""
                INSERT OR REPLACE INTO schema_version (version) VALUES (?)
            """, (self.SCHEMA_VERSION,))

    # =========================================================================
    # Row Decoding
    # =========================================================================

    @staticmethod
    def _entry_from_row(row: sqlite3.Row) -> LedgerEntry:
        """Decode a row, falling back to a fresh entry if the blob is unreadable."""
        try:
            return LedgerEntry.from_state_json(
                row["state_json"],
                owner_id=row["owner_id"],
                owner_type=row["owner_type"],
                ability_id=row["ability_id"],
            )
        except (json.JSONDecodeError, PydanticValidationError) as exc:
            logger.warning(
                "Unreadable ledger state, treating as unused",
                owner_id=row["owner_id"],
                ability_id=row["ability_id"],
                error=str(exc),
            )
            return LedgerEntry(
                owner_id=row["owner_id"],
                owner_type=row["owner_type"],
                ability_id=row["ability_id"],
            )

    # =========================================================================
    # LedgerStore
    # =========================================================================

    def get(self, owner_id: str, owner_type: str, ability_id: str) -> LedgerEntry | None:
        """Get the entry for a key.

        Returns:
            The stored entry, or None if the ability was never used.
        """

        def fetch() -> LedgerEntry | None:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    SELECT owner_id, owner_type, ability_id, state_json
                    FROM ability_ledger
                    WHERE owner_id = ? AND owner_type = ? AND ability_id = ?
                """, (owner_id, owner_type, ability_id))
                row = cursor.fetchone()
                return self._entry_from_row(row) if row else None

        return self._run(fetch, owner_id=owner_id, ability_id=ability_id)

    def put(self, entry: LedgerEntry) -> None:
        """Insert or replace an entry."""

        def write() -> None:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT OR REPLACE INTO ability_ledger
                    (owner_id, owner_type, ability_id, state_json, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                """, (
                    entry.owner_id,
                    entry.owner_type,
                    entry.ability_id,
                    entry.to_state_json(),
                    datetime.now().isoformat(),
                ))

        self._run(write, owner_id=entry.owner_id, ability_id=entry.ability_id)

    def entries(self, owner_id: str | None = None) -> list[LedgerEntry]:
        """List stored entries, optionally for one owner only."""

        def fetch_all() -> list[LedgerEntry]:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                if owner_id is None:
                    cursor.execute("""
                        SELECT owner_id, owner_type, ability_id, state_json
                        FROM ability_ledger ORDER BY owner_id, ability_id
                    """)
                else:
                    cursor.execute("""
                        SELECT owner_id, owner_type, ability_id, state_json
                        FROM ability_ledger WHERE owner_id = ? ORDER BY ability_id
                    """, (owner_id,))
                return [self._entry_from_row(row) for row in cursor.fetchall()]

        return self._run(fetch_all, owner_id=owner_id)

    def delete(self, owner_id: str, owner_type: str, ability_id: str) -> bool:
        """Delete an entry.

        Returns:
            True if deleted, False if not found.
        """

        def remove() -> bool:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    DELETE FROM ability_ledger
                    WHERE owner_id = ? AND owner_type = ? AND ability_id = ?
                """, (owner_id, owner_type, ability_id))
                return cursor.rowcount > 0

        deleted = self._run(remove, owner_id=owner_id, ability_id=ability_id)
        if deleted:
            logger.info("Deleted ledger entry", owner_id=owner_id, ability_id=ability_id)
        return deleted


__all__ = [
    "SqliteLedgerStore",
]
