"""Tests for the SQLite ledger store."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from ability_engine.core.config import StorageSettings
from ability_engine.core.exceptions import LedgerStoreError
from ability_engine.models import LedgerEntry
from ability_engine.storage import LedgerStore, SqliteLedgerStore


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "ledger" / "test.db"


@pytest.fixture
def store(db_path: Path) -> SqliteLedgerStore:
    return SqliteLedgerStore(db_path, settings=StorageSettings(busy_retry_attempts=2))


def _entry(**overrides: object) -> LedgerEntry:
    data: dict[str, object] = {
        "owner_id": "hero",
        "owner_type": "user",
        "ability_id": "spell-teleport",
        "cooldown_expires_at": 1_704_067_260_000,
        "last_used_at": 1_704_067_200_000,
        "times_used": 1,
    }
    data.update(overrides)
    return LedgerEntry.model_validate(data)


class TestSqliteLedgerStore:
    """Tests for SqliteLedgerStore."""

    def test_satisfies_protocol(self, store: SqliteLedgerStore) -> None:
        assert isinstance(store, LedgerStore)

    def test_creates_parent_directory(self, store: SqliteLedgerStore, db_path: Path) -> None:
        assert db_path.exists()

    def test_schema_version(self, store: SqliteLedgerStore, db_path: Path) -> None:
        with sqlite3.connect(db_path) as conn:
            version = conn.execute("SELECT version FROM schema_version").fetchone()[0]

        assert version == SqliteLedgerStore.SCHEMA_VERSION

    def test_get_missing(self, store: SqliteLedgerStore) -> None:
        assert store.get("hero", "user", "spell-teleport") is None

    def test_put_and_get(self, store: SqliteLedgerStore) -> None:
        entry = _entry()

        store.put(entry)

        assert store.get("hero", "user", "spell-teleport") == entry

    def test_owner_type_is_part_of_key(self, store: SqliteLedgerStore) -> None:
        store.put(_entry())

        assert store.get("hero", "npc", "spell-teleport") is None

    def test_put_replaces(self, store: SqliteLedgerStore) -> None:
        store.put(_entry())
        store.put(_entry(times_used=2, cooldown_expires_at=None))

        entry = store.get("hero", "user", "spell-teleport")
        assert entry is not None
        assert entry.times_used == 2
        assert entry.cooldown_expires_at is None

    def test_charge_pool_state(self, store: SqliteLedgerStore) -> None:
        store.put(_entry(ability_id="spell-levitate", cooldown_expires_at=None, remaining_charges=0))

        entry = store.get("hero", "user", "spell-levitate")
        assert entry is not None
        assert entry.remaining_charges == 0

    def test_entries(self, store: SqliteLedgerStore) -> None:
        store.put(_entry(ability_id="b"))
        store.put(_entry(ability_id="a"))
        store.put(_entry(owner_id="rival", ability_id="a"))

        assert [e.ability_id for e in store.entries("hero")] == ["a", "b"]
        assert [(e.owner_id, e.ability_id) for e in store.entries()] == [
            ("hero", "a"),
            ("hero", "b"),
            ("rival", "a"),
        ]

    def test_delete(self, store: SqliteLedgerStore) -> None:
        store.put(_entry())

        assert store.delete("hero", "user", "spell-teleport") is True
        assert store.delete("hero", "user", "spell-teleport") is False
        assert store.get("hero", "user", "spell-teleport") is None

    def test_survives_reopen(self, store: SqliteLedgerStore, db_path: Path) -> None:
        store.put(_entry())

        reopened = SqliteLedgerStore(db_path)

        assert reopened.get("hero", "user", "spell-teleport") == _entry()

    @pytest.mark.parametrize("blob", ["not json", '{"times_used": "many"}', "[]"])
    def test_unreadable_state_is_fresh_entry(self, store: SqliteLedgerStore, db_path: Path, blob: str) -> None:
        """Test a corrupt row decodes as never used instead of failing the cast."""
        with sqlite3.connect(db_path) as conn:
            conn.execute(
                "INSERT INTO ability_ledger VALUES (?, ?, ?, ?, ?)",
                ("hero", "user", "spell-teleport", blob, "2024-01-01T00:00:00"),
            )

        entry = store.get("hero", "user", "spell-teleport")

        assert entry is not None
        assert entry.times_used == 0
        assert entry.cooldown_expires_at is None

    def test_sqlite_failure_wrapped(self, store: SqliteLedgerStore, db_path: Path) -> None:
        with sqlite3.connect(db_path) as conn:
            conn.execute("DROP TABLE ability_ledger")

        with pytest.raises(LedgerStoreError) as exc_info:
            store.get("hero", "user", "spell-teleport")

        assert exc_info.value.details["ability_id"] == "spell-teleport"
        assert exc_info.value.details["db_path"] == str(db_path)
