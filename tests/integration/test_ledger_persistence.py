"""Integration tests for ledger persistence.

Tests that cooldowns and spent charges survive a restart when the
ledger is backed by SQLite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from ability_engine.core.config import CasterSettings, LedgerSettings, SchedulerSettings
from ability_engine.engine import (
    AbilityCaster,
    ActionDispatcher,
    CooldownLedger,
    DailyResetScheduler,
    SourceAggregator,
)
from ability_engine.models import CastFailure, FailureReason
from ability_engine.storage import InMemoryWorld, SqliteLedgerStore


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "ledger.db"


def _boot(world: InMemoryWorld, db_path: Path, clock: Any) -> AbilityCaster:
    """Wire a caster the way an application would on startup."""
    return AbilityCaster(
        actors=world,
        aggregator=SourceAggregator(world),
        ledger=CooldownLedger(SqliteLedgerStore(db_path), settings=LedgerSettings()),
        dispatcher=ActionDispatcher(actors=world, locations=world, revealer=world),
        settings=CasterSettings(),
        clock=clock,
    )


class TestLedgerPersistence:
    """Test ledger state across process restarts."""

    def test_cooldown_survives_restart(self, world: InMemoryWorld, db_path: Path, clock: Any) -> None:
        first = _boot(world, db_path, clock)
        assert first.cast("hero", "spell-teleport", {"locationId": "cellar"}).ok

        clock.advance(20)
        second = _boot(world, db_path, clock)
        outcome = second.cast("hero", "spell-teleport", {"locationId": "town"})

        assert isinstance(outcome, CastFailure)
        assert outcome.reason == FailureReason.ON_COOLDOWN
        assert outcome.remaining_seconds == 40

    def test_charges_survive_restart(self, world: InMemoryWorld, db_path: Path, clock: Any) -> None:
        first = _boot(world, db_path, clock)
        for _ in range(2):
            assert first.cast("hero", "spell-levitate").ok

        second = _boot(world, db_path, clock)
        state = second.ability_state("hero", "spell-levitate")

        assert state.remaining_charges == 1
        assert state.times_used == 2

    def test_reset_persists(self, world: InMemoryWorld, db_path: Path, clock: Any) -> None:
        first = _boot(world, db_path, clock)
        assert first.cast("hero", "spell-recall").ok

        scheduler = DailyResetScheduler(
            first.ledger,
            first.aggregator.known_policy,
            settings=SchedulerSettings(),
            clock=clock,
        )
        assert scheduler.reset_all() == 1

        second = _boot(world, db_path, clock)
        assert second.ability_state("hero", "spell-recall").remaining_charges == 1
        assert second.cast("hero", "spell-recall").ok
