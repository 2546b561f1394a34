"""Tests for the cooldown/charge ledger."""

from __future__ import annotations

import pytest

from ability_engine.core.config import LedgerSettings
from ability_engine.engine.ledger import CooldownLedger
from ability_engine.models import (
    ChargePool,
    CombatRounds,
    FailureReason,
    FixedDuration,
    LedgerEntry,
    NoCooldown,
)
from ability_engine.storage import InMemoryLedgerStore


T0 = 1_704_067_200_000


class TestNoCooldown:
    """Tests for abilities without a cooldown."""

    def test_always_available(self, ledger: CooldownLedger, ledger_store: InMemoryLedgerStore) -> None:
        for _ in range(3):
            assert ledger.check_available("hero", "light", NoCooldown(), T0) is None
            ledger.consume("hero", "light", NoCooldown(), T0)

        assert len(ledger_store) == 0


class TestFixedDuration:
    """Tests for the fixed-duration modality."""

    def test_available_without_entry(self, ledger: CooldownLedger) -> None:
        assert ledger.check_available("hero", "blink", FixedDuration(seconds=30), T0) is None

    def test_on_cooldown_after_consume(self, ledger: CooldownLedger) -> None:
        policy = FixedDuration(seconds=30)
        ledger.consume("hero", "blink", policy, T0)

        failure = ledger.check_available("hero", "blink", policy, T0 + 1)

        assert failure is not None
        assert failure.reason == FailureReason.ON_COOLDOWN
        assert failure.remaining_seconds is not None
        assert 0 < failure.remaining_seconds <= 30

    def test_remaining_seconds_rounded_up(self, ledger: CooldownLedger) -> None:
        policy = FixedDuration(seconds=30)
        ledger.consume("hero", "blink", policy, T0)

        failure = ledger.check_available("hero", "blink", policy, T0 + 20_500)

        assert failure is not None
        assert failure.remaining_seconds == 10

    def test_available_after_duration(self, ledger: CooldownLedger) -> None:
        policy = FixedDuration(seconds=30)
        ledger.consume("hero", "blink", policy, T0)

        assert ledger.check_available("hero", "blink", policy, T0 + 30_000) is None
        assert ledger.check_available("hero", "blink", policy, T0 + 90_000) is None

    def test_consume_sets_expiry_and_counts(self, ledger: CooldownLedger) -> None:
        policy = FixedDuration(seconds=30)

        ledger.consume("hero", "blink", policy, T0)
        snapshot = ledger.consume("hero", "blink", policy, T0 + 40_000)

        assert snapshot.cooldown_expires_at == T0 + 70_000
        assert snapshot.cooldown_seconds_remaining == 30
        assert snapshot.times_used == 2

    def test_check_does_not_create_state(
        self,
        ledger: CooldownLedger,
        ledger_store: InMemoryLedgerStore,
    ) -> None:
        for _ in range(5):
            ledger.check_available("hero", "blink", FixedDuration(seconds=30), T0)

        assert len(ledger_store) == 0


class TestChargePool:
    """Tests for the per-day charge pool modality."""

    @pytest.mark.parametrize("max_charges", [1, 2, 5])
    def test_exactly_n_uses(self, ledger: CooldownLedger, max_charges: int) -> None:
        """Test n consumes succeed and the next check reports no charges."""
        policy = ChargePool(max_charges=max_charges)

        for used in range(max_charges):
            assert ledger.check_available("hero", "recall", policy, T0) is None
            snapshot = ledger.consume("hero", "recall", policy, T0)
            assert snapshot.remaining_charges == max_charges - used - 1

        failure = ledger.check_available("hero", "recall", policy, T0)
        assert failure is not None
        assert failure.reason == FailureReason.NO_CHARGES_REMAINING

    def test_zero_charge_pool_unavailable(self, ledger: CooldownLedger) -> None:
        failure = ledger.check_available("hero", "recall", ChargePool(max_charges=0), T0)

        assert failure is not None
        assert failure.reason == FailureReason.NO_CHARGES_REMAINING

    def test_consume_never_goes_negative(
        self,
        ledger: CooldownLedger,
        ledger_store: InMemoryLedgerStore,
    ) -> None:
        ledger_store.put(LedgerEntry(owner_id="hero", ability_id="recall", remaining_charges=0))

        snapshot = ledger.consume("hero", "recall", ChargePool(max_charges=1), T0)

        assert snapshot.remaining_charges == 0

    def test_charges_unaffected_by_time(self, ledger: CooldownLedger) -> None:
        policy = ChargePool(max_charges=1)
        ledger.consume("hero", "recall", policy, T0)

        assert ledger.check_available("hero", "recall", policy, T0 + 10 * 86_400_000) is not None

    def test_reset_charges(self, ledger: CooldownLedger) -> None:
        policy = ChargePool(max_charges=3)
        for _ in range(3):
            ledger.consume("hero", "recall", policy, T0)

        entry = ledger.reset_charges("hero", "recall", 3)

        assert entry is not None
        assert entry.remaining_charges == 3
        assert entry.times_used == 3
        assert ledger.check_available("hero", "recall", policy, T0) is None

    def test_reset_without_entry_creates_nothing(
        self,
        ledger: CooldownLedger,
        ledger_store: InMemoryLedgerStore,
    ) -> None:
        assert ledger.reset_charges("hero", "recall", 3) is None
        assert len(ledger_store) == 0


class TestCombatRounds:
    """Tests for the combat-round modality."""

    def test_rounds_convert_with_round_length(self, ledger: CooldownLedger) -> None:
        policy = CombatRounds(rounds=2)

        snapshot = ledger.consume("hero", "bash", policy, T0)

        assert snapshot.cooldown_expires_at == T0 + 6_000
        assert ledger.check_available("hero", "bash", policy, T0 + 5_999) is not None
        assert ledger.check_available("hero", "bash", policy, T0 + 6_000) is None

    def test_round_length_configurable(self, ledger_store: InMemoryLedgerStore) -> None:
        ledger = CooldownLedger(ledger_store, settings=LedgerSettings(round_seconds=6.0))

        snapshot = ledger.consume("hero", "bash", CombatRounds(rounds=2), T0)

        assert snapshot.cooldown_expires_at == T0 + 12_000


class TestLedgerKeys:
    """Tests for key isolation and queries."""

    def test_keys_are_independent(self, ledger: CooldownLedger) -> None:
        policy = ChargePool(max_charges=1)
        ledger.consume("hero", "recall", policy, T0)

        assert ledger.check_available("hero", "blink", policy, T0) is None
        assert ledger.check_available("sidekick", "recall", policy, T0) is None

    def test_snapshot(self, ledger: CooldownLedger) -> None:
        ledger.consume("hero", "blink", FixedDuration(seconds=10), T0)

        snapshot = ledger.snapshot("hero", "blink", T0 + 4_000)

        assert snapshot.cooldown_seconds_remaining == 6
        assert snapshot.times_used == 1
        assert ledger.snapshot("hero", "never-used", T0).times_used == 0

    def test_entries_written_with_owner_type(
        self,
        ledger: CooldownLedger,
        ledger_store: InMemoryLedgerStore,
    ) -> None:
        ledger.consume("hero", "blink", FixedDuration(seconds=10), T0)

        assert ledger_store.get("hero", "user", "blink") is not None
        assert [entry.ability_id for entry in ledger.entries("hero")] == ["blink"]
