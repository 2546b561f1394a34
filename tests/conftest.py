"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the ability engine test suite: a settings cache reset, a fixed clock,
and a small in-memory world with a class, items, spell features and a
3x3 grid of overworld locations.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from ability_engine.core.config import (
    CasterSettings,
    DispatcherSettings,
    LedgerSettings,
    SchedulerSettings,
)
from ability_engine.engine import (
    AbilityCaster,
    ActionDispatcher,
    CooldownLedger,
    SourceAggregator,
)
from ability_engine.models import (
    ActorSnapshot,
    FeatureRecord,
    ItemRecord,
    LegacyAbilityRecord,
    LocationRecord,
)
from ability_engine.storage import InMemoryLedgerStore, InMemoryWorld


if TYPE_CHECKING:
    from collections.abc import Generator


# 2024-01-01T00:00:00Z
T0 = 1_704_067_200_000


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from ability_engine.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def ledger_settings() -> LedgerSettings:
    return LedgerSettings(round_seconds=3.0, owner_type="user")


@pytest.fixture
def dispatcher_settings() -> DispatcherSettings:
    return DispatcherSettings()


@pytest.fixture
def scheduler_settings() -> SchedulerSettings:
    return SchedulerSettings(day_length_seconds=86_400, day_offset_seconds=0, poll_interval_seconds=60)


# =============================================================================
# Clock
# =============================================================================


class FakeClock:
    """A settable millisecond clock."""

    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Content Helpers
# =============================================================================


def spell_feature(
    feature_id: str,
    name: str,
    spell: dict[str, Any],
    description: str = "",
) -> FeatureRecord:
    """Build a feature whose data blob encodes ``spell``."""
    return FeatureRecord(id=feature_id, name=name, description=description, data=json.dumps(spell))


def utility_spell(
    action: str,
    cooldown_type: str = "none",
    cooldown_value: int = 0,
    params: dict[str, Any] | None = None,
    requirements: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """A utility spell blob in the stored camelCase shape."""
    blob: dict[str, Any] = {
        "spellType": "utility",
        "utility": {"action": action, "params": params or {}},
        "cooldown": {"type": cooldown_type, "value": cooldown_value},
        "cost": {"mana": 2},
    }
    if requirements is not None:
        blob["requirements"] = requirements
    return blob


# =============================================================================
# World Fixtures
# =============================================================================


@pytest.fixture
def world() -> InMemoryWorld:
    """A small world.

    Locations form a 3x3 grid centred on ``town`` at (0, 0) in the
    overworld, missing the north-east corner. ``town`` has a regular exit
    to the south. ``cellar`` has no coordinates.

    Content:
        class ``warrior`` grants legacy abilities ``strike`` and ``shield-bash``
        item ``ring-phasing`` grants feature ``spell-phasewalk``
        item ``sword-of-strikes`` grants legacy ability ``strike``
        features for teleport, recall, levitate, light, detect, unlock,
        invisibility and a combat fireball
    """
    w = InMemoryWorld()

    names = {
        (-1, -1): "Old Mill",
        (0, -1): "North Field",
        (-1, 0): "West Gate",
        (1, 0): "East Market",
        (-1, 1): "Graveyard",
        (0, 1): "South Road",
        (1, 1): "Farmstead",
    }
    w.add_location(
        LocationRecord(
            id="town",
            name="Town Square",
            grid_x=0,
            grid_y=0,
            area_id="overworld",
            exit_directions=frozenset({"SOUTH"}),
        )
    )
    for (x, y), name in names.items():
        w.add_location(
            LocationRecord(id=f"loc_{x}_{y}", name=name, grid_x=x, grid_y=y, area_id="overworld")
        )
    w.add_location(LocationRecord(id="cellar", name="Cellar"))
    w.add_location(
        LocationRecord(id="crypt", name="Crypt Entrance", grid_x=0, grid_y=-1, area_id="crypt")
    )

    w.add_legacy_ability(
        LegacyAbilityRecord(
            id="strike",
            name="Strike",
            class_id="warrior",
            ability_type="combat",
            target_type="single_enemy",
            range=5,
            base_damage=8,
            effects='[{"type": "damage", "modifier": 2}]',
        )
    )
    w.add_legacy_ability(
        LegacyAbilityRecord(
            id="shield-bash",
            name="Shield Bash",
            class_id="warrior",
            ability_type="combat",
            target_type="single_enemy",
            cooldown_type="short",
            cooldown_rounds=2,
            effects='[{"type": "stun", "duration": 1}]',
        )
    )

    w.add_feature(
        spell_feature(
            "spell-phasewalk",
            "Phasewalk",
            utility_spell("phase_walk", "seconds", 30, params={"range": 1}),
        )
    )
    w.add_feature(spell_feature("spell-teleport", "Teleport", utility_spell("teleport", "seconds", 60)))
    w.add_feature(spell_feature("spell-recall", "Recall", utility_spell("recall", "uses_per_day", 1)))
    w.add_feature(
        spell_feature("spell-levitate", "Levitate", utility_spell("levitate", "uses_per_day", 3))
    )
    w.add_feature(spell_feature("spell-light", "Light", utility_spell("light", params={"radius": 20})))
    w.add_feature(
        spell_feature(
            "spell-detect",
            "Detect Secrets",
            utility_spell("detect_secret", "rounds", 5, params={"reveals": ["hidden_exit", "trap"]}),
        )
    )
    w.add_feature(spell_feature("spell-unlock", "Knock", utility_spell("unlock", "seconds", 10)))
    w.add_feature(
        spell_feature(
            "spell-invisibility",
            "Invisibility",
            utility_spell(
                "invisibility",
                "seconds",
                120,
                params={"duration": 180, "interruptedByCombat": True},
            ),
        )
    )
    w.add_feature(
        spell_feature(
            "spell-fireball",
            "Fireball",
            {
                "spellType": "combat",
                "combat": {"target": "area", "range": 30, "baseDamage": 20, "damageType": "fire"},
                "cooldown": {"type": "rounds", "value": 3},
                "requirements": {"level": 5},
            },
        )
    )
    w.add_feature(FeatureRecord(id="feat-darkvision", name="Darkvision", data="{}"))

    w.add_item(ItemRecord(id="ring-phasing", name="Ring of Phasing", feature_ids=("spell-phasewalk",)))
    w.add_item(ItemRecord(id="sword-of-strikes", name="Sword of Strikes", ability_ids=("strike",)))

    w.add_actor(
        ActorSnapshot(
            id="hero",
            level=3,
            class_id="warrior",
            item_ids=("ring-phasing", "sword-of-strikes"),
            feature_ids=(
                "feat-darkvision",
                "spell-teleport",
                "spell-recall",
                "spell-levitate",
                "spell-light",
                "spell-detect",
                "spell-unlock",
                "spell-invisibility",
                "spell-fireball",
            ),
            current_location_id="town",
            visited_location_ids=frozenset({"town"}),
        )
    )
    return w


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def ledger_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def ledger(ledger_store: InMemoryLedgerStore, ledger_settings: LedgerSettings) -> CooldownLedger:
    return CooldownLedger(ledger_store, settings=ledger_settings)


@pytest.fixture
def aggregator(world: InMemoryWorld) -> SourceAggregator:
    return SourceAggregator(world)


@pytest.fixture
def dispatcher(world: InMemoryWorld, dispatcher_settings: DispatcherSettings) -> ActionDispatcher:
    return ActionDispatcher(
        actors=world,
        locations=world,
        revealer=world,
        settings=dispatcher_settings,
    )


@pytest.fixture
def caster(
    world: InMemoryWorld,
    aggregator: SourceAggregator,
    ledger: CooldownLedger,
    dispatcher: ActionDispatcher,
    clock: FakeClock,
) -> AbilityCaster:
    return AbilityCaster(
        actors=world,
        aggregator=aggregator,
        ledger=ledger,
        dispatcher=dispatcher,
        settings=CasterSettings(require_known_ability=True),
        clock=clock,
    )
