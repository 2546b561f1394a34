"""In-memory collaborators.

Thread-safe dictionaries standing in for the persistence layer. They are
what the test suite runs against and are usable by embedding callers that
keep their world in process.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Iterable

from ability_engine.core.logging import get_logger
from ability_engine.models.enums import RevealKind
from ability_engine.models.ledger import LedgerEntry
from ability_engine.models.outcome import HiddenExitInfo, RevealedInfo, TrapInfo
from ability_engine.models.world import (
    ActorSnapshot,
    FeatureRecord,
    ItemRecord,
    LegacyAbilityRecord,
    LocationRecord,
)

logger = get_logger(__name__)


# =============================================================================
# Ledger Store
# =============================================================================


class InMemoryLedgerStore:
    """Ledger entries held in a dict keyed by (owner_id, owner_type, ability_id)."""

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str, str], LedgerEntry] = {}
        self._lock = threading.Lock()

    def get(self, owner_id: str, owner_type: str, ability_id: str) -> LedgerEntry | None:
        with self._lock:
            return self._entries.get((owner_id, owner_type, ability_id))

    def put(self, entry: LedgerEntry) -> None:
        with self._lock:
            self._entries[(entry.owner_id, entry.owner_type, entry.ability_id)] = entry

    def entries(self, owner_id: str | None = None) -> list[LedgerEntry]:
        with self._lock:
            return [
                entry
                for entry in self._entries.values()
                if owner_id is None or entry.owner_id == owner_id
            ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# =============================================================================
# World
# =============================================================================


class InMemoryWorld:
    """Actors, locations and content in one place.

    Implements ``ActorRepository``, ``LocationRepository``,
    ``ContentRepository`` and ``SecretRevealer``.

    Example:
        >>> world = InMemoryWorld()
        >>> world.add_location(LocationRecord(id="town", name="Town", grid_x=0, grid_y=0))
        >>> world.add_actor(ActorSnapshot(id="hero", current_location_id="town"))
        >>> world.find_by_coordinates(0, 0, "overworld").id
        'town'
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._actors: dict[str, ActorSnapshot] = {}
        self._locations: dict[str, LocationRecord] = {}
        self._by_coordinates: dict[tuple[int, int, str], str] = {}
        self._features: dict[str, FeatureRecord] = {}
        self._items: dict[str, ItemRecord] = {}
        self._legacy: dict[str, LegacyAbilityRecord] = {}
        self._hidden_exits: dict[str, list[HiddenExitInfo]] = defaultdict(list)
        self._traps: dict[str, list[TrapInfo]] = defaultdict(list)
        self._invisible: dict[str, list[str]] = defaultdict(list)

    # -------------------------------------------------------------------------
    # Population
    # -------------------------------------------------------------------------

    def add_actor(self, actor: ActorSnapshot) -> None:
        with self._lock:
            self._actors[actor.id] = actor

    def add_location(self, location: LocationRecord) -> None:
        with self._lock:
            self._locations[location.id] = location
            if location.has_coordinates:
                key = (location.grid_x, location.grid_y, location.area_id)
                self._by_coordinates[key] = location.id  # type: ignore[index]

    def add_feature(self, feature: FeatureRecord) -> None:
        with self._lock:
            self._features[feature.id] = feature

    def add_item(self, item: ItemRecord) -> None:
        with self._lock:
            self._items[item.id] = item

    def add_legacy_ability(self, record: LegacyAbilityRecord) -> None:
        with self._lock:
            self._legacy[record.id] = record

    def add_hidden_exit(self, location_id: str, info: HiddenExitInfo) -> None:
        with self._lock:
            self._hidden_exits[location_id].append(info)

    def add_trap(self, location_id: str, info: TrapInfo) -> None:
        with self._lock:
            self._traps[location_id].append(info)

    def add_invisible_creature(self, location_id: str, name: str) -> None:
        with self._lock:
            self._invisible[location_id].append(name)

    def set_in_combat(self, actor_id: str, in_combat: bool) -> None:
        with self._lock:
            actor = self._actors[actor_id]
            self._actors[actor_id] = actor.model_copy(update={"in_combat": in_combat})

    # -------------------------------------------------------------------------
    # ActorRepository
    # -------------------------------------------------------------------------

    def get_actor(self, actor_id: str) -> ActorSnapshot | None:
        with self._lock:
            return self._actors.get(actor_id)

    def set_current_location(self, actor_id: str, location_id: str) -> None:
        with self._lock:
            actor = self._actors[actor_id]
            self._actors[actor_id] = actor.model_copy(
                update={"current_location_id": location_id}
            )
        logger.debug("Actor moved", actor_id=actor_id, location_id=location_id)

    def add_visited_location(self, actor_id: str, location_id: str) -> bool:
        with self._lock:
            actor = self._actors[actor_id]
            if location_id in actor.visited_location_ids:
                return False
            self._actors[actor_id] = actor.model_copy(
                update={"visited_location_ids": actor.visited_location_ids | {location_id}}
            )
            return True

    # -------------------------------------------------------------------------
    # LocationRepository
    # -------------------------------------------------------------------------

    def get_location(self, location_id: str) -> LocationRecord | None:
        with self._lock:
            return self._locations.get(location_id)

    def find_by_coordinates(self, x: int, y: int, area_id: str) -> LocationRecord | None:
        with self._lock:
            location_id = self._by_coordinates.get((x, y, area_id))
            return self._locations.get(location_id) if location_id else None

    # -------------------------------------------------------------------------
    # ContentRepository
    # -------------------------------------------------------------------------

    def get_feature(self, feature_id: str) -> FeatureRecord | None:
        with self._lock:
            return self._features.get(feature_id)

    def get_item(self, item_id: str) -> ItemRecord | None:
        with self._lock:
            return self._items.get(item_id)

    def get_legacy_ability(self, ability_id: str) -> LegacyAbilityRecord | None:
        with self._lock:
            return self._legacy.get(ability_id)

    def legacy_abilities_for_class(self, class_id: str) -> list[LegacyAbilityRecord]:
        with self._lock:
            return [record for record in self._legacy.values() if record.class_id == class_id]

    # -------------------------------------------------------------------------
    # SecretRevealer
    # -------------------------------------------------------------------------

    def reveal(self, location_id: str, kinds: Iterable[RevealKind]) -> RevealedInfo:
        wanted = set(kinds)
        with self._lock:
            return RevealedInfo(
                hidden_exits=tuple(self._hidden_exits.get(location_id, []))
                if RevealKind.HIDDEN_EXIT in wanted
                else (),
                traps=tuple(self._traps.get(location_id, []))
                if RevealKind.TRAP in wanted
                else (),
                invisible_creatures=tuple(self._invisible.get(location_id, []))
                if RevealKind.INVISIBLE_CREATURE in wanted
                else (),
            )


__all__ = [
    "InMemoryLedgerStore",
    "InMemoryWorld",
]
