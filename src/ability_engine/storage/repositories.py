"""Collaborator interfaces consumed by the engine.

The engine never reaches for global repositories. Every lookup and every
write goes through one of these protocols, passed in at construction, so
components can be exercised against in-memory fakes.
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from ability_engine.models.enums import RevealKind
from ability_engine.models.ledger import LedgerEntry
from ability_engine.models.outcome import RevealedInfo
from ability_engine.models.world import (
    ActorSnapshot,
    FeatureRecord,
    ItemRecord,
    LegacyAbilityRecord,
    LocationRecord,
)


@runtime_checkable
class LedgerStore(Protocol):
    """Durable storage of ledger entries keyed by (owner_id, owner_type, ability_id)."""

    def get(self, owner_id: str, owner_type: str, ability_id: str) -> LedgerEntry | None:
        """Return the entry for the key, or None if the ability was never used."""
        ...

    def put(self, entry: LedgerEntry) -> None:
        """Insert or replace an entry."""
        ...

    def entries(self, owner_id: str | None = None) -> list[LedgerEntry]:
        """List stored entries, optionally for one owner only."""
        ...


@runtime_checkable
class ActorRepository(Protocol):
    """Actor lookup and the location-pointer mutations."""

    def get_actor(self, actor_id: str) -> ActorSnapshot | None: ...

    def set_current_location(self, actor_id: str, location_id: str) -> None: ...

    def add_visited_location(self, actor_id: str, location_id: str) -> bool:
        """Record a visit. Returns True if the location was not visited before."""
        ...


@runtime_checkable
class LocationRepository(Protocol):
    """Location lookup by id and by coordinate triple."""

    def get_location(self, location_id: str) -> LocationRecord | None: ...

    def find_by_coordinates(self, x: int, y: int, area_id: str) -> LocationRecord | None: ...


@runtime_checkable
class ContentRepository(Protocol):
    """Raw record lookup for features, items and the legacy ability table."""

    def get_feature(self, feature_id: str) -> FeatureRecord | None: ...

    def get_item(self, item_id: str) -> ItemRecord | None: ...

    def get_legacy_ability(self, ability_id: str) -> LegacyAbilityRecord | None: ...

    def legacy_abilities_for_class(self, class_id: str) -> list[LegacyAbilityRecord]: ...


@runtime_checkable
class SecretRevealer(Protocol):
    """Source of hidden exits, traps and invisible creatures at a location."""

    def reveal(self, location_id: str, kinds: Iterable[RevealKind]) -> RevealedInfo: ...


class NothingHidden:
    """A revealer for worlds without secrets; every search comes back empty."""

    def reveal(self, location_id: str, kinds: Iterable[RevealKind]) -> RevealedInfo:
        return RevealedInfo()


__all__ = [
    "LedgerStore",
    "ActorRepository",
    "LocationRepository",
    "ContentRepository",
    "SecretRevealer",
    "NothingHidden",
]
