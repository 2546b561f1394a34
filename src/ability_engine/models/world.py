"""Records consumed from the persistence collaborators.

These are read-side snapshots: the engine never mutates them directly.
Changes to the world go through the repository calls
(``set_current_location``, ``add_visited_location``) and are echoed in the
cast outcome's mutation list.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ability_engine.core.constants import DEFAULT_AREA_ID


class ActorSnapshot(BaseModel):
    """A character as seen at the start of a cast.

    Attributes:
        id: Actor identifier.
        level: Character level.
        class_id: Character class, if any.
        item_ids: Equipped item ids, in slot order.
        feature_ids: Features attached to the character.
        current_location_id: Where the actor is, if anywhere.
        visited_location_ids: Locations the actor has seen.
        in_combat: Whether the actor is in an active combat session.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    level: int = Field(default=1, ge=1)
    class_id: str | None = None
    item_ids: tuple[str, ...] = ()
    feature_ids: tuple[str, ...] = ()
    current_location_id: str | None = None
    visited_location_ids: frozenset[str] = frozenset()
    in_combat: bool = False


class LocationRecord(BaseModel):
    """A node of the location graph."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    grid_x: int | None = None
    grid_y: int | None = None
    area_id: str = DEFAULT_AREA_ID
    exit_directions: frozenset[str] = frozenset()
    """Upper-case directions that already have a regular exit."""

    @field_validator("area_id", mode="before")
    @classmethod
    def default_area(cls, value: Any) -> Any:
        return value or DEFAULT_AREA_ID

    @property
    def has_coordinates(self) -> bool:
        return self.grid_x is not None and self.grid_y is not None


class ItemRecord(BaseModel):
    """An equipped item. Items grant abilities two ways."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    ability_ids: tuple[str, ...] = ()
    """Legacy ability table ids."""
    feature_ids: tuple[str, ...] = ()
    """Features whose data blob may encode a spell."""


class FeatureRecord(BaseModel):
    """A generic attachable game-data record with an opaque JSON payload."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    data: str = "{}"


class LegacyAbilityRecord(BaseModel):
    """A row of the legacy ability table."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    class_id: str | None = None
    ability_type: str = "combat"
    target_type: str = "single_enemy"
    range: int = 0
    cooldown_type: str = "none"
    cooldown_rounds: int = 0
    effects: str = "[]"
    """JSON array of effect objects."""
    base_damage: int = 0
    min_level: int = 1

    def effect_list(self) -> list[dict[str, Any]]:
        """Decode the effects column; malformed JSON yields no effects."""
        try:
            data = json.loads(self.effects or "[]")
        except json.JSONDecodeError:
            return []
        if not isinstance(data, list):
            return []
        return [entry for entry in data if isinstance(entry, dict)]


__all__ = [
    "ActorSnapshot",
    "LocationRecord",
    "ItemRecord",
    "FeatureRecord",
    "LegacyAbilityRecord",
]
