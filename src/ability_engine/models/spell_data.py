"""Decoding of spell payloads stored in a feature's data blob.

A feature's ``data`` is an opaque JSON document. When it carries a
``spellType`` of ``combat``, ``utility`` or ``passive`` it encodes an
ability; anything else is an ordinary feature and decodes to ``None``.
Unknown keys are ignored. A blob that declares a spell type but does not
validate raises ``ContentDecodeError``.

Example:
    >>> spell = decode_spell_data(
    ...     '{"spellType": "utility", "utility": {"action": "recall"},'
    ...     ' "cooldown": {"type": "uses_per_day", "value": 1}}'
    ... )
    >>> spell.utility.action
    'recall'
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ability_engine.core.exceptions import ContentDecodeError
from ability_engine.models.ability import (
    AbilityCost,
    AbilityRequirements,
    AbilityValue,
    EffectDescriptor,
    Provenance,
    cooldown_from_blob,
)
from ability_engine.models.enums import AbilityType, TargetType
from ability_engine.models.world import FeatureRecord


class _Blob(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# =============================================================================
# Common Parts
# =============================================================================


class SpellCooldown(_Blob):
    type: Literal["none", "seconds", "uses_per_day", "rounds"]
    value: int = 0


class SpellCost(_Blob):
    mana: int = 0
    stamina: int = 0
    health: int = 0

    def to_cost(self) -> AbilityCost:
        return AbilityCost(
            mana=max(0, self.mana),
            stamina=max(0, self.stamina),
            health=max(0, self.health),
        )


class SpellRequirements(_Blob):
    level: int = 1
    class_ids: list[str] = Field(default_factory=list)
    feature_ids: list[str] = Field(default_factory=list)

    def to_requirements(self) -> AbilityRequirements:
        return AbilityRequirements(
            min_level=max(1, self.level),
            class_ids=tuple(self.class_ids),
            feature_ids=tuple(self.feature_ids),
        )


class CombatEffect(_Blob):
    """``dot``, ``hot``, ``buff``, ``debuff``, ``stun``, ``root``, ``slow``..."""

    type: str
    stat: str | None = None
    modifier: int = 0
    damage: int = 0
    duration: int = 0

    def to_descriptor(self) -> EffectDescriptor:
        return EffectDescriptor.from_mapping(self.model_dump())


class _SpellData(_Blob):
    cooldown: SpellCooldown = Field(default_factory=lambda: SpellCooldown(type="none"))
    cost: SpellCost = Field(default_factory=SpellCost)
    requirements: SpellRequirements = Field(default_factory=SpellRequirements)

    def _common(self, feature: FeatureRecord, provenance: Provenance) -> dict[str, Any]:
        return {
            "id": feature.id,
            "name": feature.name,
            "description": feature.description,
            "cooldown": cooldown_from_blob(self.cooldown.type, self.cooldown.value),
            "cost": self.cost.to_cost(),
            "requirements": self.requirements.to_requirements(),
            "provenance": (provenance,),
        }


# =============================================================================
# Combat Spells
# =============================================================================


class CombatConfig(_Blob):
    target: TargetType
    range: int = 0
    base_damage: int = 0
    base_healing: int = 0
    damage_type: str = "physical"
    effects: list[CombatEffect] = Field(default_factory=list)


class CombatSpellData(_SpellData):
    spell_type: Literal["combat"] = "combat"
    combat: CombatConfig

    def to_ability(self, feature: FeatureRecord, provenance: Provenance) -> AbilityValue:
        """Translate into the unified ability value."""
        effects = [effect.to_descriptor() for effect in self.combat.effects]
        return AbilityValue(
            **self._common(feature, provenance),
            ability_type=AbilityType.SPELL,
            target_type=self.combat.target,
            range=max(0, self.combat.range),
            base_damage=self.combat.base_damage,
            base_healing=self.combat.base_healing,
            effects=tuple(effects),
            action_params={"damageType": self.combat.damage_type},
        )


# =============================================================================
# Utility Spells
# =============================================================================


class UtilityParams(_Blob):
    """Effect parameters. Values must already have their declared JSON types."""

    model_config = ConfigDict(strict=True)

    # phase_walk
    range: int | None = None
    ignores_exits: bool | None = None
    ignores_terrain: list[str] | None = None

    # teleport
    target_type: str | None = None
    max_distance: int | None = None
    cast_time: int | None = None
    familiarity_bonus: bool | None = None

    # levitate
    vertical_access: bool | None = None
    max_altitude: int | None = None

    # detect_secret
    reveals: list[str] | None = None

    # invisibility
    target: str | None = None
    breaks_on: list[str] | None = None

    # light
    radius: int | None = Field(default=None, ge=0)
    follows: bool | None = None
    brightness: str | None = None

    # unlock
    max_difficulty: str | None = None
    breaks_lock: bool | None = None

    duration: int | None = Field(default=None, ge=0)
    interrupted_by_combat: bool | None = None

    def to_action_params(self) -> dict[str, Any]:
        """The set parameters keyed by their stored camelCase names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class UtilityConfig(_Blob):
    action: str
    params: UtilityParams = Field(default_factory=UtilityParams)


class UtilitySpellData(_SpellData):
    spell_type: Literal["utility"] = "utility"
    utility: UtilityConfig

    def to_ability(self, feature: FeatureRecord, provenance: Provenance) -> AbilityValue:
        """Translate into the unified ability value."""
        params = self.utility.params
        return AbilityValue(
            **self._common(feature, provenance),
            ability_type=AbilityType.UTILITY,
            target_type=TargetType.SELF,
            range=params.range if params.range is not None and params.range > 0 else 0,
            action=self.utility.action,
            action_params=params.to_action_params(),
            interrupted_by_combat=bool(params.interrupted_by_combat),
        )


# =============================================================================
# Passive Abilities
# =============================================================================


class PassiveConfig(_Blob):
    """Trigger is ``always``, ``on_hit``, ``on_crit``, ``below_health``, ``in_terrain`` or ``on_kill``."""

    trigger: str
    trigger_params: dict[str, Any] = Field(default_factory=dict)
    effects: list[CombatEffect] = Field(default_factory=list)


class PassiveSpellData(_SpellData):
    spell_type: Literal["passive"] = "passive"
    passive: PassiveConfig

    def to_ability(self, feature: FeatureRecord, provenance: Provenance) -> AbilityValue:
        """Translate into the unified ability value."""
        return AbilityValue(
            **self._common(feature, provenance),
            ability_type=AbilityType.PASSIVE,
            target_type=TargetType.SELF,
            effects=tuple(effect.to_descriptor() for effect in self.passive.effects),
            action_params={"trigger": self.passive.trigger, **self.passive.trigger_params},
        )


SpellData = CombatSpellData | UtilitySpellData | PassiveSpellData

_SPELL_MODELS: dict[str, type[CombatSpellData] | type[UtilitySpellData] | type[PassiveSpellData]] = {
    "combat": CombatSpellData,
    "utility": UtilitySpellData,
    "passive": PassiveSpellData,
}


def decode_spell_data(data: str | None, *, feature_id: str | None = None) -> SpellData | None:
    """Decode a feature data blob.

    Args:
        data: The raw JSON blob.
        feature_id: Feature the blob belongs to, for error context.

    Returns:
        The decoded spell, or None if the blob does not describe a spell.

    Raises:
        ContentDecodeError: If the blob is not JSON, or declares a spell
            type but does not match its shape.
    """
    if data is None or not data.strip() or data.strip() == "{}":
        return None

    try:
        payload = json.loads(data)
    except json.JSONDecodeError as exc:
        raise ContentDecodeError(
            f"Feature data is not valid JSON: {exc.msg}",
            feature_id=feature_id,
        ) from exc

    if not isinstance(payload, dict):
        return None

    spell_type = payload.get("spellType")
    model = _SPELL_MODELS.get(spell_type) if isinstance(spell_type, str) else None
    if model is None:
        return None

    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ContentDecodeError(
            f"Failed to parse {spell_type} spell",
            feature_id=feature_id,
            spell_type=spell_type,
            details={"errors": exc.error_count()},
        ) from exc


__all__ = [
    "SpellCooldown",
    "SpellCost",
    "SpellRequirements",
    "CombatEffect",
    "CombatConfig",
    "CombatSpellData",
    "UtilityParams",
    "UtilityConfig",
    "UtilitySpellData",
    "PassiveConfig",
    "PassiveSpellData",
    "SpellData",
    "decode_spell_data",
]
