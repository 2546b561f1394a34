"""The unified, source-tagged ability value.

Abilities reach a character from three places (the legacy ability table,
features on equipped items, features on the character). The Source
Aggregator translates each of them into one ``AbilityValue`` so that no
other component needs to know where an ability came from.

Cooldown policy is a tagged variant: exactly one of ``NoCooldown``,
``FixedDuration``, ``ChargePool`` or ``CombatRounds`` applies, selected by
the ``kind`` discriminator.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field

from ability_engine.models.enums import AbilityType, SourceKind, TargetType


# =============================================================================
# Cooldown Policy
# =============================================================================


class _Policy(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class NoCooldown(_Policy):
    """Always available; consuming it changes nothing."""

    kind: Literal["none"] = "none"


class FixedDuration(_Policy):
    """Unavailable for ``seconds`` after each use."""

    kind: Literal["fixed_duration"] = "fixed_duration"
    seconds: int = Field(ge=0)


class ChargePool(_Policy):
    """A per-day pool of ``max_charges`` uses, restored by the daily reset."""

    kind: Literal["charge_pool"] = "charge_pool"
    max_charges: int = Field(ge=0)


class CombatRounds(_Policy):
    """Unavailable for ``rounds`` combat rounds, tracked on the wall clock."""

    kind: Literal["combat_rounds"] = "combat_rounds"
    rounds: int = Field(ge=0)


CooldownPolicy = Annotated[
    NoCooldown | FixedDuration | ChargePool | CombatRounds,
    Field(discriminator="kind"),
]


def cooldown_from_blob(cooldown_type: str, value: int) -> NoCooldown | FixedDuration | ChargePool | CombatRounds:
    """Convert a feature blob cooldown (``type`` + ``value``) to a policy.

    Args:
        cooldown_type: One of ``none``, ``seconds``, ``uses_per_day``, ``rounds``.
        value: Seconds, charges or rounds depending on the type.

    Returns:
        The matching cooldown policy.

    Raises:
        ValueError: If the cooldown type is not recognized.
    """
    match cooldown_type:
        case "none":
            return NoCooldown()
        case "seconds":
            return FixedDuration(seconds=max(0, value))
        case "uses_per_day":
            return ChargePool(max_charges=max(0, value))
        case "rounds":
            return CombatRounds(rounds=max(0, value))
    raise ValueError(f"Unknown cooldown type: {cooldown_type!r}")


def cooldown_from_legacy(cooldown_type: str, cooldown_rounds: int) -> NoCooldown | CombatRounds:
    """Convert a legacy table cooldown to a policy.

    The legacy table labels cooldowns ``none``/``short``/``medium``/``long``
    and stores the actual length in rounds; only the round count matters.
    """
    if cooldown_type == "none" or cooldown_rounds <= 0:
        return NoCooldown()
    return CombatRounds(rounds=cooldown_rounds)


# =============================================================================
# Ability Parts
# =============================================================================


class AbilityCost(BaseModel):
    """Resource amounts spent to use an ability."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    mana: int = Field(default=0, ge=0)
    stamina: int = Field(default=0, ge=0)
    health: int = Field(default=0, ge=0)


class AbilityRequirements(BaseModel):
    """Prerequisites checked by the requirement validator.

    Attributes:
        min_level: Minimum character level.
        class_ids: Allowed classes; empty means any class.
        feature_ids: Features the character must have, all of them.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_level: int = Field(default=1, ge=1)
    class_ids: tuple[str, ...] = ()
    feature_ids: tuple[str, ...] = ()


class EffectDescriptor(BaseModel):
    """One mechanical effect of an ability: a type plus free-form parameters."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: str
    params: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EffectDescriptor":
        """Build a descriptor from a flat mapping such as ``{"type": "dot", "damage": 3}``."""
        params = {k: v for k, v in data.items() if k != "type" and v is not None}
        return cls(type=str(data.get("type", "unknown")), params=params)


class Provenance(BaseModel):
    """Where an ability came from."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: SourceKind
    source_id: str
    """Class id, item id or feature id that granted the ability."""


# =============================================================================
# Ability Value
# =============================================================================


class AbilityValue(BaseModel):
    """An immutable description of one usable ability.

    ``id`` is unique across all sources. When the same id is reachable
    through several sources the aggregator keeps one value and merges the
    provenance; ``provenance[0]`` is the source that was discovered first.

    Example:
        >>> blink = AbilityValue(
        ...     id="spell-blink",
        ...     name="Blink",
        ...     ability_type=AbilityType.UTILITY,
        ...     cooldown=FixedDuration(seconds=30),
        ...     action="phase_walk",
        ... )
        >>> blink.is_utility
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    name: str
    description: str = ""
    ability_type: AbilityType
    target_type: TargetType = TargetType.SELF
    range: int = Field(default=0, ge=0)
    base_damage: int = 0
    base_healing: int = 0
    cooldown: CooldownPolicy = Field(default_factory=NoCooldown)
    cost: AbilityCost = Field(default_factory=AbilityCost)
    requirements: AbilityRequirements = Field(default_factory=AbilityRequirements)
    effects: tuple[EffectDescriptor, ...] = ()
    action: str | None = None
    action_params: dict[str, Any] = Field(default_factory=dict)
    interrupted_by_combat: bool = False
    provenance: tuple[Provenance, ...] = ()

    @property
    def is_utility(self) -> bool:
        """Whether the action dispatcher can execute this ability."""
        return self.ability_type == AbilityType.UTILITY

    @property
    def primary_source(self) -> Provenance | None:
        """The source that first granted this ability."""
        return self.provenance[0] if self.provenance else None

    def with_provenance(self, *extra: Provenance) -> "AbilityValue":
        """Return a copy with ``extra`` sources appended, skipping duplicates."""
        merged = list(self.provenance)
        for item in extra:
            if item not in merged:
                merged.append(item)
        return self.model_copy(update={"provenance": tuple(merged)})


__all__ = [
    "NoCooldown",
    "FixedDuration",
    "ChargePool",
    "CombatRounds",
    "CooldownPolicy",
    "cooldown_from_blob",
    "cooldown_from_legacy",
    "AbilityCost",
    "AbilityRequirements",
    "EffectDescriptor",
    "Provenance",
    "AbilityValue",
]
