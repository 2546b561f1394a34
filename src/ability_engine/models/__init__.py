"""Pydantic V2 schemas for the ability engine.

Submodules:
    enums: Closed vocabularies (AbilityType, FailureReason, ExitDirection, etc.)
    ability: The unified AbilityValue and its cooldown policy variants
    ledger: Persisted cooldown/charge entries and snapshots
    outcome: Cast results and world-state mutations
    world: Records read from the persistence collaborators
    spell_data: Decoding of spell payloads in feature data blobs

Example:
    >>> from ability_engine.models import AbilityValue, AbilityType, ChargePool
    >>> recall = AbilityValue(
    ...     id="spell-recall",
    ...     name="Recall",
    ...     ability_type=AbilityType.UTILITY,
    ...     cooldown=ChargePool(max_charges=1),
    ...     action="recall",
    ... )
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from ability_engine.models.enums import (
    AbilityType,
    ExitDirection,
    FailureReason,
    RequirementKind,
    RevealKind,
    SourceKind,
    TargetType,
    UtilityAction,
)

# =============================================================================
# Abilities
# =============================================================================
from ability_engine.models.ability import (
    AbilityCost,
    AbilityRequirements,
    AbilityValue,
    ChargePool,
    CombatRounds,
    CooldownPolicy,
    EffectDescriptor,
    FixedDuration,
    NoCooldown,
    Provenance,
    cooldown_from_legacy,
    cooldown_from_blob,
)

# =============================================================================
# Ledger
# =============================================================================
from ability_engine.models.ledger import LedgerEntry, LedgerSnapshot, seconds_until

# =============================================================================
# Outcomes
# =============================================================================
from ability_engine.models.outcome import (
    CastFailure,
    CastOutcome,
    CastSuccess,
    HiddenExitInfo,
    LocationChanged,
    LocationVisited,
    RevealedInfo,
    StatusApplied,
    TrapInfo,
    WorldMutation,
)

# =============================================================================
# World Records
# =============================================================================
from ability_engine.models.world import (
    ActorSnapshot,
    FeatureRecord,
    ItemRecord,
    LegacyAbilityRecord,
    LocationRecord,
)

# =============================================================================
# Spell Data
# =============================================================================
from ability_engine.models.spell_data import (
    CombatSpellData,
    PassiveSpellData,
    SpellData,
    UtilityParams,
    UtilitySpellData,
    decode_spell_data,
)


__all__ = [
    # Enums
    "AbilityType",
    "TargetType",
    "SourceKind",
    "FailureReason",
    "RequirementKind",
    "ExitDirection",
    "UtilityAction",
    "RevealKind",
    # Abilities
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
    # Ledger
    "LedgerEntry",
    "LedgerSnapshot",
    "seconds_until",
    # Outcomes
    "LocationChanged",
    "LocationVisited",
    "StatusApplied",
    "WorldMutation",
    "HiddenExitInfo",
    "TrapInfo",
    "RevealedInfo",
    "CastSuccess",
    "CastFailure",
    "CastOutcome",
    # World
    "ActorSnapshot",
    "LocationRecord",
    "ItemRecord",
    "FeatureRecord",
    "LegacyAbilityRecord",
    # Spell data
    "CombatSpellData",
    "UtilityParams",
    "UtilitySpellData",
    "PassiveSpellData",
    "SpellData",
    "decode_spell_data",
]
