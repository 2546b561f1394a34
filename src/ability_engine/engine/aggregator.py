"""Source aggregation: one ability list from three kinds of grant.

A character reaches abilities through its class (legacy ability table),
its equipped items (legacy ability ids and spell-bearing features) and
the features attached to it directly. The aggregator walks those sources
in that order, translates every record into an ``AbilityValue`` and
deduplicates by id, keeping the first occurrence and merging the
provenance of later ones into it.

Aggregation is a pure read. A source that cannot be resolved or decoded
is skipped, logged and reported in ``AggregationResult.errors``; it never
aborts the walk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from ability_engine.core.exceptions import ContentDecodeError
from ability_engine.core.logging import get_logger
from ability_engine.models.ability import (
    AbilityRequirements,
    AbilityValue,
    ChargePool,
    CombatRounds,
    EffectDescriptor,
    FixedDuration,
    NoCooldown,
    Provenance,
    cooldown_from_legacy,
)
from ability_engine.models.enums import AbilityType, SourceKind, TargetType
from ability_engine.models.spell_data import decode_spell_data
from ability_engine.models.world import ActorSnapshot, FeatureRecord, LegacyAbilityRecord
from ability_engine.storage.repositories import ContentRepository

logger = get_logger(__name__)

# Legacy rows predate the unified type list.
_LEGACY_TYPE_ALIASES: dict[str, AbilityType] = {
    "item": AbilityType.COMBAT,
}


@dataclass(frozen=True)
class AggregationIssue:
    """A source skipped during aggregation.

    Attributes:
        source: Kind of source that was being walked.
        source_id: Id of the record that failed.
        message: What went wrong.
    """

    source: SourceKind
    source_id: str
    message: str


@dataclass(frozen=True)
class AggregationResult:
    """Deduplicated abilities plus the side-channel error list."""

    abilities: tuple[AbilityValue, ...] = ()
    errors: tuple[AggregationIssue, ...] = ()

    @property
    def ids(self) -> list[str]:
        return [ability.id for ability in self.abilities]

    def get(self, ability_id: str) -> AbilityValue | None:
        """Find an aggregated ability by id."""
        for ability in self.abilities:
            if ability.id == ability_id:
                return ability
        return None

    def utility(self) -> list[AbilityValue]:
        return [ability for ability in self.abilities if ability.is_utility]


def ability_from_legacy(record: LegacyAbilityRecord, provenance: Provenance) -> AbilityValue:
    """Translate a legacy ability table row.

    Raises:
        ValueError: If the row's ability or target type is not recognized.
    """
    ability_type = _LEGACY_TYPE_ALIASES.get(record.ability_type) or AbilityType(record.ability_type)
    return AbilityValue(
        id=record.id,
        name=record.name,
        description=record.description,
        ability_type=ability_type,
        target_type=TargetType(record.target_type),
        range=max(0, record.range),
        base_damage=record.base_damage,
        cooldown=cooldown_from_legacy(record.cooldown_type, record.cooldown_rounds),
        requirements=AbilityRequirements(min_level=max(1, record.min_level)),
        effects=tuple(EffectDescriptor.from_mapping(effect) for effect in record.effect_list()),
        provenance=(provenance,),
    )


class _Collector:
    """Accumulates abilities in discovery order, first id wins."""

    def __init__(self) -> None:
        self.order: list[str] = []
        self.by_id: dict[str, AbilityValue] = {}
        self.errors: list[AggregationIssue] = []

    def add(self, ability: AbilityValue) -> None:
        kept = self.by_id.get(ability.id)
        if kept is None:
            self.order.append(ability.id)
            self.by_id[ability.id] = ability
            return
        if kept != ability.model_copy(update={"provenance": kept.provenance}):
            logger.info(
                "Duplicate ability id with different parameters, keeping first",
                ability_id=ability.id,
                kept_source=str(kept.primary_source),
                dropped_source=str(ability.primary_source),
            )
        self.by_id[ability.id] = kept.with_provenance(*ability.provenance)

    def fail(self, source: SourceKind, source_id: str, message: str) -> None:
        logger.warning(
            "Skipping ability source",
            source=str(source),
            source_id=source_id,
            error=message,
        )
        self.errors.append(AggregationIssue(source=source, source_id=source_id, message=message))

    def result(self) -> AggregationResult:
        return AggregationResult(
            abilities=tuple(self.by_id[ability_id] for ability_id in self.order),
            errors=tuple(self.errors),
        )


class SourceAggregator:
    """Builds the ability list reachable by a character.

    Example:
        >>> aggregator = SourceAggregator(world)
        >>> result = aggregator.for_actor(actor)
        >>> [ability.id for ability in result.abilities]
        ['strike', 'spell-phasewalk']
    """

    def __init__(self, content: ContentRepository) -> None:
        self.content = content

    def aggregate(
        self,
        class_id: str | None = None,
        item_ids: Iterable[str] = (),
        feature_ids: Iterable[str] = (),
    ) -> AggregationResult:
        """Walk class grant, then items, then features.

        Args:
            class_id: Character class, if any.
            item_ids: Equipped item ids, in slot order.
            feature_ids: Features attached directly to the character.

        Returns:
            Deduplicated abilities in discovery order, plus skipped sources.
        """
        collector = _Collector()

        if class_id:
            provenance = Provenance(kind=SourceKind.INNATE_TABLE, source_id=class_id)
            for record in self.content.legacy_abilities_for_class(class_id):
                self._add_legacy(collector, record, provenance, SourceKind.INNATE_TABLE)

        for item_id in item_ids:
            item = self.content.get_item(item_id)
            if item is None:
                collector.fail(SourceKind.ITEM, item_id, "Item not found")
                continue
            provenance = Provenance(kind=SourceKind.ITEM, source_id=item.id)
            for ability_id in item.ability_ids:
                record = self.content.get_legacy_ability(ability_id)
                if record is None:
                    collector.fail(SourceKind.ITEM, ability_id, f"Ability not found (item {item.id})")
                    continue
                self._add_legacy(collector, record, provenance, SourceKind.ITEM)
            for feature_id in item.feature_ids:
                self._add_feature(collector, feature_id, provenance, SourceKind.ITEM)

        for feature_id in feature_ids:
            provenance = Provenance(kind=SourceKind.FEATURE, source_id=feature_id)
            self._add_feature(collector, feature_id, provenance, SourceKind.FEATURE)

        return collector.result()

    def for_actor(self, actor: ActorSnapshot) -> AggregationResult:
        """Aggregate everything reachable by ``actor``."""
        return self.aggregate(actor.class_id, actor.item_ids, actor.feature_ids)

    def available_utility_abilities(self, actor: ActorSnapshot) -> list[AbilityValue]:
        """Utility abilities reachable by ``actor``, in aggregation order."""
        return self.for_actor(actor).utility()

    def find_by_id(self, ability_id: str) -> AbilityValue | None:
        """Look an ability up directly, legacy table first, then feature blobs.

        Returns:
            The ability, or None if no source defines it or it cannot be decoded.
        """
        record = self.content.get_legacy_ability(ability_id)
        if record is not None:
            provenance = Provenance(
                kind=SourceKind.INNATE_TABLE,
                source_id=record.class_id or record.id,
            )
            try:
                return ability_from_legacy(record, provenance)
            except ValueError as exc:
                logger.warning("Undecodable legacy ability", ability_id=ability_id, error=str(exc))
                return None

        feature = self.content.get_feature(ability_id)
        if feature is None:
            return None
        try:
            return self._ability_from_feature(
                feature, Provenance(kind=SourceKind.FEATURE, source_id=feature.id)
            )
        except ContentDecodeError as exc:
            logger.warning("Undecodable spell feature", feature_id=ability_id, error=exc.message)
            return None

    def known_policy(
        self, ability_id: str
    ) -> NoCooldown | FixedDuration | ChargePool | CombatRounds | None:
        """Cooldown policy of an ability, or None if it no longer resolves."""
        ability = self.find_by_id(ability_id)
        return ability.cooldown if ability else None

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _ability_from_feature(feature: FeatureRecord, provenance: Provenance) -> AbilityValue | None:
        spell = decode_spell_data(feature.data, feature_id=feature.id)
        if spell is None:
            return None
        try:
            return spell.to_ability(feature, provenance)
        except ValueError as exc:
            raise ContentDecodeError(
                f"Spell data does not form a valid ability: {exc}",
                feature_id=feature.id,
                spell_type=spell.spell_type,
            ) from exc

    @staticmethod
    def _add_legacy(
        collector: _Collector,
        record: LegacyAbilityRecord,
        provenance: Provenance,
        source: SourceKind,
    ) -> None:
        try:
            collector.add(ability_from_legacy(record, provenance))
        except ValueError as exc:
            collector.fail(source, record.id, str(exc))

    def _add_feature(
        self,
        collector: _Collector,
        feature_id: str,
        provenance: Provenance,
        source: SourceKind,
    ) -> None:
        feature = self.content.get_feature(feature_id)
        if feature is None:
            collector.fail(source, feature_id, "Feature not found")
            return
        try:
            ability = self._ability_from_feature(feature, provenance)
        except ContentDecodeError as exc:
            collector.fail(source, feature_id, exc.message)
            return
        if ability is not None:
            collector.add(ability)


__all__ = [
    "AggregationIssue",
    "AggregationResult",
    "SourceAggregator",
    "ability_from_legacy",
]
