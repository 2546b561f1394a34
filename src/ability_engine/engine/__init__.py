"""Ability resolution engine.

This module turns a cast request into a decision and, when allowed, an
effect: it unifies ability sources, validates prerequisites, keeps the
cooldown/charge ledger, dispatches utility effects and restores daily
charges.

Submodules:
    aggregator: Source aggregation (class grant, items, features)
    requirements: Level, class and feature prerequisite checks
    locks: Per-(actor, ability) re-entrant locks
    ledger: Cooldown/charge ledger for all cooldown modalities
    dispatcher: Closed table of utility effect handlers
    caster: Cast orchestration (validate, check, dispatch, consume)
    scheduler: Daily charge reset, on demand or in a background thread

Example:
    >>> from ability_engine.engine import (
    ...     AbilityCaster, ActionDispatcher, CooldownLedger, SourceAggregator
    ... )
    >>> caster = AbilityCaster(
    ...     actors=world,
    ...     aggregator=SourceAggregator(world),
    ...     ledger=CooldownLedger(InMemoryLedgerStore()),
    ...     dispatcher=ActionDispatcher(actors=world, locations=world),
    ... )
    >>> outcome = caster.cast("hero", "spell-phasewalk", {"direction": "NORTH"})
"""

from __future__ import annotations

from ability_engine.engine.aggregator import (
    AggregationIssue,
    AggregationResult,
    SourceAggregator,
    ability_from_legacy,
)
from ability_engine.engine.caster import AbilityCaster
from ability_engine.engine.dispatcher import (
    ActionDispatcher,
    EffectContext,
    EffectHandler,
    PhaseDestination,
    effect,
    get_all_effects,
    get_effect,
)
from ability_engine.engine.ledger import CooldownLedger, now_ms
from ability_engine.engine.locks import KeyedLocks
from ability_engine.engine.requirements import RequirementFailure, check_requirements
from ability_engine.engine.scheduler import DailyResetScheduler


__all__ = [
    # Aggregation
    "SourceAggregator",
    "AggregationResult",
    "AggregationIssue",
    "ability_from_legacy",
    # Requirements
    "check_requirements",
    "RequirementFailure",
    # Ledger
    "KeyedLocks",
    "CooldownLedger",
    "now_ms",
    # Dispatch
    "ActionDispatcher",
    "EffectContext",
    "EffectHandler",
    "PhaseDestination",
    "effect",
    "get_effect",
    "get_all_effects",
    # Orchestration
    "AbilityCaster",
    "DailyResetScheduler",
]
