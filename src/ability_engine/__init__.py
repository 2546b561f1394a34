"""Ability Engine - ability resolution for a persistent game world.

Characters reach abilities from three sources: their class (the legacy
ability table), their equipped items and features attached to them. This
package decides whether an ability can fire right now, charges its
cooldown or daily charge, and executes utility effects against world
state.

- Gameplay failures are values (``CastFailure`` with a closed reason), never exceptions
- The ledger is the only shared mutable state; every key is serialized by its own lock
- Collaborators (actors, locations, content, ledger storage) are injected protocols

Example:
    >>> from ability_engine import (
    ...     AbilityCaster, ActionDispatcher, CooldownLedger, SourceAggregator
    ... )
    >>> from ability_engine.storage import InMemoryLedgerStore, InMemoryWorld
    >>>
    >>> world = InMemoryWorld()
    >>> caster = AbilityCaster(
    ...     actors=world,
    ...     aggregator=SourceAggregator(world),
    ...     ledger=CooldownLedger(InMemoryLedgerStore()),
    ...     dispatcher=ActionDispatcher(actors=world, locations=world),
    ... )
    >>> outcome = caster.cast("hero", "spell-recall")
    >>> if not outcome.ok:
    ...     print(outcome.reason)

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 schemas (abilities, ledger entries, outcomes, world records).
    storage: Collaborator protocols, in-memory and SQLite implementations.
    engine: Aggregation, requirements, ledger, dispatch, casting and daily reset.
"""

from __future__ import annotations

# Core
from ability_engine.core.config import Settings, get_settings
from ability_engine.core.exceptions import AbilityEngineError
from ability_engine.core.logging import configure_logging, get_logger

# Models
from ability_engine.models import (
    AbilityType,
    AbilityValue,
    CastFailure,
    CastSuccess,
    ChargePool,
    CombatRounds,
    FailureReason,
    FixedDuration,
    NoCooldown,
)

# Engine
from ability_engine.engine import (
    AbilityCaster,
    ActionDispatcher,
    CooldownLedger,
    DailyResetScheduler,
    SourceAggregator,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Core
    "Settings",
    "get_settings",
    "AbilityEngineError",
    "configure_logging",
    "get_logger",
    # Models
    "AbilityType",
    "AbilityValue",
    "NoCooldown",
    "FixedDuration",
    "ChargePool",
    "CombatRounds",
    "CastSuccess",
    "CastFailure",
    "FailureReason",
    # Engine
    "SourceAggregator",
    "CooldownLedger",
    "ActionDispatcher",
    "AbilityCaster",
    "DailyResetScheduler",
]
