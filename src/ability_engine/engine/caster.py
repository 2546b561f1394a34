"""Cast orchestration.

A cast runs as one logical unit:

    actor lookup -> ability resolution -> requirement validation ->
    combat restriction -> [key lock: ledger check -> dispatch -> consume]

The ledger is charged only when the handler reports success, and the
whole check/dispatch/consume sequence runs under the (actor, ability) lock
so two concurrent casts cannot both spend the last charge.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from ability_engine.core.config import CasterSettings, get_settings
from ability_engine.core.logging import get_logger, log_context
from ability_engine.engine.aggregator import SourceAggregator
from ability_engine.engine.dispatcher import ActionDispatcher
from ability_engine.engine.ledger import CooldownLedger, now_ms
from ability_engine.engine.requirements import check_requirements
from ability_engine.models.ability import AbilityValue
from ability_engine.models.enums import FailureReason
from ability_engine.models.ledger import LedgerSnapshot
from ability_engine.models.outcome import CastFailure, CastSuccess
from ability_engine.models.world import ActorSnapshot
from ability_engine.storage.repositories import ActorRepository

logger = get_logger(__name__)


class AbilityCaster:
    """Entry point for casting abilities.

    Attributes:
        actors: Actor lookup.
        aggregator: Resolves ability ids reachable by an actor.
        ledger: Cooldown/charge bookkeeping.
        dispatcher: Utility effect execution.
        settings: Cast settings.
        clock: Returns the current time in epoch milliseconds.
    """

    def __init__(
        self,
        actors: ActorRepository,
        aggregator: SourceAggregator,
        ledger: CooldownLedger,
        dispatcher: ActionDispatcher,
        settings: CasterSettings | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.actors = actors
        self.aggregator = aggregator
        self.ledger = ledger
        self.dispatcher = dispatcher
        self.settings = settings or get_settings().caster
        self.clock = clock

    # =========================================================================
    # Validation
    # =========================================================================

    def _resolve(self, actor: ActorSnapshot, ability_id: str) -> AbilityValue | None:
        if self.settings.require_known_ability:
            return self.aggregator.for_actor(actor).get(ability_id)
        return self.aggregator.find_by_id(ability_id)

    def _validate(
        self, actor_id: str, ability_id: str
    ) -> tuple[ActorSnapshot, AbilityValue] | CastFailure:
        """Everything that can be decided without the ledger."""
        actor = self.actors.get_actor(actor_id)
        if actor is None:
            return CastFailure.of(FailureReason.NOT_FOUND, "Character not found")

        ability = self._resolve(actor, ability_id)
        if ability is None:
            return CastFailure.of(FailureReason.NOT_FOUND, "Ability not found")

        failed = check_requirements(
            actor.level, actor.class_id, actor.feature_ids, ability.requirements
        )
        if failed is not None:
            return CastFailure.of(
                FailureReason.REQUIREMENT_NOT_MET,
                failed.message,
                requirement=failed.kind,
            )

        if actor.in_combat and ability.interrupted_by_combat:
            return CastFailure.of(FailureReason.IN_COMBAT_RESTRICTED)

        return actor, ability

    @staticmethod
    def _log_outcome(outcome: CastSuccess | CastFailure) -> None:
        if isinstance(outcome, CastFailure):
            logger.info("Cast failed", reason=outcome.reason.value)
        else:
            logger.info("Cast succeeded")

    # =========================================================================
    # Operations
    # =========================================================================

    def cast(
        self,
        actor_id: str,
        ability_id: str,
        target_params: Mapping[str, Any] | None = None,
        now: int | None = None,
    ) -> CastSuccess | CastFailure:
        """Cast a utility ability.

        Args:
            actor_id: The caster.
            ability_id: Ability to cast.
            target_params: Targeting, e.g. ``{"direction": "NORTH"}``.
            now: Cast time in epoch milliseconds; defaults to the clock.

        Returns:
            The outcome. Failures leave the ledger and the world untouched.

        Location effects act on the actor snapshot taken during validation,
        which happens outside the key lock; a move between that read and the
        dispatch is not observed.
        """
        with log_context(actor_id=actor_id, ability_id=ability_id):
            return self._cast(actor_id, ability_id, target_params, now)

    def _cast(
        self,
        actor_id: str,
        ability_id: str,
        target_params: Mapping[str, Any] | None,
        now: int | None,
    ) -> CastSuccess | CastFailure:
        validated = self._validate(actor_id, ability_id)
        if isinstance(validated, CastFailure):
            self._log_outcome(validated)
            return validated
        actor, ability = validated

        if not ability.is_utility:
            outcome: CastSuccess | CastFailure = CastFailure.of(
                FailureReason.UNKNOWN_ACTION,
                f"{ability.name} is not a utility ability",
            )
            self._log_outcome(outcome)
            return outcome

        with self.ledger.hold(actor.id, ability.id):
            at = self.clock() if now is None else now
            unavailable = self.ledger.check_available(actor.id, ability.id, ability.cooldown, at)
            if unavailable is not None:
                outcome = unavailable
            else:
                outcome = self.dispatcher.dispatch(actor, ability, target_params)
                if isinstance(outcome, CastSuccess):
                    snapshot = self.ledger.consume(actor.id, ability.id, ability.cooldown, at)
                    outcome = outcome.model_copy(update={"ledger_snapshot": snapshot})

        self._log_outcome(outcome)
        return outcome

    def commit_use(
        self,
        actor_id: str,
        ability_id: str,
        now: int | None = None,
    ) -> CastSuccess | CastFailure:
        """Validate and charge an ability whose effect is resolved elsewhere.

        Used by the combat simulator: the same requirement and ledger
        accounting as ``cast``, without dispatching an effect.
        """
        with log_context(actor_id=actor_id, ability_id=ability_id):
            return self._commit_use(actor_id, ability_id, now)

    def _commit_use(
        self, actor_id: str, ability_id: str, now: int | None
    ) -> CastSuccess | CastFailure:
        validated = self._validate(actor_id, ability_id)
        if isinstance(validated, CastFailure):
            self._log_outcome(validated)
            return validated
        actor, ability = validated

        with self.ledger.hold(actor.id, ability.id):
            at = self.clock() if now is None else now
            unavailable = self.ledger.check_available(actor.id, ability.id, ability.cooldown, at)
            if unavailable is not None:
                outcome: CastSuccess | CastFailure = unavailable
            else:
                snapshot = self.ledger.consume(actor.id, ability.id, ability.cooldown, at)
                outcome = CastSuccess(message=f"{ability.name} used", ledger_snapshot=snapshot)

        self._log_outcome(outcome)
        return outcome

    def ability_state(self, actor_id: str, ability_id: str, now: int | None = None) -> LedgerSnapshot:
        """Current cooldown/charge state of one ability for one actor."""
        at = self.clock() if now is None else now
        return self.ledger.snapshot(actor_id, ability_id, at)


__all__ = [
    "AbilityCaster",
]
