"""Utility effect dispatch.

The dispatcher is a closed table of effect handlers keyed by effect name.
Handlers are registered with the ``effect`` decorator at import time; an
ability whose ``action`` names no registered handler fails with
``UNKNOWN_ACTION`` instead of raising.

Effects:
    phase_walk: Step to an adjacent tile, ignoring exits
    teleport: Jump to a location by id
    recall: Return to the home location
    levitate: Timed status allowing vertical movement without stairs
    invisibility: Timed status hiding the caster
    light: Timed status illuminating the caster's surroundings
    detect_secret: Reveal hidden exits, traps and invisible creatures here
    unlock: Open a lock (input validation only)

Handlers never touch the ledger. They report world changes both through
the actor repository calls and as ``WorldMutation`` values on the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, TypeVar

from ability_engine.core.config import DispatcherSettings, get_settings
from ability_engine.core.constants import DIRECTION_OFFSETS
from ability_engine.core.logging import get_logger
from ability_engine.models.ability import AbilityValue
from ability_engine.models.enums import ExitDirection, FailureReason, RevealKind, UtilityAction
from ability_engine.models.outcome import (
    CastFailure,
    CastSuccess,
    LocationChanged,
    LocationVisited,
    StatusApplied,
)
from ability_engine.models.world import ActorSnapshot, LocationRecord
from ability_engine.storage.repositories import (
    ActorRepository,
    LocationRepository,
    NothingHidden,
    SecretRevealer,
)

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Handler Registry
# =============================================================================


@dataclass
class EffectContext:
    """Everything a handler may read or write for one cast.

    Attributes:
        actor: The caster at the start of the cast.
        ability: The ability being cast.
        target_params: Caller-supplied targeting, e.g. ``{"direction": "NORTH"}``.
        actors: Actor repository for location-pointer mutations.
        locations: Location lookup.
        revealer: Source of hidden things for detection effects.
        settings: Effect defaults.
    """

    actor: ActorSnapshot
    ability: AbilityValue
    target_params: Mapping[str, Any]
    actors: ActorRepository
    locations: LocationRepository
    revealer: SecretRevealer
    settings: DispatcherSettings

    def target(self, key: str) -> str | None:
        """A target parameter as a stripped string, or None if absent or blank."""
        value = self.target_params.get(key)
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    def param(self, key: str, default: Any = None) -> Any:
        """An ability parameter, falling back to ``default``."""
        value = self.ability.action_params.get(key)
        return default if value is None else value

    def int_param(self, key: str, default: int) -> int:
        """A non-negative integer ability parameter, falling back to ``default``."""
        value = self.ability.action_params.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return default
        return value

    def current_location(self) -> LocationRecord | None:
        if not self.actor.current_location_id:
            return None
        return self.locations.get_location(self.actor.current_location_id)

    def move_to(self, destination: LocationRecord, message: str) -> CastSuccess:
        """Move the actor and record the visit."""
        self.actors.set_current_location(self.actor.id, destination.id)
        first_visit = self.actors.add_visited_location(self.actor.id, destination.id)

        change = LocationChanged(
            actor_id=self.actor.id,
            from_location_id=self.actor.current_location_id,
            to_location_id=destination.id,
            to_location_name=destination.name,
        )
        mutations: list[LocationChanged | LocationVisited] = [change]
        if first_visit:
            mutations.append(LocationVisited(actor_id=self.actor.id, location_id=destination.id))

        return CastSuccess(message=message, location_change=change, mutations=tuple(mutations))

    def apply_status(self, status: str, duration_seconds: int, message: str, **params: Any) -> CastSuccess:
        """Emit a timed status for the status-effect subsystem."""
        event = StatusApplied(
            actor_id=self.actor.id,
            status=status,
            duration_seconds=duration_seconds,
            params=params,
        )
        return CastSuccess(message=message, mutations=(event,))


EffectFunction = Callable[[EffectContext], CastSuccess | CastFailure]


@dataclass(frozen=True)
class EffectHandler:
    """A registered utility effect.

    Attributes:
        action: Effect name abilities refer to.
        description: Human-readable summary.
        function: The handler itself.
    """

    action: UtilityAction
    description: str
    function: EffectFunction


_effect_registry: dict[str, EffectHandler] = {}


def effect(action: UtilityAction, *, description: str) -> Callable[[F], F]:
    """Decorator to register a function as the handler for ``action``.

    Args:
        action: Effect name.
        description: Human-readable summary.

    Returns:
        Decorated function.
    """

    def decorator(func: F) -> F:
        _effect_registry[action.value] = EffectHandler(
            action=action,
            description=description,
            function=func,
        )
        return func

    return decorator


def get_effect(action: str) -> EffectHandler | None:
    """Get a handler by effect name."""
    return _effect_registry.get(action)


def get_all_effects() -> list[EffectHandler]:
    """Get all registered handlers."""
    return list(_effect_registry.values())


# =============================================================================
# Movement Effects
# =============================================================================


def _parse_distance(raw: str | None) -> int | None:
    if raw is None:
        return 1
    try:
        distance = int(raw)
    except ValueError:
        return None
    return distance if distance >= 1 else None


@effect(UtilityAction.PHASE_WALK, description="Step to an adjacent tile, ignoring exits")
def phase_walk(ctx: EffectContext) -> CastSuccess | CastFailure:
    current = ctx.current_location()
    if current is None:
        return CastFailure.of(FailureReason.NOT_FOUND, "You must be at a location to phase walk")

    raw_direction = ctx.target("direction")
    if raw_direction is None:
        return CastFailure.of(FailureReason.INVALID_DIRECTION, "Specify a direction to phase walk")
    direction = ExitDirection.parse(raw_direction)
    if direction is None:
        return CastFailure.of(FailureReason.INVALID_DIRECTION, f"Invalid direction: {raw_direction}")
    if direction in (ExitDirection.UP, ExitDirection.DOWN):
        return CastFailure.of(FailureReason.INVALID_DIRECTION, "Cannot phase walk vertically")
    if direction == ExitDirection.ENTER:
        return CastFailure.of(FailureReason.INVALID_DIRECTION, "Cannot phase walk through portals")
    if not direction.is_compass:
        return CastFailure.of(FailureReason.INVALID_DIRECTION, "Cannot phase walk in unknown direction")

    distance = _parse_distance(ctx.target("distance"))
    max_range = ctx.int_param("range", ctx.settings.default_phase_range) or ctx.settings.default_phase_range
    if distance is None or distance > max_range:
        return CastFailure.of(FailureReason.OUT_OF_RANGE)

    if not current.has_coordinates:
        return CastFailure.of(FailureReason.NO_DESTINATION, "Current location has no coordinates")

    dx, dy = DIRECTION_OFFSETS[direction.value]
    destination = ctx.locations.find_by_coordinates(
        current.grid_x + dx * distance,  # type: ignore[operator]
        current.grid_y + dy * distance,  # type: ignore[operator]
        current.area_id,
    )
    if destination is None:
        return CastFailure.of(
            FailureReason.NO_DESTINATION,
            "There is nothing in that direction - you cannot phase into the void",
        )

    return ctx.move_to(
        destination,
        f"You phase through reality and emerge at {destination.name}",
    )


@effect(UtilityAction.TELEPORT, description="Jump to a location by id")
def teleport(ctx: EffectContext) -> CastSuccess | CastFailure:
    location_id = ctx.target("locationId")
    if location_id is None:
        return CastFailure.of(FailureReason.NOT_FOUND, "Specify a destination location")

    destination = ctx.locations.get_location(location_id)
    if destination is None:
        return CastFailure.of(FailureReason.NOT_FOUND, "Destination not found")

    return ctx.move_to(
        destination,
        f"Reality folds around you as you materialize at {destination.name}",
    )


@effect(UtilityAction.RECALL, description="Return to the home location")
def recall(ctx: EffectContext) -> CastSuccess | CastFailure:
    home = ctx.locations.find_by_coordinates(
        ctx.settings.home_x,
        ctx.settings.home_y,
        ctx.settings.home_area_id,
    )
    if home is None:
        return CastFailure.of(FailureReason.NO_DESTINATION, "No home location found")

    return ctx.move_to(
        home,
        f"You feel the familiar tug of home as you vanish and reappear at {home.name}",
    )


# =============================================================================
# Status Effects
# =============================================================================


@effect(UtilityAction.LEVITATE, description="Rise into the air for a while")
def levitate(ctx: EffectContext) -> CastSuccess | CastFailure:
    duration = ctx.int_param("duration", ctx.settings.levitate_seconds)
    return ctx.apply_status(
        UtilityAction.LEVITATE.value,
        duration,
        f"You rise gently into the air, defying gravity for {duration // 60} minutes",
    )


@effect(UtilityAction.INVISIBILITY, description="Fade from sight for a while")
def invisibility(ctx: EffectContext) -> CastSuccess | CastFailure:
    duration = ctx.int_param("duration", ctx.settings.invisibility_seconds)
    return ctx.apply_status(
        UtilityAction.INVISIBILITY.value,
        duration,
        f"Light bends around you as you fade from sight for {duration // 60} minutes",
    )


@effect(UtilityAction.LIGHT, description="Conjure an orb of light")
def light(ctx: EffectContext) -> CastSuccess | CastFailure:
    duration = ctx.int_param("duration", ctx.settings.light_seconds)
    radius = ctx.int_param("radius", ctx.settings.light_radius)
    return ctx.apply_status(
        UtilityAction.LIGHT.value,
        duration,
        f"A soft orb of light springs into existence, illuminating {radius} feet around you",
        radius=radius,
    )


# =============================================================================
# Interaction Effects
# =============================================================================


_DEFAULT_REVEALS = (RevealKind.HIDDEN_EXIT, RevealKind.TRAP)


def _reveal_kinds(raw: Any) -> list[RevealKind]:
    if not isinstance(raw, (list, tuple)):
        return list(_DEFAULT_REVEALS)
    kinds = []
    for value in raw:
        try:
            kinds.append(RevealKind(str(value).lower()))
        except ValueError:
            logger.debug("Ignoring unknown reveal kind", kind=value)
    return kinds


@effect(UtilityAction.DETECT_SECRET, description="Reveal hidden things at the current location")
def detect_secret(ctx: EffectContext) -> CastSuccess | CastFailure:
    current = ctx.current_location()
    if current is None:
        return CastFailure.of(FailureReason.NOT_FOUND, "You must be at a location")

    revealed = ctx.revealer.reveal(current.id, _reveal_kinds(ctx.param("reveals")))
    message = "Your senses expand, searching for hidden secrets..."
    if revealed.is_empty:
        message += " but you find nothing."
    return CastSuccess(message=message, revealed_info=revealed)


@effect(UtilityAction.UNLOCK, description="Open a locked door or container")
def unlock(ctx: EffectContext) -> CastSuccess | CastFailure:
    if ctx.target("targetId") is None:
        return CastFailure.of(FailureReason.NOT_FOUND, "Specify what to unlock")
    return CastSuccess(message="Magical energy flows into the lock mechanism... *click*")


# =============================================================================
# Dispatcher
# =============================================================================


@dataclass(frozen=True)
class PhaseDestination:
    """An adjacent location reachable only by phasing."""

    direction: ExitDirection
    location_id: str
    location_name: str


@dataclass
class ActionDispatcher:
    """Executes the handler named by a utility ability's ``action``.

    Example:
        >>> dispatcher = ActionDispatcher(actors=world, locations=world)
        >>> outcome = dispatcher.dispatch(actor, blink, {"direction": "NORTH"})
        >>> outcome.ok
        True
    """

    actors: ActorRepository
    locations: LocationRepository
    revealer: SecretRevealer = field(default_factory=NothingHidden)
    settings: DispatcherSettings = field(default_factory=lambda: get_settings().dispatcher)

    def dispatch(
        self,
        actor: ActorSnapshot,
        ability: AbilityValue,
        target_params: Mapping[str, Any] | None = None,
    ) -> CastSuccess | CastFailure:
        """Run exactly one effect handler.

        Args:
            actor: The caster.
            ability: A validated, available utility ability.
            target_params: Caller-supplied targeting.

        Returns:
            The handler's outcome, or ``UNKNOWN_ACTION`` for an unregistered effect.
        """
        handler = get_effect(ability.action) if ability.action else None
        if handler is None:
            return CastFailure.of(
                FailureReason.UNKNOWN_ACTION,
                f"Unknown spell action: {ability.action}",
            )

        ctx = EffectContext(
            actor=actor,
            ability=ability,
            target_params=target_params or {},
            actors=self.actors,
            locations=self.locations,
            revealer=self.revealer,
            settings=self.settings,
        )
        outcome = handler.function(ctx)
        logger.debug(
            "Effect dispatched",
            actor_id=actor.id,
            ability_id=ability.id,
            action=handler.action.value,
            ok=outcome.ok,
        )
        return outcome

    def phase_destinations(self, actor: ActorSnapshot) -> list[PhaseDestination]:
        """Compass directions with no exit but a location one tile away.

        Returns:
            Destinations in compass order; empty if the actor is nowhere or
            the current location has no coordinates.
        """
        if not actor.current_location_id:
            return []
        current = self.locations.get_location(actor.current_location_id)
        if current is None or not current.has_coordinates:
            return []

        exits = {direction.upper() for direction in current.exit_directions}
        destinations = []
        for name, (dx, dy) in DIRECTION_OFFSETS.items():
            if name in exits:
                continue
            location = self.locations.find_by_coordinates(
                current.grid_x + dx,  # type: ignore[operator]
                current.grid_y + dy,  # type: ignore[operator]
                current.area_id,
            )
            if location is not None:
                destinations.append(
                    PhaseDestination(
                        direction=ExitDirection(name),
                        location_id=location.id,
                        location_name=location.name,
                    )
                )
        return destinations


__all__ = [
    "ActionDispatcher",
    "EffectContext",
    "EffectHandler",
    "PhaseDestination",
    "effect",
    "get_effect",
    "get_all_effects",
]
