"""Results of a cast attempt and the world-state mutations it produced.

A cast either succeeds (``CastSuccess``) or fails (``CastFailure``).
Failures carry a closed ``FailureReason`` that callers branch on; the
``message`` on either variant is display text only.

Mutations are returned explicitly instead of being pushed to an event
bus, so any transport (polling, push, a test harness) can observe them.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ability_engine.models.enums import FailureReason, RequirementKind
from ability_engine.models.ledger import LedgerSnapshot


_DEFAULT_MESSAGES: dict[FailureReason, str] = {
    FailureReason.NOT_FOUND: "Not found",
    FailureReason.REQUIREMENT_NOT_MET: "Requirements not met",
    FailureReason.ON_COOLDOWN: "Ability is on cooldown",
    FailureReason.NO_CHARGES_REMAINING: "No charges remaining (resets daily)",
    FailureReason.INVALID_DIRECTION: "Invalid direction",
    FailureReason.OUT_OF_RANGE: "Target is too far away",
    FailureReason.NO_DESTINATION: "There is nothing there to reach",
    FailureReason.UNKNOWN_ACTION: "Unknown ability action",
    FailureReason.IN_COMBAT_RESTRICTED: "Cannot use this ability while in combat",
}


# =============================================================================
# World Mutations
# =============================================================================


class _Mutation(BaseModel):
    model_config = ConfigDict(frozen=True)

    actor_id: str


class LocationChanged(_Mutation):
    """The actor's current-location pointer moved."""

    kind: Literal["location_changed"] = "location_changed"
    from_location_id: str | None = None
    to_location_id: str
    to_location_name: str = ""


class LocationVisited(_Mutation):
    """A location was added to the actor's visited set for the first time."""

    kind: Literal["location_visited"] = "location_visited"
    location_id: str


class StatusApplied(_Mutation):
    """A timed status for the status-effect subsystem to apply."""

    kind: Literal["status_applied"] = "status_applied"
    status: str
    duration_seconds: int
    params: dict[str, Any] = Field(default_factory=dict)


WorldMutation = Annotated[
    LocationChanged | LocationVisited | StatusApplied,
    Field(discriminator="kind"),
]


# =============================================================================
# Revealed Information
# =============================================================================


class HiddenExitInfo(BaseModel):
    """A concealed exit found by a detection effect."""

    model_config = ConfigDict(frozen=True)

    direction: str
    target_location_id: str
    target_location_name: str


class TrapInfo(BaseModel):
    """A trap found by a detection effect."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""


class RevealedInfo(BaseModel):
    """Everything a detection effect uncovered. Empty is a normal result."""

    model_config = ConfigDict(frozen=True)

    hidden_exits: tuple[HiddenExitInfo, ...] = ()
    traps: tuple[TrapInfo, ...] = ()
    invisible_creatures: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Whether nothing was revealed."""
        return not (self.hidden_exits or self.traps or self.invisible_creatures)


# =============================================================================
# Outcomes
# =============================================================================


class CastSuccess(BaseModel):
    """The ability fired.

    Attributes:
        message: Display text.
        location_change: Present when the cast moved the actor.
        revealed_info: Present for detection effects.
        ledger_snapshot: Ledger state after the charge was applied.
        mutations: Ordered world-state changes the cast made.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    message: str
    location_change: LocationChanged | None = None
    revealed_info: RevealedInfo | None = None
    ledger_snapshot: LedgerSnapshot | None = None
    mutations: tuple[WorldMutation, ...] = ()

    @property
    def ok(self) -> bool:
        return True

    @property
    def new_location_id(self) -> str | None:
        """Destination of a movement effect, if any."""
        return self.location_change.to_location_id if self.location_change else None

    @property
    def status_event(self) -> StatusApplied | None:
        """The status the cast asks the status subsystem to apply, if any."""
        for mutation in self.mutations:
            if isinstance(mutation, StatusApplied):
                return mutation
        return None


class CastFailure(BaseModel):
    """The ability did not fire; nothing was charged.

    Attributes:
        reason: Closed failure reason to branch on.
        message: Display text.
        remaining_seconds: Seconds until available, for ``ON_COOLDOWN``.
        requirement: Which prerequisite failed, for ``REQUIREMENT_NOT_MET``.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    reason: FailureReason
    message: str = ""
    remaining_seconds: int | None = None
    requirement: RequirementKind | None = None

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def of(cls, reason: FailureReason, message: str | None = None, **kwargs: Any) -> "CastFailure":
        """Build a failure, falling back to the reason's default message."""
        return cls(reason=reason, message=message or _DEFAULT_MESSAGES[reason], **kwargs)


CastOutcome = Annotated[CastSuccess | CastFailure, Field(discriminator="kind")]


__all__ = [
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
]
