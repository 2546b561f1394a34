"""Enumeration types for the ability engine.

These enums are the closed vocabularies shared by every component:
ability classification, targeting, provenance, compass directions and
the failure taxonomy callers branch on.
"""

from __future__ import annotations

from enum import StrEnum


class AbilityType(StrEnum):
    """Broad classification of an ability."""

    PASSIVE = "passive"
    COMBAT = "combat"
    UTILITY = "utility"
    SPELL = "spell"


class TargetType(StrEnum):
    """Who or what an ability affects."""

    SELF = "self"
    SINGLE_ENEMY = "single_enemy"
    SINGLE_ALLY = "single_ally"
    AREA = "area"
    AREA_ALLY = "area_ally"
    ALL_ENEMIES = "all_enemies"
    ALL_ALLIES = "all_allies"


class SourceKind(StrEnum):
    """Which of the three ability sources produced an ability."""

    INNATE_TABLE = "innate_table"
    """Legacy ability table row granted by the character's class."""

    ITEM = "item"
    """Equipped item, through its legacy ability ids or its features."""

    FEATURE = "feature"
    """Feature attached directly to the character."""


class FailureReason(StrEnum):
    """Closed failure taxonomy for a cast attempt.

    Every value is recoverable: the caller may retry with different input
    or after waiting.
    """

    NOT_FOUND = "not_found"
    REQUIREMENT_NOT_MET = "requirement_not_met"
    ON_COOLDOWN = "on_cooldown"
    NO_CHARGES_REMAINING = "no_charges_remaining"
    INVALID_DIRECTION = "invalid_direction"
    OUT_OF_RANGE = "out_of_range"
    NO_DESTINATION = "no_destination"
    UNKNOWN_ACTION = "unknown_action"
    IN_COMBAT_RESTRICTED = "in_combat_restricted"


class RequirementKind(StrEnum):
    """Which prerequisite a character failed, in check order."""

    LEVEL = "level"
    CLASS = "class"
    FEATURE = "feature"


class ExitDirection(StrEnum):
    """Directions an exit or movement effect may take."""

    NORTH = "NORTH"
    NORTHEAST = "NORTHEAST"
    EAST = "EAST"
    SOUTHEAST = "SOUTHEAST"
    SOUTH = "SOUTH"
    SOUTHWEST = "SOUTHWEST"
    WEST = "WEST"
    NORTHWEST = "NORTHWEST"
    UP = "UP"
    DOWN = "DOWN"
    ENTER = "ENTER"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str | None) -> "ExitDirection | None":
        """Parse a direction case-insensitively.

        Args:
            value: Raw direction string from target parameters.

        Returns:
            The matching direction, or None if it is missing or unrecognized.
        """
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None

    @property
    def is_compass(self) -> bool:
        """Whether this is one of the eight planar compass directions."""
        return self not in (
            ExitDirection.UP,
            ExitDirection.DOWN,
            ExitDirection.ENTER,
            ExitDirection.UNKNOWN,
        )


class UtilityAction(StrEnum):
    """Effect identifiers the action dispatcher knows how to execute."""

    PHASE_WALK = "phase_walk"
    TELEPORT = "teleport"
    RECALL = "recall"
    LEVITATE = "levitate"
    INVISIBILITY = "invisibility"
    LIGHT = "light"
    DETECT_SECRET = "detect_secret"
    UNLOCK = "unlock"


class RevealKind(StrEnum):
    """Categories a detection effect can reveal."""

    HIDDEN_EXIT = "hidden_exit"
    TRAP = "trap"
    INVISIBLE_CREATURE = "invisible_creature"


__all__ = [
    "AbilityType",
    "TargetType",
    "SourceKind",
    "FailureReason",
    "RequirementKind",
    "ExitDirection",
    "UtilityAction",
    "RevealKind",
]
