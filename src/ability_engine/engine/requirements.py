"""Requirement validation.

Checks level, class and feature prerequisites, in that order, so the
most actionable failure is reported first. Time, cooldowns and costs are
the ledger's concern and are never consulted here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Collection

from ability_engine.models.ability import AbilityRequirements
from ability_engine.models.enums import RequirementKind


@dataclass(frozen=True)
class RequirementFailure:
    """The first prerequisite a character failed.

    Attributes:
        kind: Which check failed.
        message: Display text.
        missing: Ids that were required but absent, for class and feature checks.
    """

    kind: RequirementKind
    message: str
    missing: tuple[str, ...] = ()


def check_requirements(
    level: int,
    class_id: str | None,
    feature_ids: Collection[str],
    requirements: AbilityRequirements,
) -> RequirementFailure | None:
    """Return the first failing requirement, or None if all pass.

    Args:
        level: Character level.
        class_id: Character class, if any.
        feature_ids: Features the character has.
        requirements: The ability's prerequisites.

    Returns:
        A RequirementFailure for the first failing check, else None.

    Example:
        >>> reqs = AbilityRequirements(min_level=5, feature_ids=("feat-arcane",))
        >>> check_requirements(3, None, set(), reqs).kind
        <RequirementKind.LEVEL: 'level'>
    """
    if level < requirements.min_level:
        return RequirementFailure(
            kind=RequirementKind.LEVEL,
            message=f"Requires level {requirements.min_level}",
        )

    if requirements.class_ids and class_id not in requirements.class_ids:
        return RequirementFailure(
            kind=RequirementKind.CLASS,
            message="Your class cannot use this ability",
            missing=requirements.class_ids,
        )

    owned = set(feature_ids)
    missing = tuple(fid for fid in requirements.feature_ids if fid not in owned)
    if missing:
        return RequirementFailure(
            kind=RequirementKind.FEATURE,
            message="Missing a required feature",
            missing=missing,
        )

    return None


__all__ = [
    "RequirementFailure",
    "check_requirements",
]
