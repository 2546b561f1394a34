"""Application-wide constants for the ability engine.

Defaults here back the settings classes in ``core.config``; code should
read the settings, not these values, wherever a setting exists.
"""

from __future__ import annotations

# =============================================================================
# Time
# =============================================================================

MILLIS_PER_SECOND = 1000
"""Ledger timestamps are epoch milliseconds."""

DEFAULT_ROUND_SECONDS = 3.0
"""Wall-clock length of one combat round for the CombatRounds modality."""

SECONDS_PER_DAY = 24 * 60 * 60
"""Default in-game day length for the daily charge reset."""

# =============================================================================
# World
# =============================================================================

DEFAULT_AREA_ID = "overworld"
"""Area assumed for locations that do not declare one."""

HOME_COORDINATES = (0, 0)
"""Grid coordinates of the recall destination."""

DEFAULT_OWNER_TYPE = "user"
"""Owner type used in ledger keys for player characters."""

# Grid offsets per compass direction; north is -y.
DIRECTION_OFFSETS: dict[str, tuple[int, int]] = {
    "NORTH": (0, -1),
    "NORTHEAST": (1, -1),
    "EAST": (1, 0),
    "SOUTHEAST": (1, 1),
    "SOUTH": (0, 1),
    "SOUTHWEST": (-1, 1),
    "WEST": (-1, 0),
    "NORTHWEST": (-1, -1),
}

# =============================================================================
# Utility Effect Defaults
# =============================================================================

DEFAULT_PHASE_RANGE = 1
"""Tiles a phase walk may cover when the ability declares no range."""

DEFAULT_LEVITATE_SECONDS = 600
DEFAULT_INVISIBILITY_SECONDS = 300
DEFAULT_LIGHT_SECONDS = 3600
DEFAULT_LIGHT_RADIUS = 40


__all__ = [
    "MILLIS_PER_SECOND",
    "DEFAULT_ROUND_SECONDS",
    "SECONDS_PER_DAY",
    "DEFAULT_AREA_ID",
    "HOME_COORDINATES",
    "DEFAULT_OWNER_TYPE",
    "DIRECTION_OFFSETS",
    "DEFAULT_PHASE_RANGE",
    "DEFAULT_LEVITATE_SECONDS",
    "DEFAULT_INVISIBILITY_SECONDS",
    "DEFAULT_LIGHT_SECONDS",
    "DEFAULT_LIGHT_RADIUS",
]
