"""Persisted cooldown/charge bookkeeping for one (actor, ability) pair.

Absence of an entry means "fully available". Entries are created lazily by
the first consume, changed only by the ledger's consume and by the daily
reset, and stored as a JSON state blob keyed by
``(owner_id, owner_type, ability_id)``.
"""

from __future__ import annotations

import json
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ability_engine.core.constants import DEFAULT_OWNER_TYPE, MILLIS_PER_SECOND


def seconds_until(expires_at: int | None, now: int) -> int:
    """Whole seconds left until ``expires_at``, rounded up, never negative.

    Args:
        expires_at: Expiry in epoch milliseconds, or None.
        now: Current time in epoch milliseconds.
    """
    if expires_at is None or expires_at <= now:
        return 0
    return math.ceil((expires_at - now) / MILLIS_PER_SECOND)


class LedgerEntry(BaseModel):
    """Cooldown and charge state of one ability for one owner.

    Attributes:
        owner_id: Actor that owns the state.
        owner_type: Kind of owner ("user", "creature", ...).
        ability_id: Ability the state belongs to.
        cooldown_expires_at: Epoch ms when the cooldown ends.
        remaining_charges: Charges left today, only for charge pools.
        last_used_at: Epoch ms of the last successful use.
        times_used: Monotonic use counter.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    owner_id: str
    owner_type: str = DEFAULT_OWNER_TYPE
    ability_id: str
    cooldown_expires_at: int | None = None
    remaining_charges: int | None = None
    last_used_at: int | None = None
    times_used: int = 0

    @field_validator("remaining_charges", "times_used", mode="before")
    @classmethod
    def clamp_negative(cls, value: Any) -> Any:
        """Clamp malformed negative counters to zero instead of rejecting them."""
        if isinstance(value, int) and value < 0:
            return 0
        return value

    @property
    def key(self) -> tuple[str, str]:
        """The (owner, ability) serialization key."""
        return (self.owner_id, self.ability_id)

    def to_state_json(self) -> str:
        """Encode the mutable state as the persisted JSON blob."""
        return self.model_dump_json(
            include={"cooldown_expires_at", "remaining_charges", "last_used_at", "times_used"}
        )

    @classmethod
    def from_state_json(
        cls,
        state: str,
        *,
        owner_id: str,
        ability_id: str,
        owner_type: str = DEFAULT_OWNER_TYPE,
    ) -> "LedgerEntry":
        """Decode a persisted JSON blob back into an entry.

        The key columns live outside the blob, so they are supplied here.
        An empty or non-object blob decodes to a fresh entry.
        """
        data = json.loads(state or "{}")
        if not isinstance(data, dict):
            data = {}
        data.update(owner_id=owner_id, owner_type=owner_type, ability_id=ability_id)
        return cls.model_validate(data)


class LedgerSnapshot(BaseModel):
    """Ledger state reported back to callers after a cast or on query."""

    model_config = ConfigDict(frozen=True)

    remaining_charges: int | None = None
    cooldown_expires_at: int | None = None
    cooldown_seconds_remaining: int | None = None
    times_used: int = Field(default=0, ge=0)

    @classmethod
    def from_entry(cls, entry: LedgerEntry | None, now: int) -> "LedgerSnapshot":
        """Describe ``entry`` as seen at ``now``; an absent entry is an empty snapshot."""
        if entry is None:
            return cls()
        return cls(
            remaining_charges=entry.remaining_charges,
            cooldown_expires_at=entry.cooldown_expires_at,
            cooldown_seconds_remaining=(
                seconds_until(entry.cooldown_expires_at, now)
                if entry.cooldown_expires_at is not None
                else None
            ),
            times_used=entry.times_used,
        )


__all__ = [
    "LedgerEntry",
    "LedgerSnapshot",
    "seconds_until",
]
