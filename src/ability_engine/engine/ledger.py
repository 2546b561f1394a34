"""Cooldown/charge ledger.

One ledger implementation serves all four cooldown modalities:

- ``NoCooldown``: always available; consuming changes nothing.
- ``FixedDuration(seconds)``: available once ``now`` reaches the stored
  expiry; consuming sets the expiry to ``now + seconds``.
- ``ChargePool(max_charges)``: available while charges remain; an actor
  with no entry has the full pool. Consuming removes one charge.
- ``CombatRounds(rounds)``: a fixed duration of ``rounds`` combat rounds,
  converted to wall-clock time with ``LedgerSettings.round_seconds``.

``check_available`` never writes, so a pure check never creates state.
``consume`` is the only mutator. Both run under the per-key lock, which
callers may also hold across a whole check/dispatch/consume sequence via
``hold``.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Generator

from ability_engine.core.config import LedgerSettings, get_settings
from ability_engine.core.constants import MILLIS_PER_SECOND
from ability_engine.core.logging import get_logger
from ability_engine.engine.locks import KeyedLocks
from ability_engine.models.ability import (
    ChargePool,
    CombatRounds,
    FixedDuration,
    NoCooldown,
)
from ability_engine.models.enums import FailureReason
from ability_engine.models.ledger import LedgerEntry, LedgerSnapshot, seconds_until
from ability_engine.models.outcome import CastFailure
from ability_engine.storage.repositories import LedgerStore

logger = get_logger(__name__)

Policy = NoCooldown | FixedDuration | ChargePool | CombatRounds


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * MILLIS_PER_SECOND)


class CooldownLedger:
    """Availability queries and consumption over a ``LedgerStore``.

    Attributes:
        store: Where entries are persisted.
        settings: Ledger settings (round length, owner type).
        locks: Per-(actor, ability) locks shared with the caster and the
            daily reset.
    """

    def __init__(
        self,
        store: LedgerStore,
        settings: LedgerSettings | None = None,
        locks: KeyedLocks | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or get_settings().ledger
        self.locks = locks or KeyedLocks()

    @contextmanager
    def hold(self, actor_id: str, ability_id: str) -> Generator[None, None, None]:
        """Serialize every ledger operation on one key for the duration of the block."""
        with self.locks.hold((actor_id, ability_id)):
            yield

    def duration_ms(self, policy: Policy) -> int:
        """Cooldown length of a time-based policy in milliseconds."""
        if isinstance(policy, FixedDuration):
            return policy.seconds * MILLIS_PER_SECOND
        if isinstance(policy, CombatRounds):
            return round(policy.rounds * self.settings.round_seconds * MILLIS_PER_SECOND)
        return 0

    def _load(self, actor_id: str, ability_id: str) -> LedgerEntry | None:
        return self.store.get(actor_id, self.settings.owner_type, ability_id)

    # =========================================================================
    # Queries
    # =========================================================================

    def check_available(
        self,
        actor_id: str,
        ability_id: str,
        policy: Policy,
        now: int,
    ) -> CastFailure | None:
        """Whether the ability may fire at ``now``. Never mutates.

        Returns:
            None if available, else an ``ON_COOLDOWN`` failure carrying the
            remaining seconds or a ``NO_CHARGES_REMAINING`` failure.
        """
        if isinstance(policy, NoCooldown):
            return None

        with self.hold(actor_id, ability_id):
            entry = self._load(actor_id, ability_id)

        if isinstance(policy, ChargePool):
            charges = policy.max_charges
            if entry is not None and entry.remaining_charges is not None:
                charges = entry.remaining_charges
            if charges > 0:
                return None
            return CastFailure.of(FailureReason.NO_CHARGES_REMAINING)

        if entry is None or entry.cooldown_expires_at is None or now >= entry.cooldown_expires_at:
            return None
        remaining = seconds_until(entry.cooldown_expires_at, now)
        return CastFailure.of(
            FailureReason.ON_COOLDOWN,
            f"Ability is on cooldown ({remaining}s remaining)",
            remaining_seconds=remaining,
        )

    def snapshot(self, actor_id: str, ability_id: str, now: int) -> LedgerSnapshot:
        """Current ledger state of one key; an unused ability is an empty snapshot."""
        with self.hold(actor_id, ability_id):
            return LedgerSnapshot.from_entry(self._load(actor_id, ability_id), now)

    def entries(self, actor_id: str | None = None) -> list[LedgerEntry]:
        """Stored entries, optionally for one actor."""
        return self.store.entries(actor_id)

    # =========================================================================
    # Mutations
    # =========================================================================

    def consume(
        self,
        actor_id: str,
        ability_id: str,
        policy: Policy,
        now: int,
    ) -> LedgerSnapshot:
        """Charge one use of the ability.

        Call exactly once per successful cast, after availability was
        checked under the same key lock.

        Returns:
            The ledger state after the charge.
        """
        if isinstance(policy, NoCooldown):
            return LedgerSnapshot()

        with self.hold(actor_id, ability_id):
            entry = self._load(actor_id, ability_id) or LedgerEntry(
                owner_id=actor_id,
                owner_type=self.settings.owner_type,
                ability_id=ability_id,
            )
            update: dict[str, int | None] = {
                "last_used_at": now,
                "times_used": entry.times_used + 1,
            }
            if isinstance(policy, ChargePool):
                current = (
                    entry.remaining_charges
                    if entry.remaining_charges is not None
                    else policy.max_charges
                )
                update["remaining_charges"] = max(0, current - 1)
            else:
                update["cooldown_expires_at"] = now + self.duration_ms(policy)

            updated = entry.model_copy(update=update)
            self.store.put(updated)

        logger.debug(
            "Ability consumed",
            actor_id=actor_id,
            ability_id=ability_id,
            policy=policy.kind,
            remaining_charges=updated.remaining_charges,
            cooldown_expires_at=updated.cooldown_expires_at,
        )
        return LedgerSnapshot.from_entry(updated, now)

    def reset_charges(self, actor_id: str, ability_id: str, max_charges: int) -> LedgerEntry | None:
        """Restore a charge pool to ``max_charges``.

        An absent entry already means a full pool, so nothing is created.

        Returns:
            The updated entry, or None if there was nothing to reset.
        """
        with self.hold(actor_id, ability_id):
            entry = self._load(actor_id, ability_id)
            if entry is None:
                return None
            updated = entry.model_copy(update={"remaining_charges": max(0, max_charges)})
            self.store.put(updated)
        return updated


__all__ = [
    "CooldownLedger",
    "Policy",
    "now_ms",
]
