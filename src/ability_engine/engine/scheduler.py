"""Daily charge reset.

At each in-game day boundary every ``ChargePool`` ledger entry is restored
to its ability's ``max_charges``. Fixed-duration and combat-round entries
are left alone. Resets take the same per-key lock as casts, so a reset
racing a consume never loses a decrement and never grants more than the
maximum.

The day index is ``(now_seconds + day_offset_seconds) // day_length_seconds``.
The first ``run_pending`` call only records the current day; resets fire
when a later call observes a different index.
"""

from __future__ import annotations

import threading
from typing import Callable

from ability_engine.core.config import SchedulerSettings, get_settings
from ability_engine.core.constants import MILLIS_PER_SECOND
from ability_engine.core.exceptions import SchedulerError
from ability_engine.core.logging import get_logger
from ability_engine.engine.ledger import CooldownLedger, Policy, now_ms
from ability_engine.models.ability import ChargePool
from ability_engine.models.ledger import LedgerEntry

logger = get_logger(__name__)

PolicyLookup = Callable[[str], Policy | None]


class DailyResetScheduler:
    """Restores per-day charge pools, on demand or from a background thread.

    Attributes:
        ledger: The ledger whose entries are reset.
        policy_lookup: Resolves an ability id to its current cooldown policy,
            typically ``SourceAggregator.known_policy``.
        settings: Day length, offset and polling interval.
        clock: Returns the current time in epoch milliseconds.

    Example:
        >>> scheduler = DailyResetScheduler(ledger, aggregator.known_policy)
        >>> scheduler.reset_actor("hero")
        1
    """

    def __init__(
        self,
        ledger: CooldownLedger,
        policy_lookup: PolicyLookup,
        settings: SchedulerSettings | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.ledger = ledger
        self.policy_lookup = policy_lookup
        self.settings = settings or get_settings().scheduler
        self.clock = clock

        self._last_day: int | None = None
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def day_index(self, now: int) -> int:
        """Which in-game day ``now`` (epoch ms) falls in."""
        seconds = now // MILLIS_PER_SECOND + self.settings.day_offset_seconds
        return seconds // self.settings.day_length_seconds

    # =========================================================================
    # Resets
    # =========================================================================

    def _reset_entries(self, entries: list[LedgerEntry]) -> int:
        policies: dict[str, Policy | None] = {}
        reset = 0
        for entry in entries:
            if entry.ability_id not in policies:
                policies[entry.ability_id] = self.policy_lookup(entry.ability_id)
            policy = policies[entry.ability_id]

            if policy is None:
                logger.warning(
                    "Skipping reset for unknown ability",
                    actor_id=entry.owner_id,
                    ability_id=entry.ability_id,
                )
                continue
            if not isinstance(policy, ChargePool):
                continue

            updated = self.ledger.reset_charges(entry.owner_id, entry.ability_id, policy.max_charges)
            if updated is not None:
                reset += 1
        return reset

    def reset_actor(self, actor_id: str) -> int:
        """Restore every charge pool of one actor.

        Returns:
            Number of entries reset.
        """
        count = self._reset_entries(self.ledger.entries(actor_id))
        logger.info("Daily charges reset", actor_id=actor_id, entries=count)
        return count

    def reset_all(self) -> int:
        """Restore every charge pool of every actor.

        Returns:
            Number of entries reset.
        """
        count = self._reset_entries(self.ledger.entries())
        logger.info("Daily charges reset for all actors", entries=count)
        return count

    def run_pending(self, now: int | None = None) -> int:
        """Reset all charge pools if a day boundary passed since the last call.

        Returns:
            Number of entries reset; 0 if still on the same day.
        """
        day = self.day_index(self.clock() if now is None else now)
        if self._last_day is None:
            self._last_day = day
            return 0
        if day == self._last_day:
            return 0

        logger.info("Day boundary crossed", previous_day=self._last_day, day=day)
        count = self.reset_all()
        self._last_day = day
        return count

    # =========================================================================
    # Background Thread
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _loop(self) -> None:
        while True:
            try:
                self.run_pending()
            except Exception:
                logger.exception("Daily reset failed, will retry next poll")
            if self._stop_event.wait(self.settings.poll_interval_seconds):
                return

    def start(self) -> None:
        """Start polling for day boundaries in a daemon thread.

        Raises:
            SchedulerError: If the scheduler is already running.
        """
        if self.is_running:
            raise SchedulerError("Daily reset scheduler is already running")

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop,
            name="daily-reset-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "Daily reset scheduler started",
            poll_interval_seconds=self.settings.poll_interval_seconds,
        )

    def stop(self, timeout: float | None = None) -> None:
        """Stop the background thread and wait for it to exit."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Daily reset scheduler stopped")


__all__ = [
    "DailyResetScheduler",
    "PolicyLookup",
]
