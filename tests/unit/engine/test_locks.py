"""Tests for per-key locks."""

from __future__ import annotations

import threading
import time

from ability_engine.engine.locks import KeyedLocks


class TestKeyedLocks:
    """Tests for KeyedLocks."""

    def test_reentrant(self) -> None:
        """Test the holder may take its own key again."""
        locks = KeyedLocks()

        with locks.hold("a"):
            with locks.hold("a"):
                assert len(locks) == 1

    def test_idle_locks_discarded(self) -> None:
        locks = KeyedLocks()

        with locks.hold("a"), locks.hold("b"):
            assert len(locks) == 2

        assert len(locks) == 0

    def test_same_key_serialized(self) -> None:
        """Test two threads never hold the same key at once."""
        locks = KeyedLocks()
        inside = 0
        max_inside = 0
        guard = threading.Lock()

        def work() -> None:
            nonlocal inside, max_inside
            with locks.hold(("hero", "spell")):
                with guard:
                    inside += 1
                    max_inside = max(max_inside, inside)
                time.sleep(0.01)
                with guard:
                    inside -= 1

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert max_inside == 1
        assert len(locks) == 0

    def test_different_keys_do_not_block(self) -> None:
        """Test a held key does not block another key."""
        locks = KeyedLocks()
        acquired = threading.Event()

        def other() -> None:
            with locks.hold("b"):
                acquired.set()

        with locks.hold("a"):
            thread = threading.Thread(target=other)
            thread.start()
            assert acquired.wait(timeout=2)
            thread.join()
