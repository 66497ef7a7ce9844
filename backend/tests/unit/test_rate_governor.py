"""
Unit tests for notifications/rate_governor.py

Uses a fake clock so window arithmetic is exact.
"""

import threading
import time
import unittest

from notifications.errors import RateLimited
from notifications.rate_governor import RateGovernor
from tests.fixtures.mock_helpers import FakeClock


class TestAllow(unittest.TestCase):
    """Tests for RateGovernor.allow()."""

    def setUp(self):
        self.clock = FakeClock()
        self.governor = RateGovernor(window_seconds=60, max_requests=2, clock=self.clock)

    def test_third_request_in_window_denied(self):
        self.assertTrue(self.governor.allow("10.0.0.1"))
        self.clock.advance(1)
        self.assertTrue(self.governor.allow("10.0.0.1"))
        self.clock.advance(1)
        self.assertFalse(self.governor.allow("10.0.0.1"))

    def test_allowed_again_after_window(self):
        self.governor.allow("10.0.0.1")
        self.governor.allow("10.0.0.1")
        self.assertFalse(self.governor.allow("10.0.0.1"))

        self.clock.advance(61)

        self.assertTrue(self.governor.allow("10.0.0.1"))

    def test_window_slides(self):
        """Only the oldest request expiring frees one slot."""
        self.governor.allow("a")
        self.clock.advance(30)
        self.governor.allow("a")
        self.clock.advance(31)

        self.assertTrue(self.governor.allow("a"))
        self.assertFalse(self.governor.allow("a"))

    def test_denied_requests_not_counted(self):
        self.governor.allow("a")
        self.governor.allow("a")
        for _ in range(5):
            self.governor.allow("a")

        self.clock.advance(60.5)

        self.assertTrue(self.governor.allow("a"))

    def test_callers_are_independent(self):
        self.governor.allow("a")
        self.governor.allow("a")

        self.assertFalse(self.governor.allow("a"))
        self.assertTrue(self.governor.allow("b"))

    def test_invalid_configuration(self):
        with self.assertRaises(ValueError):
            RateGovernor(window_seconds=0)
        with self.assertRaises(ValueError):
            RateGovernor(max_requests=0)
        with self.assertRaises(ValueError):
            RateGovernor(max_callers=0)


class TestCheck(unittest.TestCase):
    """Tests for check() and retry_after()."""

    def test_check_raises_with_retry_after(self):
        clock = FakeClock()
        governor = RateGovernor(window_seconds=60, max_requests=1, clock=clock)
        governor.check("a")
        clock.advance(20)

        with self.assertRaises(RateLimited) as ctx:
            governor.check("a")

        self.assertAlmostEqual(ctx.exception.retry_after, 40)
        self.assertIn("Too many requests", ctx.exception.message)

    def test_retry_after_zero_when_under_cap(self):
        governor = RateGovernor(max_requests=3, clock=FakeClock())
        governor.allow("a")

        self.assertEqual(governor.retry_after("a"), 0.0)
        self.assertEqual(governor.retry_after("unknown"), 0.0)


class TestEviction(unittest.TestCase):
    """Tests for sweep() and the caller cap."""

    def test_sweep_drops_idle_callers(self):
        clock = FakeClock()
        governor = RateGovernor(window_seconds=60, max_requests=5, clock=clock)
        governor.allow("old")
        clock.advance(50)
        governor.allow("recent")
        clock.advance(20)

        removed = governor.sweep()

        self.assertEqual(removed, 1)
        self.assertEqual(governor.tracked_callers(), 1)

    def test_caller_cap_evicts_least_recent(self):
        clock = FakeClock()
        governor = RateGovernor(max_requests=1, max_callers=2, clock=clock)
        governor.allow("a")
        governor.allow("b")
        governor.allow("a")  # denied, but marks "a" as recently active
        governor.allow("c")

        self.assertEqual(governor.tracked_callers(), 2)
        # "b" was evicted, so it starts with a fresh window
        self.assertTrue(governor.allow("b"))
        # re-adding "b" pushed out "a"; "c" keeps its window
        self.assertFalse(governor.allow("c"))


class TestSweeperThread(unittest.TestCase):
    """Tests for the background sweeper."""

    def test_start_and_stop(self):
        clock = FakeClock()
        governor = RateGovernor(window_seconds=1, sweep_interval=0.01, clock=clock)
        governor.allow("a")
        clock.advance(5)

        with governor:
            deadline = time.time() + 2
            while governor.tracked_callers() and time.time() < deadline:
                time.sleep(0.01)

        self.assertEqual(governor.tracked_callers(), 0)
        self.assertIsNone(governor._sweeper)

    def test_concurrent_allow_respects_cap(self):
        governor = RateGovernor(window_seconds=60, max_requests=50)
        allowed = []
        lock = threading.Lock()

        def worker():
            for _ in range(20):
                if governor.allow("shared"):
                    with lock:
                        allowed.append(1)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(allowed), 50)
