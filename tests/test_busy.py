"""Tests for the one-shot busy guard."""

import threading

from agentdock.busy import BusyTracker


class TestBusyTracker:
    """Tests for BusyTracker."""

    def test_initially_idle(self):
        assert not BusyTracker().is_busy("c")

    def test_acquire_marks_busy(self):
        busy = BusyTracker()
        assert busy.acquire("c") is True
        assert busy.is_busy("c")
        assert not busy.is_busy("d")

    def test_second_acquire_fails(self):
        busy = BusyTracker()
        busy.acquire("c")
        assert busy.acquire("c") is False
        assert busy.is_busy("c")

    def test_release(self):
        busy = BusyTracker()
        busy.acquire("c")
        busy.release("c")
        assert not busy.is_busy("c")
        assert busy.acquire("c") is True

    def test_release_unknown_is_noop(self):
        busy = BusyTracker()
        busy.release("never")
        assert not busy.is_busy("never")

    def test_is_busy_does_not_mutate(self):
        busy = BusyTracker()
        busy.is_busy("c")
        assert busy.acquire("c") is True

    def test_concurrent_acquire_single_winner(self):
        """Test exactly one of many racing threads gets the id."""
        busy = BusyTracker()
        barrier = threading.Barrier(16)
        results = []
        results_lock = threading.Lock()

        def worker():
            barrier.wait()
            won = busy.acquire("c")
            with results_lock:
                results.append(won)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert results.count(True) == 1
        assert results.count(False) == 15
