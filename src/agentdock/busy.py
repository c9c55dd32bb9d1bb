"""Reentrancy guard for one-shot invocations."""

import threading


class BusyTracker:
    """Set of agent ids with a one-shot invocation in flight."""

    def __init__(self) -> None:
        self._busy: set[str] = set()
        self._lock = threading.Lock()

    def acquire(self, agent_id: str) -> bool:
        """Mark an id busy.

        Returns:
            False if it already was busy, in which case nothing changes.
        """
        with self._lock:
            if agent_id in self._busy:
                return False
            self._busy.add(agent_id)
            return True

    def release(self, agent_id: str) -> None:
        """Clear the busy mark. Safe to call for an id that is not busy."""
        with self._lock:
            self._busy.discard(agent_id)

    def is_busy(self, agent_id: str) -> bool:
        with self._lock:
            return agent_id in self._busy
