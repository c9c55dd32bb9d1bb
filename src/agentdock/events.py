"""Publishing agent events to the UI bus."""

import threading
import time
from typing import Any, Callable, Protocol

import structlog

logger = structlog.get_logger()


# The UI bus: publish(event_name, payload)
Publisher = Callable[[str, dict[str, Any]], None]


class Event(Protocol):
    id: str

    def to_payload(self) -> dict[str, Any]: ...


def emit(publish: Publisher, event_name: str, event: Event) -> None:
    """Publish an event, logging instead of raising if the bus fails.

    Called from reader threads, which must keep draining their pipe even
    when the front end has gone away.
    """
    try:
        publish(event_name, event.to_payload())
    except Exception as e:
        logger.warning(
            "publish_failed",
            event_name=event_name,
            agent_id=event.id,
            error=str(e),
        )


class EventLog:
    """In-memory publisher that records every event it receives.

    Thread-safe. Callers can block until a matching event arrives.
    """

    def __init__(self) -> None:
        self._events: list[tuple[str, dict[str, Any]]] = []
        self._cond = threading.Condition()

    def __call__(self, event_name: str, payload: dict[str, Any]) -> None:
        with self._cond:
            self._events.append((event_name, dict(payload)))
            self._cond.notify_all()

    @property
    def events(self) -> list[tuple[str, dict[str, Any]]]:
        """Copy of all events received so far, in arrival order."""
        with self._cond:
            return list(self._events)

    def named(self, event_name: str, agent_id: str | None = None) -> list[dict[str, Any]]:
        """Payloads of every event with the given name (and agent id)."""
        return [
            payload
            for name, payload in self.events
            if name == event_name and (agent_id is None or payload.get("id") == agent_id)
        ]

    def wait_for(
        self,
        predicate: Callable[[str, dict[str, Any]], bool],
        timeout: float | None = 5.0,
    ) -> dict[str, Any] | None:
        """Block until an event matches the predicate.

        Args:
            predicate: Called with (event_name, payload) for each event.
            timeout: Maximum seconds to wait, None to wait forever.

        Returns:
            The first matching payload, or None on timeout.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        scanned = 0
        with self._cond:
            while True:
                # Only events that arrived since the last wakeup
                for name, payload in self._events[scanned:]:
                    if predicate(name, payload):
                        return payload
                scanned = len(self._events)
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None
                self._cond.wait(remaining)
