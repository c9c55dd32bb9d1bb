"""Exit handling for interactive agents."""

import subprocess
from typing import TYPE_CHECKING

import structlog

from .events import Publisher, emit
from .types import AGENT_EXIT, ExitEvent, exit_code_of

if TYPE_CHECKING:
    from .registry import AgentRegistry

logger = structlog.get_logger()


class ExitTracker:
    """Turns stdout closure into registry updates and exit events.

    Exit events are at-least-once: a consumer can see one with no code
    followed by one carrying the real code. Registry transitions are
    idempotent, so running this concurrently with stop() or snapshot()
    for the same process is safe.
    """

    def __init__(
        self,
        registry: "AgentRegistry",
        publish: Publisher,
        grace_seconds: float = 0.5,
    ):
        """Initialize ExitTracker.

        Args:
            registry: Registry holding the agent records.
            publish: UI bus.
            grace_seconds: How long to wait for the process to exit after
                its stdout closed, before giving up on the exit code.
        """
        self._registry = registry
        self._publish = publish
        self._grace_seconds = grace_seconds

    def stdout_closed(self, agent_id: str, process: subprocess.Popen) -> None:
        """Handle the end of an agent's stdout. Runs on the reader thread."""
        emit(self._publish, AGENT_EXIT, ExitEvent(id=agent_id, code=None))

        returncode = self._wait_briefly(agent_id, process)
        updated = self._registry.record_exit(agent_id, process, returncode)

        code = exit_code_of(returncode)
        logger.info(
            "agent_exited",
            agent_id=agent_id,
            pid=process.pid,
            exit_code=code,
            status_updated=updated,
        )

        if code is not None:
            emit(self._publish, AGENT_EXIT, ExitEvent(id=agent_id, code=code))

    def _wait_briefly(self, agent_id: str, process: subprocess.Popen) -> int | None:
        """Return code of the process if it exits within the grace period."""
        try:
            return process.wait(timeout=self._grace_seconds)
        except subprocess.TimeoutExpired:
            # Closed stdout but kept running
            logger.debug("exit_code_unknown", agent_id=agent_id, pid=process.pid)
            return None
        except OSError as e:
            logger.debug("exit_wait_failed", agent_id=agent_id, error=str(e))
            return None
