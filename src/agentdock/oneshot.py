"""One-shot agent invocations: one message in, streamed answer out."""

import threading
from pathlib import Path

import structlog

from .busy import BusyTracker
from .events import Publisher, emit
from .exceptions import AlreadyBusyError, LaunchFailedError
from .launcher import launch
from .streamer import collect, iter_lines
from .types import (
    AGENT_DONE,
    AGENT_OUTPUT,
    LAUNCH_FAILED_CODE,
    STDERR,
    STDOUT,
    DoneEvent,
    OutputEvent,
    exit_code_of,
)

logger = structlog.get_logger()


DEFAULT_ONE_SHOT_FLAG = "-p"


class OneShotRunner:
    """Runs ``<command> <flag> <message>`` in the background per agent id.

    At most one invocation per id is in flight. Each invocation publishes
    its stdout lines as they come, its stderr as a single event once stdout
    is done, and exactly one done event.
    """

    def __init__(
        self,
        publish: Publisher,
        flag: str = DEFAULT_ONE_SHOT_FLAG,
        busy: BusyTracker | None = None,
        cwd: Path | None = None,
    ):
        self._publish = publish
        self._flag = flag
        self._busy = busy if busy is not None else BusyTracker()
        self._cwd = cwd

    def run(self, agent_id: str, command: str, message: str) -> None:
        """Start a one-shot invocation. Results arrive as events.

        Raises:
            AlreadyBusyError: An invocation for this id is still in flight.
        """
        if not self._busy.acquire(agent_id):
            raise AlreadyBusyError(agent_id)

        try:
            thread = threading.Thread(
                target=self._invoke,
                args=(agent_id, command, message),
                name=f"oneshot-{agent_id}",
                daemon=True,
            )
            thread.start()
        except RuntimeError:
            self._busy.release(agent_id)
            raise

        logger.info("oneshot_started", agent_id=agent_id, command=command)

    def is_busy(self, agent_id: str) -> bool:
        return self._busy.is_busy(agent_id)

    def _invoke(self, agent_id: str, command: str, message: str) -> None:
        try:
            code = self._execute(agent_id, command, message)
        finally:
            self._busy.release(agent_id)

        logger.info("oneshot_done", agent_id=agent_id, exit_code=code)
        emit(self._publish, AGENT_DONE, DoneEvent(id=agent_id, code=code))

    def _execute(self, agent_id: str, command: str, message: str) -> int | None:
        """Run the process to completion; return its exit code."""
        try:
            process = launch(agent_id, command, [self._flag, message], cwd=self._cwd)
        except LaunchFailedError as e:
            emit(self._publish, AGENT_OUTPUT, OutputEvent(id=agent_id, stream=STDERR, data=str(e)))
            return LAUNCH_FAILED_CODE

        # The message travels as an argument; nothing goes to stdin
        process.stdin.close()

        # Drained concurrently so a chatty stderr cannot block the process
        stderr_text: list[str] = []
        stderr_thread = threading.Thread(
            target=lambda: stderr_text.append(collect(process.stderr)),
            name=f"oneshot-{agent_id}-stderr",
            daemon=True,
        )
        stderr_thread.start()

        try:
            for line in iter_lines(process.stdout):
                emit(self._publish, AGENT_OUTPUT, OutputEvent(id=agent_id, stream=STDOUT, data=line))
        except (OSError, ValueError) as e:
            logger.debug("reader_error", agent_id=agent_id, stream=STDOUT, error=str(e))
        finally:
            process.stdout.close()

        stderr_thread.join()
        stderr = "".join(stderr_text).rstrip("\r\n")
        if stderr:
            emit(self._publish, AGENT_OUTPUT, OutputEvent(id=agent_id, stream=STDERR, data=stderr))

        try:
            returncode = process.wait()
        except OSError as e:
            logger.warning("oneshot_wait_failed", agent_id=agent_id, error=str(e))
            return None
        return exit_code_of(returncode)
