"""Registry of interactive agent processes."""

import subprocess
import threading
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path

import structlog

from .events import Publisher
from .exceptions import (
    AgentIOError,
    AgentNotFoundError,
    AlreadyRunningError,
    NoHandleError,
    NotRunningError,
    PipeUnavailableError,
    StillRunningError,
)
from .launcher import launch
from .streamer import start_reader
from .tracker import ExitTracker
from .types import STDERR, STDOUT, AgentInfo, AgentStatus, display_name, status_for_exit

logger = structlog.get_logger()


@dataclass
class AgentRecord:
    """Bookkeeping for a single managed agent."""

    id: str
    name: str
    status: AgentStatus
    # Present from launch until stop() or remove() discards it
    process: subprocess.Popen | None = field(default=None, repr=False)
    # Serializes writes to stdin, which happen outside the registry lock
    write_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def info(self) -> AgentInfo:
        return AgentInfo(id=self.id, name=self.name, status=self.status)


def _close_stdin(process: subprocess.Popen) -> None:
    if process.stdin is None:
        return
    try:
        process.stdin.close()
    except OSError:
        # Unflushed data to a dead process
        pass


class AgentRegistry:
    """Thread-safe map of agent id to process state.

    Every operation holds the registry lock for its whole duration. The only
    blocking call made under the lock is the kill-and-wait in stop().
    Writes to an agent's stdin happen after the lock is released.
    """

    def __init__(self, publish: Publisher, exit_grace_seconds: float = 0.5):
        """Initialize AgentRegistry.

        Args:
            publish: UI bus receiving output and exit events.
            exit_grace_seconds: How long a stdout reader waits for the exit
                code once its stream closed.
        """
        self._publish = publish
        self._agents: dict[str, AgentRecord] = {}
        self._lock = threading.Lock()
        self._tracker = ExitTracker(self, publish, grace_seconds=exit_grace_seconds)

    def __contains__(self, agent_id: str) -> bool:
        with self._lock:
            return agent_id in self._agents

    def spawn(
        self,
        agent_id: str,
        command: str,
        args: list[str],
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> AgentInfo:
        """Launch an agent process and start streaming its output.

        A stopped or failed agent with the same id is replaced.

        Raises:
            AlreadyRunningError: If the id belongs to a running agent.
            LaunchFailedError: If the process could not be started.
        """
        with self._lock:
            existing = self._agents.get(agent_id)
            if existing is not None:
                if existing.status.is_running:
                    raise AlreadyRunningError(agent_id)
                del self._agents[agent_id]
                if existing.process is not None:
                    _close_stdin(existing.process)

            process = launch(agent_id, command, args, cwd=cwd, env=env)

            record = AgentRecord(
                id=agent_id,
                name=display_name(command, args),
                status=AgentStatus.running(),
                process=process,
            )
            self._agents[agent_id] = record

            # Readers own the output pipes from here on
            start_reader(
                agent_id,
                process.stdout,
                STDOUT,
                self._publish,
                on_close=partial(self._tracker.stdout_closed, agent_id, process),
            )
            start_reader(agent_id, process.stderr, STDERR, self._publish)

            info = record.info()

        logger.info("agent_spawned", agent_id=agent_id, name=info.name, pid=process.pid)
        return info

    def send(self, agent_id: str, text: str) -> None:
        """Write a line of text to the agent's stdin.

        Raises:
            AgentNotFoundError: Unknown id.
            NotRunningError: The agent is stopped or failed.
            NoHandleError: The agent has no process.
            PipeUnavailableError: The agent's stdin is gone.
            AgentIOError: Writing or flushing failed.
        """
        with self._lock:
            record = self._agents.get(agent_id)
            if record is None:
                raise AgentNotFoundError(agent_id)
            if not record.status.is_running:
                raise NotRunningError(agent_id)
            if record.process is None:
                raise NoHandleError(agent_id)
            stdin = record.process.stdin
            if stdin is None or stdin.closed:
                raise PipeUnavailableError(agent_id)
            write_lock = record.write_lock

        with write_lock:
            try:
                stdin.write(text.encode("utf-8") + b"\n")
            except (OSError, ValueError) as e:
                raise AgentIOError(agent_id, f"Failed to write to stdin: {e}") from e
            try:
                stdin.flush()
            except (OSError, ValueError) as e:
                raise AgentIOError(agent_id, f"Failed to flush stdin: {e}") from e

        logger.debug("agent_input_sent", agent_id=agent_id, length=len(text))

    def stop(self, agent_id: str) -> AgentInfo:
        """Kill the agent process and mark it stopped.

        Raises:
            AgentNotFoundError: Unknown id.
        """
        with self._lock:
            record = self._agents.get(agent_id)
            if record is None:
                raise AgentNotFoundError(agent_id)

            process = record.process
            if process is not None:
                try:
                    process.kill()
                except OSError as e:
                    # Already gone
                    logger.debug("agent_kill_failed", agent_id=agent_id, error=str(e))
                try:
                    process.wait()
                except OSError as e:
                    logger.debug("agent_wait_failed", agent_id=agent_id, error=str(e))
                _close_stdin(process)

            record.status = AgentStatus.stopped()
            record.process = None
            info = record.info()

        logger.info("agent_stopped", agent_id=agent_id)
        return info

    def snapshot(self) -> list[AgentInfo]:
        """Every agent with a freshly checked status.

        Running agents are polled without blocking; ones that have exited
        since the last look become stopped or error.
        """
        with self._lock:
            for record in self._agents.values():
                if record.status.is_running:
                    self._refresh(record)
            return [record.info() for record in self._agents.values()]

    def get(self, agent_id: str) -> AgentInfo:
        """Current record for an agent, without polling the process.

        Raises:
            AgentNotFoundError: Unknown id.
        """
        with self._lock:
            record = self._agents.get(agent_id)
            if record is None:
                raise AgentNotFoundError(agent_id)
            return record.info()

    def remove(self, agent_id: str) -> None:
        """Forget a stopped or failed agent.

        Raises:
            AgentNotFoundError: Unknown id.
            StillRunningError: The agent is running.
        """
        with self._lock:
            record = self._agents.get(agent_id)
            if record is None:
                raise AgentNotFoundError(agent_id)
            if record.status.is_running:
                raise StillRunningError(agent_id)
            del self._agents[agent_id]
            if record.process is not None:
                _close_stdin(record.process)

        logger.info("agent_removed", agent_id=agent_id)

    def record_exit(
        self,
        agent_id: str,
        process: subprocess.Popen,
        returncode: int | None,
    ) -> bool:
        """Mark the agent owning ``process`` as exited.

        No-op if the record is gone, was stopped, was replaced by a newer
        spawn, or already holds a terminal status.

        Args:
            agent_id: Agent id.
            process: The process that exited.
            returncode: Its return code, None if unknown.

        Returns:
            True if the record was updated.
        """
        with self._lock:
            record = self._agents.get(agent_id)
            if record is None or record.process is not process:
                return False
            if not record.status.is_running:
                return False
            if returncode is None:
                record.status = AgentStatus.stopped()
            else:
                record.status = status_for_exit(returncode)
            return True

    def shutdown(self) -> None:
        """Stop every running agent."""
        with self._lock:
            running = [r.id for r in self._agents.values() if r.status.is_running]

        if not running:
            return

        logger.info("shutting_down", agent_count=len(running))
        for agent_id in running:
            try:
                self.stop(agent_id)
            except AgentNotFoundError:
                # Removed meanwhile
                continue
        logger.info("shutdown_complete")

    def _refresh(self, record: AgentRecord) -> None:
        """Poll a running agent's process. Caller holds the lock."""
        process = record.process
        if process is None:
            record.status = AgentStatus.stopped()
            return

        try:
            returncode = process.poll()
        except OSError as e:
            record.status = AgentStatus.error(f"Failed to poll status: {e}")
            return

        if returncode is not None:
            record.status = status_for_exit(returncode)
            logger.info(
                "agent_exit_detected",
                agent_id=record.id,
                pid=process.pid,
                exit_code=returncode,
            )
