"""Core types for agent process management."""

from enum import Enum
from typing import Any

from pydantic import BaseModel


# Event names published to the UI bus
AGENT_OUTPUT = "agent-output"
AGENT_EXIT = "agent-exit"
AGENT_DONE = "agent-done"

# Stream names carried by output events
STDOUT = "stdout"
STDERR = "stderr"

# Done code reported when a one-shot process could not be launched
LAUNCH_FAILED_CODE = -1


class StatusKind(str, Enum):
    """Agent lifecycle states."""

    RUNNING = "running"
    STOPPED = "stopped"
    ERROR = "error"


class AgentStatus(BaseModel, frozen=True):
    """Status of an agent process.

    ``reason`` is only set for the error state.
    """

    kind: StatusKind
    reason: str | None = None

    @classmethod
    def running(cls) -> "AgentStatus":
        return cls(kind=StatusKind.RUNNING)

    @classmethod
    def stopped(cls) -> "AgentStatus":
        return cls(kind=StatusKind.STOPPED)

    @classmethod
    def error(cls, reason: str) -> "AgentStatus":
        return cls(kind=StatusKind.ERROR, reason=reason)

    @property
    def is_running(self) -> bool:
        return self.kind == StatusKind.RUNNING

    @property
    def is_terminal(self) -> bool:
        return self.kind != StatusKind.RUNNING

    def to_payload(self) -> str | dict[str, str]:
        """Serialize as "running", "stopped" or {"error": reason}."""
        if self.kind == StatusKind.ERROR:
            return {"error": self.reason or ""}
        return self.kind.value

    def __str__(self) -> str:
        if self.kind == StatusKind.ERROR:
            return f"error: {self.reason}"
        return self.kind.value


class AgentInfo(BaseModel, frozen=True):
    """Snapshot of a managed agent returned to the caller."""

    id: str
    name: str
    status: AgentStatus

    def to_payload(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "status": self.status.to_payload()}


class OutputEvent(BaseModel, frozen=True):
    """One line written by an agent to stdout or stderr."""

    id: str
    stream: str  # "stdout" | "stderr"
    data: str

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()


class ExitEvent(BaseModel, frozen=True):
    """Agent process exited (interactive model).

    ``code`` is None when it could not be determined.
    """

    id: str
    code: int | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()


class DoneEvent(BaseModel, frozen=True):
    """One-shot invocation finished."""

    id: str
    code: int | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()


class DiscoveredAgent(BaseModel, frozen=True):
    """A known agent found installed on this machine."""

    id: str
    name: str
    short_name: str
    command: str
    path: str
    color: str
    version: str = ""  # Empty when the version probe gave nothing
    available: bool = True

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()


def display_name(command: str, args: list[str]) -> str:
    """Friendly name for an agent: the command line as typed."""
    if not args:
        return command
    return f"{command} {' '.join(args)}"


def exit_code_of(returncode: int | None) -> int | None:
    """Exit code from a Popen return code.

    Negative return codes mean the process was killed by a signal and
    carry no exit code.
    """
    if returncode is None or returncode < 0:
        return None
    return returncode


def status_for_exit(returncode: int) -> AgentStatus:
    """Terminal status for a process that exited with ``returncode``."""
    if returncode == 0:
        return AgentStatus.stopped()
    if returncode < 0:
        return AgentStatus.error(f"Terminated by signal {-returncode}")
    return AgentStatus.error(f"Exited with code {returncode}")
