"""Custom exceptions for agent process management."""


class AgentError(Exception):
    """Base exception for agent errors.

    The message is meant to be shown to the user as-is.
    """

    def __init__(self, agent_id: str, message: str):
        super().__init__(message)
        self.agent_id = agent_id


class AlreadyRunningError(AgentError):
    """Raised when spawning an id whose agent is still running."""

    def __init__(self, agent_id: str):
        super().__init__(agent_id, f"Agent '{agent_id}' is already running")


class AlreadyBusyError(AgentError):
    """Raised when a one-shot invocation is already in flight for the id."""

    def __init__(self, agent_id: str):
        super().__init__(agent_id, f"Agent '{agent_id}' is already busy")


class AgentNotFoundError(AgentError):
    """Raised when no agent is registered under the id."""

    def __init__(self, agent_id: str):
        super().__init__(agent_id, f"Agent '{agent_id}' not found")


class NotRunningError(AgentError):
    """Raised when input is sent to an agent that is not running."""

    def __init__(self, agent_id: str):
        super().__init__(agent_id, f"Agent '{agent_id}' is not running")


class NoHandleError(AgentError):
    """Raised when a running agent has no process handle."""

    def __init__(self, agent_id: str):
        super().__init__(agent_id, f"Agent '{agent_id}' has no child process")


class PipeUnavailableError(AgentError):
    """Raised when the agent's stdin pipe is gone."""

    def __init__(self, agent_id: str):
        super().__init__(agent_id, f"Agent '{agent_id}' stdin not available")


class LaunchFailedError(AgentError):
    """Raised when the OS could not create the process."""

    def __init__(self, agent_id: str, command: str, reason: str):
        super().__init__(agent_id, f"Failed to launch '{command}': {reason}")
        self.command = command


class AgentIOError(AgentError):
    """Raised when writing to or polling an agent process fails."""

    pass


class StillRunningError(AgentError):
    """Raised when removing an agent that has not been stopped."""

    def __init__(self, agent_id: str):
        super().__init__(
            agent_id, f"Agent '{agent_id}' is still running. Stop it first."
        )
