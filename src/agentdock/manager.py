"""Agent manager: the command surface used by the UI."""

from pathlib import Path

from .config import Config
from .discovery import discover
from .events import Publisher
from .oneshot import OneShotRunner
from .registry import AgentRegistry
from .types import AgentInfo, DiscoveredAgent


class AgentManager:
    """Owns the interactive registry and the one-shot runner.

    Every command either returns its result or raises an AgentError whose
    message is ready to show. Output, exit and done notifications go to
    ``publish``.
    """

    def __init__(
        self,
        publish: Publisher,
        config: Config | None = None,
        working_dir: Path | None = None,
    ):
        self.config = config if config is not None else Config()
        self.working_dir = working_dir
        self._registry = AgentRegistry(
            publish,
            exit_grace_seconds=self.config.manager.exit_grace_seconds,
        )
        self._oneshot = OneShotRunner(
            publish,
            flag=self.config.manager.one_shot_flag,
            cwd=working_dir,
        )

    def spawn(self, agent_id: str, command: str, args: list[str]) -> AgentInfo:
        """Start an interactive agent."""
        return self._registry.spawn(agent_id, command, args, cwd=self.working_dir)

    def send(self, agent_id: str, text: str) -> None:
        """Send one line of input to an interactive agent."""
        self._registry.send(agent_id, text)

    def stop(self, agent_id: str) -> AgentInfo:
        """Kill an interactive agent."""
        return self._registry.stop(agent_id)

    def snapshot(self) -> list[AgentInfo]:
        """Status of every interactive agent."""
        return self._registry.snapshot()

    def remove(self, agent_id: str) -> None:
        """Forget a stopped interactive agent."""
        self._registry.remove(agent_id)

    def run(self, agent_id: str, command: str, message: str) -> None:
        """Start a one-shot invocation; the answer arrives as events."""
        self._oneshot.run(agent_id, command, message)

    def is_busy(self, agent_id: str) -> bool:
        """Whether a one-shot invocation is in flight for the id."""
        return self._oneshot.is_busy(agent_id)

    def discover(self) -> list[DiscoveredAgent]:
        """Known agents installed on this machine."""
        return discover(self.config.signatures, self.config.discovery)

    def shutdown(self) -> None:
        """Stop every running interactive agent."""
        self._registry.shutdown()
