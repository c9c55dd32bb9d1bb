"""agentdock - spawns, streams and tracks command-line coding agents."""

from .busy import BusyTracker
from .config import Config, DiscoveryConfig, ManagerConfig, find_config, load_config
from .discovery import discover, scan_package_manager
from .events import EventLog, Publisher
from .exceptions import (
    AgentError,
    AgentIOError,
    AgentNotFoundError,
    AlreadyBusyError,
    AlreadyRunningError,
    LaunchFailedError,
    NoHandleError,
    NotRunningError,
    PipeUnavailableError,
    StillRunningError,
)
from .manager import AgentManager
from .oneshot import OneShotRunner
from .registry import AgentRegistry
from .signatures import DEFAULT_SIGNATURES, AgentSignature
from .types import (
    AgentInfo,
    AgentStatus,
    DiscoveredAgent,
    DoneEvent,
    ExitEvent,
    OutputEvent,
    StatusKind,
)

__all__ = [
    "AgentError",
    "AgentIOError",
    "AgentInfo",
    "AgentManager",
    "AgentNotFoundError",
    "AgentRegistry",
    "AgentSignature",
    "AgentStatus",
    "AlreadyBusyError",
    "AlreadyRunningError",
    "BusyTracker",
    "Config",
    "DEFAULT_SIGNATURES",
    "DiscoveredAgent",
    "DiscoveryConfig",
    "DoneEvent",
    "EventLog",
    "ExitEvent",
    "LaunchFailedError",
    "ManagerConfig",
    "NoHandleError",
    "NotRunningError",
    "OneShotRunner",
    "OutputEvent",
    "PipeUnavailableError",
    "Publisher",
    "StatusKind",
    "StillRunningError",
    "discover",
    "find_config",
    "load_config",
    "scan_package_manager",
]
