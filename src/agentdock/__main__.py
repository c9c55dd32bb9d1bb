"""CLI entry point for agentdock."""

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Any

import structlog

from .config import Config, find_config, load_config
from .events import EventLog
from .exceptions import AgentError
from .manager import AgentManager
from .types import AGENT_DONE, AGENT_EXIT, AGENT_OUTPUT, LAUNCH_FAILED_CODE, STDERR

# Shell convention for "command not found or not executable"
EXIT_LAUNCH_FAILED = 127


def print_event(event_name: str, payload: dict[str, Any]) -> None:
    """Publisher writing agent events to the terminal."""
    if event_name == AGENT_OUTPUT:
        out = sys.stderr if payload["stream"] == STDERR else sys.stdout
        print(payload["data"], file=out, flush=True)
    elif event_name in (AGENT_EXIT, AGENT_DONE) and payload.get("code") is not None:
        print(f"[{payload['id']} exited with code {payload['code']}]", file=sys.stderr)


def setup_signal_handlers() -> None:
    """Turn SIGTERM into SystemExit so main() can stop running agents.

    The handler runs on the main thread, possibly while it holds the
    registry lock, so it only unwinds and leaves the shutdown to main().
    """
    logger = structlog.get_logger()

    def handler(signum: int, frame) -> None:
        logger.info("signal_received", signal=signal.Signals(signum).name)
        raise SystemExit(128 + signum)

    signal.signal(signal.SIGTERM, handler)


def cmd_discover(manager: AgentManager, args: argparse.Namespace) -> int:
    agents = manager.discover()
    if not agents:
        print("No known agents found on PATH.")
        return 0
    for agent in agents:
        version = agent.version or "unknown version"
        print(f"{agent.short_name:<3} {agent.name:<14} {version:<30} {agent.path}")
    return 0


def cmd_run(manager: AgentManager, args: argparse.Namespace, events: EventLog) -> int:
    agent_id = args.id or args.command
    manager.run(agent_id, args.command, args.message)

    # Runs until the done event; one-shot agents have no other stop condition
    done = events.wait_for(
        lambda name, payload: name == AGENT_DONE and payload["id"] == agent_id,
        timeout=None,
    )
    code = done.get("code") if done else None
    if code is None:
        return 1
    if code == LAUNCH_FAILED_CODE:
        return EXIT_LAUNCH_FAILED
    return code


def cmd_session(manager: AgentManager, args: argparse.Namespace) -> int:
    logger = structlog.get_logger()
    agent_id = args.id or args.command

    info = manager.spawn(agent_id, args.command, args.args)
    logger.info("session_started", agent_id=info.id, name=info.name)

    try:
        for line in sys.stdin:
            manager.send(agent_id, line.rstrip("\n"))
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")
    except AgentError as e:
        # Typically the agent exited on its own
        logger.warning("session_input_failed", agent_id=agent_id, error=str(e))

    for agent in manager.snapshot():
        if agent.id == agent_id and not agent.status.is_running:
            print(f"[{agent_id} {agent.status}]", file=sys.stderr)
            return 0

    info = manager.stop(agent_id)
    logger.info("session_stopped", agent_id=agent_id, status=str(info.status))
    return 0


def main() -> None:
    """Run the agentdock CLI."""
    parser = argparse.ArgumentParser(
        description="Spawn, stream and discover command-line coding agents"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path or name of agentdock TOML config file",
    )
    parser.add_argument(
        "--working-dir",
        type=str,
        default=None,
        help="Working directory for agent processes (defaults to current)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug messages",
    )

    subparsers = parser.add_subparsers(dest="subcommand", required=True)

    subparsers.add_parser("discover", help="List installed agents")

    run_parser = subparsers.add_parser("run", help="Send one message to an agent")
    run_parser.add_argument("command", help="Agent command, e.g. claude")
    run_parser.add_argument("message", help="Message to send")
    run_parser.add_argument("--id", default=None, help="Agent id (defaults to command)")

    session_parser = subparsers.add_parser(
        "session", help="Interactive session, stdin is forwarded to the agent"
    )
    session_parser.add_argument("command", help="Agent command")
    session_parser.add_argument("args", nargs=argparse.REMAINDER, help="Agent arguments")
    session_parser.add_argument("--id", default=None, help="Agent id (defaults to command)")

    args = parser.parse_args()

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(10 if args.verbose else 30),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )

    logger = structlog.get_logger()

    if args.config:
        try:
            config_path = find_config(args.config)
        except FileNotFoundError:
            logger.error("config_not_found", path=args.config)
            raise SystemExit(1)

        config = load_config(config_path)
        logger.info("config_loaded", path=str(config_path))
    else:
        config = Config()

    # Only the done event is ever waited on; output is printed, not kept
    events = EventLog()
    lock = threading.Lock()

    def publish(event_name: str, payload: dict[str, Any]) -> None:
        with lock:
            print_event(event_name, payload)
        if event_name == AGENT_DONE:
            events(event_name, payload)

    working_dir = Path(args.working_dir) if args.working_dir else None
    manager = AgentManager(publish, config=config, working_dir=working_dir)
    setup_signal_handlers()

    try:
        if args.subcommand == "discover":
            code = cmd_discover(manager, args)
        elif args.subcommand == "run":
            code = cmd_run(manager, args, events)
        else:
            code = cmd_session(manager, args)
    except AgentError as e:
        logger.error("agent_error", agent_id=e.agent_id, error=str(e))
        code = 1
    finally:
        manager.shutdown()

    raise SystemExit(code)


if __name__ == "__main__":
    main()
