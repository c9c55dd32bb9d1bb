"""Launching agent processes with piped stdio."""

import os
import subprocess
import sys
from pathlib import Path

import structlog

from .exceptions import LaunchFailedError

logger = structlog.get_logger()


def build_command(command: str, args: list[str]) -> list[str]:
    """Build the argv used to launch ``command``.

    On Windows agents are usually npm-installed .cmd/.bat wrappers, which
    only run through the shell, so the command goes through ``cmd /c``.
    """
    if sys.platform == "win32":
        return ["cmd", "/c", command, *args]
    return [command, *args]


def launch(
    agent_id: str,
    command: str,
    args: list[str],
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
) -> subprocess.Popen:
    """Start a child process with stdin, stdout and stderr all piped.

    Args:
        agent_id: Agent the process belongs to (for errors and logs).
        command: Program to execute.
        args: Arguments passed to the program.
        cwd: Working directory, defaults to ours.
        env: Environment overrides on top of ours.

    Returns:
        The running process. Its pipes are binary.

    Raises:
        LaunchFailedError: If the OS could not create the process.
    """
    cmd = build_command(command, args)

    proc_env = None
    if env:
        proc_env = os.environ.copy()
        proc_env.update(env)

    try:
        process = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=proc_env,
        )
    except OSError as e:
        logger.warning(
            "agent_launch_failed",
            agent_id=agent_id,
            command=command,
            error=str(e),
        )
        raise LaunchFailedError(agent_id, command, e.strerror or str(e)) from e

    logger.info(
        "agent_launched",
        agent_id=agent_id,
        command=command,
        pid=process.pid,
    )
    return process
