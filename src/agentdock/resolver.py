"""Locating agent executables and probing their versions."""

import shutil
import subprocess

import structlog

from .launcher import build_command

logger = structlog.get_logger()


DEFAULT_VERSION_TIMEOUT_SECONDS = 3.0


def find_on_path(command: str) -> str | None:
    """Resolve a command on the search path.

    Returns:
        Full path to the executable, or None if it is not installed.
    """
    return shutil.which(command)


def _first_line(text: str) -> str:
    for line in text.splitlines():
        line = line.strip()
        if line:
            return line
    return ""


def get_version(
    command: str,
    flag: str = "--version",
    timeout: float = DEFAULT_VERSION_TIMEOUT_SECONDS,
) -> str:
    """Ask a command for its version.

    The probe process is killed if it does not answer within ``timeout``.

    Args:
        command: Command name or path.
        flag: Version flag to pass.
        timeout: Seconds to wait for the probe.

    Returns:
        First line of stdout, else first line of stderr; empty string if
        the probe timed out, failed or printed nothing.
    """
    try:
        result = subprocess.run(
            build_command(command, [flag]),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.warning("version_probe_timeout", command=command, timeout=timeout)
        return ""
    except OSError as e:
        logger.debug("version_probe_failed", command=command, error=str(e))
        return ""

    if result.returncode != 0:
        logger.debug(
            "version_probe_nonzero_exit",
            command=command,
            exit_code=result.returncode,
        )
        return ""

    stdout = _first_line(result.stdout.decode("utf-8", errors="replace"))
    if stdout:
        return stdout
    return _first_line(result.stderr.decode("utf-8", errors="replace"))
