"""Pytest configuration and fixtures for agentdock tests."""

import sys
import tempfile
from pathlib import Path

import pytest

from agentdock.events import EventLog
from agentdock.registry import AgentRegistry


PYTHON = sys.executable

# Echoes every stdin line back on stdout, like `cat`
ECHO_SCRIPT = (
    "import sys\n"
    "for line in sys.stdin:\n"
    "    sys.stdout.write(line)\n"
    "    sys.stdout.flush()\n"
)


def python_args(code: str) -> list[str]:
    """Arguments running ``code`` in an unbuffered Python child."""
    return ["-u", "-c", code]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def events():
    """Publisher recording every event."""
    return EventLog()


@pytest.fixture
def registry(events):
    """Registry publishing to ``events``; running agents killed afterwards."""
    registry = AgentRegistry(events, exit_grace_seconds=2.0)
    yield registry
    registry.shutdown()


@pytest.fixture
def sample_config_toml():
    """Sample agentdock config as TOML string."""
    return """
[manager]
one_shot_flag = "--print"
exit_grace_seconds = 1.0

[discovery]
version_flag = "-V"
version_timeout_seconds = 4.0
scan_package_manager = false

[[signatures]]
command = "claude"
name = "Claude Code"
short_name = "CC"
color = "#00FF64"
package = "@anthropic-ai/claude-code"

[[signatures]]
command = "aider"
name = "Aider"
short_name = "AI"
color = "#9333EA"
"""


@pytest.fixture
def config_file(temp_dir, sample_config_toml):
    """Create a temporary config file."""
    config_path = temp_dir / "test_config.toml"
    config_path.write_text(sample_config_toml)
    return config_path
