"""Tests for path and version resolution."""

import subprocess
from unittest.mock import patch

from agentdock.resolver import find_on_path, get_version

from conftest import PYTHON


def completed(returncode: int = 0, stdout: bytes = b"", stderr: bytes = b""):
    return subprocess.CompletedProcess(
        args=["agent", "--version"],
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )


class TestFindOnPath:
    """Tests for find_on_path."""

    def test_found(self):
        with patch("agentdock.resolver.shutil.which", return_value="/usr/bin/claude"):
            assert find_on_path("claude") == "/usr/bin/claude"

    def test_not_found(self):
        assert find_on_path("no-such-binary-xyz") is None

    def test_real_interpreter(self):
        assert find_on_path(PYTHON) is not None


class TestGetVersion:
    """Tests for get_version."""

    def test_prefers_stdout(self):
        with patch("agentdock.resolver.subprocess.run") as mock_run:
            mock_run.return_value = completed(stdout=b"1.2.3 (Claude Code)\n", stderr=b"warn\n")
            assert get_version("claude") == "1.2.3 (Claude Code)"

    def test_first_line_only(self):
        with patch("agentdock.resolver.subprocess.run") as mock_run:
            mock_run.return_value = completed(stdout=b"\naider 0.86.1\nextra\n")
            assert get_version("aider") == "aider 0.86.1"

    def test_falls_back_to_stderr(self):
        with patch("agentdock.resolver.subprocess.run") as mock_run:
            mock_run.return_value = completed(stdout=b"  \n", stderr=b"codex-cli 0.1.0\n")
            assert get_version("codex") == "codex-cli 0.1.0"

    def test_both_empty(self):
        with patch("agentdock.resolver.subprocess.run") as mock_run:
            mock_run.return_value = completed()
            assert get_version("amp") == ""

    def test_timeout_gives_empty_version(self):
        """Test a hanging probe yields an empty string instead of failing."""
        with patch("agentdock.resolver.subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(cmd="cody", timeout=3.0)
            assert get_version("cody", timeout=3.0) == ""
            assert mock_run.call_args.kwargs["timeout"] == 3.0

    def test_launch_failure(self):
        assert get_version("no-such-binary-xyz") == ""

    def test_nonzero_exit(self):
        with patch("agentdock.resolver.subprocess.run") as mock_run:
            mock_run.return_value = completed(returncode=1, stdout=b"unknown flag\n")
            assert get_version("cursor") == ""

    def test_custom_flag(self):
        with patch("agentdock.resolver.subprocess.run") as mock_run:
            mock_run.return_value = completed(stdout=b"v1\n")
            get_version("gemini", flag="-V")
            assert mock_run.call_args.args[0][-1] == "-V"

    def test_real_interpreter(self):
        assert get_version(PYTHON).startswith("Python 3")
