"""Tests for launching agent processes."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from agentdock.exceptions import LaunchFailedError
from agentdock.launcher import build_command, launch

from conftest import PYTHON, python_args


class TestBuildCommand:
    """Tests for build_command."""

    def test_direct_execution(self):
        with patch("agentdock.launcher.sys.platform", "linux"):
            assert build_command("claude", ["-p", "hi"]) == ["claude", "-p", "hi"]

    def test_windows_goes_through_cmd(self):
        with patch("agentdock.launcher.sys.platform", "win32"):
            assert build_command("claude", ["-p", "hi"]) == [
                "cmd",
                "/c",
                "claude",
                "-p",
                "hi",
            ]


class TestLaunch:
    """Tests for launch."""

    def test_all_stdio_piped(self):
        """Test stdin, stdout and stderr are always fresh pipes."""
        with patch("agentdock.launcher.subprocess.Popen") as mock_popen:
            mock_popen.return_value = MagicMock(pid=12345)

            launch("a", "cat", [])

            kwargs = mock_popen.call_args.kwargs
            assert kwargs["stdin"] == subprocess.PIPE
            assert kwargs["stdout"] == subprocess.PIPE
            assert kwargs["stderr"] == subprocess.PIPE

    def test_env_overrides_merged(self):
        """Test env overrides are layered over our environment."""
        with (
            patch("agentdock.launcher.subprocess.Popen") as mock_popen,
            patch.dict("agentdock.launcher.os.environ", {"KEEP": "1"}, clear=True),
        ):
            mock_popen.return_value = MagicMock(pid=12345)

            launch("a", "cat", [], env={"DEBUG": "1"})

            assert mock_popen.call_args.kwargs["env"] == {"KEEP": "1", "DEBUG": "1"}

    def test_inherits_env_without_overrides(self):
        with patch("agentdock.launcher.subprocess.Popen") as mock_popen:
            mock_popen.return_value = MagicMock(pid=12345)

            launch("a", "cat", [])

            assert mock_popen.call_args.kwargs["env"] is None

    def test_missing_binary(self):
        """Test a missing executable raises LaunchFailedError."""
        with pytest.raises(LaunchFailedError, match="Failed to launch 'no-such-binary-xyz'") as exc_info:
            launch("b", "no-such-binary-xyz", [])

        assert exc_info.value.agent_id == "b"
        assert exc_info.value.command == "no-such-binary-xyz"

    def test_permission_denied(self):
        with patch("agentdock.launcher.subprocess.Popen") as mock_popen:
            mock_popen.side_effect = PermissionError(13, "Permission denied")

            with pytest.raises(LaunchFailedError, match="Permission denied"):
                launch("a", "/etc/passwd", [])

    def test_real_process(self, temp_dir):
        """Test a real child gets the working directory and pipes."""
        process = launch(
            "a",
            PYTHON,
            python_args("import os; print(os.getcwd())"),
            cwd=temp_dir,
        )
        out, err = process.communicate(timeout=10)

        assert process.returncode == 0
        assert out.decode().strip() == str(temp_dir.resolve())
