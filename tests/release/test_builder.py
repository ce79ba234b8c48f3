# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the build/test harness.

Subprocess calls are patched, so these check the command lines we build
and how exit statuses turn into errors, without needing cross or cargo.
"""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from kaklsp_release.cli.exit_codes import RUNTIME_ERROR
from kaklsp_release.config.schema import ToolConfig
from kaklsp_release.release.builder import build_and_test, tool_command
from kaklsp_release.release.exceptions import BuildFailed, TestFailed

TARGET = "x86_64-unknown-linux-musl"
TOOL = Path("/opt/bin/cross")


def _completed(returncode: int) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=returncode)


class TestToolCommand:
    def test_release_build(self) -> None:
        assert tool_command(TOOL, "build", TARGET) == [
            "/opt/bin/cross", "build", "--target", TARGET, "--release",
        ]

    def test_verbose_test(self) -> None:
        assert tool_command(TOOL, "test", TARGET, verbose=True) == [
            "/opt/bin/cross", "test", "--target", TARGET, "--release", "--verbose",
        ]

    def test_custom_profile(self) -> None:
        command = tool_command(TOOL, "build", TARGET, profile="dist")
        assert command[-2:] == ["--profile", "dist"]
        assert "--release" not in command


class TestBuildAndTest:
    def test_runs_build_then_test_in_project_dir(self, tmp_path: Path) -> None:
        with patch(
            "kaklsp_release.release.builder.subprocess.run", return_value=_completed(0)
        ) as run:
            build_and_test(TOOL, TARGET, tmp_path, ToolConfig())

        assert run.call_count == 2
        first, second = run.call_args_list
        assert first.args[0][1] == "build"
        assert second.args[0][1] == "test"
        assert first.kwargs["cwd"] == str(tmp_path)
        assert first.kwargs["timeout"] is None

    def test_verbose_flag_comes_from_config(self, tmp_path: Path) -> None:
        with patch(
            "kaklsp_release.release.builder.subprocess.run", return_value=_completed(0)
        ) as run:
            build_and_test(TOOL, TARGET, tmp_path, ToolConfig(verbose=True))

        for call in run.call_args_list:
            assert call.args[0][-1] == "--verbose"

    def test_build_failure_skips_tests(self, tmp_path: Path) -> None:
        with patch(
            "kaklsp_release.release.builder.subprocess.run", return_value=_completed(101)
        ) as run:
            with pytest.raises(BuildFailed) as excinfo:
                build_and_test(TOOL, TARGET, tmp_path, ToolConfig())

        assert run.call_count == 1
        assert excinfo.value.returncode == 101
        assert excinfo.value.exit_code == 101
        assert excinfo.value.stage == "build"

    def test_test_failure(self, tmp_path: Path) -> None:
        with patch(
            "kaklsp_release.release.builder.subprocess.run",
            side_effect=[_completed(0), _completed(2)],
        ):
            with pytest.raises(TestFailed) as excinfo:
                build_and_test(TOOL, TARGET, tmp_path, ToolConfig())

        assert excinfo.value.exit_code == 2
        assert excinfo.value.stage == "test"
        assert "exited with status 2" in str(excinfo.value)

    def test_skip_tests(self, tmp_path: Path) -> None:
        with patch(
            "kaklsp_release.release.builder.subprocess.run", return_value=_completed(0)
        ) as run:
            build_and_test(TOOL, TARGET, tmp_path, ToolConfig(), skip_tests=True)
        assert run.call_count == 1

    def test_build_timeout(self, tmp_path: Path) -> None:
        config = ToolConfig(build_timeout_seconds=5)
        with patch(
            "kaklsp_release.release.builder.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["cross"], 5),
        ) as run:
            with pytest.raises(BuildFailed, match="timed out after 5s") as excinfo:
                build_and_test(TOOL, TARGET, tmp_path, config)

        assert run.call_args.kwargs["timeout"] == 5
        assert excinfo.value.returncode is None
        assert excinfo.value.exit_code == RUNTIME_ERROR

    def test_missing_tool_binary(self, tmp_path: Path) -> None:
        with pytest.raises(BuildFailed, match="not found"):
            build_and_test(tmp_path / "no-such-cross", TARGET, tmp_path, ToolConfig())

    def test_signal_kill_keeps_generic_exit_code(self, tmp_path: Path) -> None:
        with patch(
            "kaklsp_release.release.builder.subprocess.run", return_value=_completed(-9)
        ):
            with pytest.raises(BuildFailed) as excinfo:
                build_and_test(TOOL, TARGET, tmp_path, ToolConfig())
        assert excinfo.value.returncode == -9
        assert excinfo.value.exit_code == RUNTIME_ERROR
