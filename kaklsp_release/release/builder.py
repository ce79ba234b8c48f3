# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build and test harness for the cross-compilation tool.

Runs `cross build` and then `cross test` for one target in the release
profile. Both calls block until the tool exits, and any non-zero status
stops the release before a single file is staged. Tool output is not
captured: compiles take minutes and the log should show them progressing.

Only the build tool itself is executed, with an argument list and never
through a shell.
"""

import logging
import subprocess
import time
from pathlib import Path
from typing import Optional

from kaklsp_release.config.schema import ToolConfig
from kaklsp_release.logging.logger import get_logger
from kaklsp_release.release.exceptions import BuildFailed, TestFailed

_logger: logging.Logger = get_logger(__name__)


def tool_command(
    tool_path: Path,
    subcommand: str,
    target: str,
    profile: str = "release",
    verbose: bool = False,
) -> list[str]:
    """Assemble `<tool> <subcommand> --target <triple> --release [--verbose]`."""
    command = [str(tool_path), subcommand, "--target", target]
    if profile == "release":
        command.append("--release")
    else:
        command.extend(["--profile", profile])
    if verbose:
        command.append("--verbose")
    return command


def _run_phase(
    command: list[str],
    project_dir: Path,
    timeout_seconds: Optional[int],
) -> tuple[Optional[int], float, str]:
    """Run one tool phase. Returns (returncode or None, elapsed, failure detail)."""
    start = time.monotonic()
    try:
        result = subprocess.run(
            command,
            cwd=str(project_dir),
            timeout=timeout_seconds,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return None, time.monotonic() - start, f"timed out after {timeout_seconds}s"
    except FileNotFoundError:
        return None, time.monotonic() - start, f"{command[0]} not found"
    return result.returncode, time.monotonic() - start, ""


def build(
    tool_path: Path,
    target: str,
    project_dir: Path,
    tool_config: ToolConfig,
    profile: str = "release",
) -> None:
    """Compile the project for target. Raises BuildFailed on any failure."""
    command = tool_command(tool_path, "build", target, profile, tool_config.verbose)
    _logger.info("Build started", extra={"target": target, "command": command})

    returncode, elapsed, detail = _run_phase(
        command, project_dir, tool_config.build_timeout_seconds
    )
    if returncode != 0:
        raise BuildFailed(target, returncode, detail)

    _logger.info(
        "Build finished",
        extra={"target": target, "elapsed_seconds": round(elapsed, 3)},
    )


def run_tests(
    tool_path: Path,
    target: str,
    project_dir: Path,
    tool_config: ToolConfig,
    profile: str = "release",
) -> None:
    """Run the test suite for target (under emulation where needed). Raises TestFailed."""
    command = tool_command(tool_path, "test", target, profile, tool_config.verbose)
    _logger.info("Tests started", extra={"target": target, "command": command})

    returncode, elapsed, detail = _run_phase(
        command, project_dir, tool_config.test_timeout_seconds
    )
    if returncode != 0:
        raise TestFailed(target, returncode, detail)

    _logger.info(
        "Tests finished",
        extra={"target": target, "elapsed_seconds": round(elapsed, 3)},
    )


def build_and_test(
    tool_path: Path,
    target: str,
    project_dir: Path,
    tool_config: ToolConfig,
    profile: str = "release",
    skip_tests: bool = False,
) -> None:
    """
    Build, then test. The test phase never runs after a failed build.

    Raises:
        BuildFailed: The build exited non-zero, timed out, or could not start.
        TestFailed: Same, for the test phase.
    """
    build(tool_path, target, project_dir, tool_config, profile)
    if skip_tests:
        _logger.warning("Skipping tests", extra={"target": target})
        return
    run_tests(tool_path, target, project_dir, tool_config, profile)
