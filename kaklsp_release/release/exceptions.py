# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Error taxonomy for the release pipeline.

Every failure is fatal for the run. There is no retry: the caller re-runs
the whole pipeline. Each error carries the process exit code the CLI should
use, so stage-specific handling stays out of the command handlers.
"""

from typing import Optional

from kaklsp_release.cli.exit_codes import (
    RUNTIME_ERROR,
    TOOL_ERROR,
    USER_ERROR,
    VALIDATION_ERROR,
)


class ReleaseError(Exception):
    """Base for all pipeline failures."""

    stage: str = "release"
    exit_code: int = RUNTIME_ERROR


class UnsupportedPlatform(ReleaseError):
    """No target was given and the host OS has no default triple."""

    stage = "resolve_target"
    exit_code = USER_ERROR

    def __init__(self, host_os: str) -> None:
        super().__init__(f"Unknown target for host OS {host_os!r}; pass a target explicitly")
        self.host_os = host_os


class VersionResolutionError(ReleaseError):
    """git could not describe the working tree."""

    stage = "resolve_version"


class ToolUnavailable(ReleaseError):
    """The cross-compilation tool is missing and could not be installed."""

    stage = "ensure_tool"
    exit_code = TOOL_ERROR


class _PhaseFailed(ReleaseError):
    phase: str = ""

    def __init__(self, target: str, returncode: Optional[int], detail: str = "") -> None:
        if returncode is None:
            message = f"{self.phase} for {target} did not complete"
        else:
            message = f"{self.phase} for {target} exited with status {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.target = target
        self.returncode = returncode
        # Propagate the subprocess status when there is one.
        if returncode is not None and returncode > 0:
            self.exit_code = returncode


class BuildFailed(_PhaseFailed):
    stage = "build"
    phase = "build"


class TestFailed(_PhaseFailed):
    # Keep pytest from collecting this as a test class.
    __test__ = False

    stage = "test"
    phase = "test"


class MissingArtifact(ReleaseError):
    """A file from the fixed artifact list does not exist."""

    stage = "stage_artifacts"
    exit_code = VALIDATION_ERROR

    def __init__(self, path: str) -> None:
        super().__init__(f"Missing release artifact: {path}")
        self.path = path


class ArchiveWriteError(ReleaseError):
    """The tarball could not be written."""

    stage = "package_archive"


class StagingError(ReleaseError):
    """Artifacts exist but could not be staged."""

    stage = "stage_artifacts"
