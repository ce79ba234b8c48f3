# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
End-to-end release pipeline.

    resolve_target -> resolve_version -> ensure tool -> build and test
        -> stage artifacts -> write archive -> remove staging directory

The run is linear and fail-fast. The first error stops everything after it,
no archive is written, and the staging directory (if one was made) is
removed before the error reaches the caller.

All inputs arrive in a ReleaseRequest. The pipeline never reads environment
variables or CLI arguments itself.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from kaklsp_release.config.schema import ReleaseToolConfig
from kaklsp_release.logging.logger import get_logger
from kaklsp_release.release.archive import archive_name, list_archive_members, package_archive
from kaklsp_release.release.builder import build_and_test
from kaklsp_release.release.staging import StagingContext, artifact_sources
from kaklsp_release.release.target import resolve_target
from kaklsp_release.release.toolchain import CrossToolProvider, ToolProvider
from kaklsp_release.release.version import resolve_version
from kaklsp_release.utils.hashing import compute_sha256

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class ReleaseRequest:
    """Everything one release run needs to know besides the config file."""

    project_dir: Path
    output_dir: Path
    target: Optional[str] = None
    version: Optional[str] = None
    name: Optional[str] = None
    verbose: Optional[bool] = None
    skip_tests: bool = False
    dry_run: bool = False


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of a release run."""

    name: str
    version: str
    target: str
    archive_path: Path
    members: list[str]
    sha256: Optional[str]
    dry_run: bool = False


def run_release(
    request: ReleaseRequest,
    config: ReleaseToolConfig,
    tool_provider: Optional[ToolProvider] = None,
    host_os: Optional[str] = None,
) -> ReleaseResult:
    """
    Build, test, and package one release archive.

    Args:
        request: Paths and per-run overrides.
        config: Validated tool configuration.
        tool_provider: Supplies the build tool; defaults to CrossToolProvider.
        host_os: Host OS override for target detection (tests).

    Returns:
        ReleaseResult describing the written (or, for a dry run, planned) archive.

    Raises:
        ReleaseError: Any stage failure, see kaklsp_release.release.exceptions.
    """
    package = config.package
    tool_config = config.tool
    if request.verbose is not None:
        tool_config = tool_config.model_copy(update={"verbose": request.verbose})

    name = request.name or package.name
    target = resolve_target(request.target, host_os, package.host_targets)
    version = resolve_version(request.project_dir, request.version)
    archive_path = request.output_dir / archive_name(name, version, target)

    _logger.info(
        "Release started",
        extra={
            "package_name": name,
            "version": version,
            "target": target,
            "archive": str(archive_path),
            "dry_run": request.dry_run,
        },
    )

    if request.dry_run:
        planned = sorted(p.name for p in artifact_sources(request.project_dir, target, package))
        _logger.info("Dry run, nothing built or written", extra={"members": planned})
        return ReleaseResult(
            name=name,
            version=version,
            target=target,
            archive_path=archive_path,
            members=planned,
            sha256=None,
            dry_run=True,
        )

    provider = tool_provider or CrossToolProvider(tool_config, target)
    tool_path = provider.ensure_installed()

    build_and_test(
        tool_path,
        target,
        request.project_dir,
        tool_config,
        profile=package.profile,
        skip_tests=request.skip_tests,
    )

    with StagingContext(request.project_dir, target, package) as staging_dir:
        written = package_archive(staging_dir, name, version, target, request.output_dir)

    members = list_archive_members(written)
    digest = compute_sha256(written)

    _logger.info(
        "Release complete",
        extra={
            "archive": str(written),
            "members": members,
            "sha256": digest,
        },
    )

    return ReleaseResult(
        name=name,
        version=version,
        target=target,
        archive_path=written,
        members=members,
        sha256=digest,
    )
