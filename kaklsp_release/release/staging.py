# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Artifact staging.

Every release run collects its files in its own fresh temporary directory,
so two runs on the same machine never see each other's files. The file list
is fixed: the compiled binary, the default config, the readme, and each
license file. A missing file is an error, never a silent skip.

The staging directory is deleted on every exit path. StagingContext is the
way to get one; stage_artifacts alone removes its directory only when
staging itself fails.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from types import TracebackType
from typing import Optional

from kaklsp_release.config.schema import PackageConfig
from kaklsp_release.logging.logger import get_logger
from kaklsp_release.release.exceptions import MissingArtifact, StagingError

_logger: logging.Logger = get_logger(__name__)

STAGING_PREFIX = "kaklsp_stage_"


def binary_path(project_dir: Path, target: str, package: PackageConfig) -> Path:
    """Where cross leaves the compiled binary: <target_dir>/<triple>/<profile>/<binary>."""
    return (
        project_dir
        / package.target_directory
        / target
        / package.profile
        / package.artifacts.binary
    )


def artifact_sources(project_dir: Path, target: str, package: PackageConfig) -> list[Path]:
    """The full source list in staging order: binary first, then the project files."""
    sources = [binary_path(project_dir, target, package)]
    sources.extend(project_dir / name for name in package.artifacts.source_files())
    return sources


def stage_artifacts(
    project_dir: Path,
    target: str,
    package: PackageConfig,
    base_dir: Optional[Path] = None,
) -> Path:
    """
    Create a staging directory and copy the release artifacts into it.

    Returns:
        The staging directory, holding one file per artifact.

    Raises:
        MissingArtifact: A source file does not exist. The staging
            directory has already been removed when this propagates.
        StagingError: Two artifacts share a file name, or a copy failed.
    """
    staging_dir = Path(
        tempfile.mkdtemp(
            prefix=STAGING_PREFIX,
            dir=str(base_dir) if base_dir else None,
        )
    )

    try:
        for source in artifact_sources(project_dir, target, package):
            if not source.is_file():
                raise MissingArtifact(str(source))
            destination = staging_dir / source.name
            if destination.exists():
                raise StagingError(
                    f"Artifact {source} would overwrite staged file {source.name}"
                )
            try:
                shutil.copy2(str(source), str(destination))
            except OSError as err:
                raise StagingError(f"Cannot stage artifact {source}: {err}") from err
            _logger.debug("Staged artifact", extra={"source": str(source)})

        _logger.info(
            "Artifacts staged",
            extra={
                "staging_dir": str(staging_dir),
                "file_count": len(list(staging_dir.iterdir())),
            },
        )
        return staging_dir

    except BaseException:
        shutil.rmtree(staging_dir, ignore_errors=True)
        _logger.warning(
            "Removed partial staging directory after failure",
            extra={"staging_dir": str(staging_dir)},
        )
        raise


def cleanup_staging(staging_dir: Path) -> None:
    """Remove a staging directory and everything inside it."""
    if staging_dir.is_dir():
        shutil.rmtree(staging_dir, ignore_errors=True)
        _logger.debug("Staging directory removed", extra={"staging_dir": str(staging_dir)})


class StagingContext:
    """
    Context manager that stages artifacts on enter and deletes them on exit.

    Usage:
        with StagingContext(project_dir, target, package) as staging_dir:
            package_archive(staging_dir, ...)
        # directory is gone here, whether packaging worked or not
    """

    def __init__(
        self,
        project_dir: Path,
        target: str,
        package: PackageConfig,
        base_dir: Optional[Path] = None,
    ) -> None:
        self._project_dir = project_dir
        self._target = target
        self._package = package
        self._base_dir = base_dir
        self._staging_dir: Optional[Path] = None

    def __enter__(self) -> Path:
        self._staging_dir = stage_artifacts(
            self._project_dir, self._target, self._package, self._base_dir,
        )
        return self._staging_dir

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        if self._staging_dir is not None:
            cleanup_staging(self._staging_dir)
            self._staging_dir = None
