# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release version resolution from git tags.

`git describe --tags` yields the nearest tag, with a `-<distance>-g<hash>`
suffix when HEAD is past it. That string becomes part of the archive name,
so failing to compute it stops the release.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from kaklsp_release.logging.logger import get_logger
from kaklsp_release.release.exceptions import VersionResolutionError

_logger: logging.Logger = get_logger(__name__)

_GIT_TIMEOUT_SECONDS = 30


def describe_head(project_dir: Path) -> str:
    """Run `git describe --tags` in project_dir and return its output."""
    try:
        result = subprocess.run(
            ["git", "describe", "--tags"],
            capture_output=True,
            text=True,
            timeout=_GIT_TIMEOUT_SECONDS,
            cwd=str(project_dir),
            check=False,
        )
    except FileNotFoundError as err:
        raise VersionResolutionError("git executable not found") from err
    except subprocess.TimeoutExpired as err:
        raise VersionResolutionError(
            f"git describe timed out after {_GIT_TIMEOUT_SECONDS}s"
        ) from err
    except OSError as err:
        raise VersionResolutionError(f"Cannot run git in {project_dir}: {err}") from err

    if result.returncode != 0:
        raise VersionResolutionError(
            f"git describe failed in {project_dir}: {result.stderr.strip() or 'no tags found'}"
        )

    description = result.stdout.strip()
    if not description:
        raise VersionResolutionError(f"git describe produced no output in {project_dir}")
    return description


def resolve_version(project_dir: Path, explicit_version: Optional[str] = None) -> str:
    """
    Return the version label for the release archive.

    An explicit version (typically a CI release tag) is used as-is;
    otherwise the working tree is described with git.

    Raises:
        VersionResolutionError: git is missing, the directory is not a
            repository, or there are no tags.
    """
    if explicit_version is not None and explicit_version.strip():
        version = explicit_version.strip()
        _logger.debug("Using explicit version", extra={"version": version})
        return version

    version = describe_head(project_dir)
    _logger.info("Resolved version from git", extra={"version": version})
    return version
