# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release archive writer.

Turns a staging directory into `<name>-<version>-<target>.tar.gz`. Every
staged file becomes a top-level member. The archive is written to a
temporary file beside its final location and renamed into place, so an
interrupted run never leaves a half-written tarball with a release name.
"""

import logging
import tarfile
import tempfile
from pathlib import Path
from typing import Optional

from kaklsp_release.logging.logger import get_logger
from kaklsp_release.release.exceptions import ArchiveWriteError

_logger: logging.Logger = get_logger(__name__)

ARCHIVE_SUFFIX = ".tar.gz"


def archive_name(name: str, version: str, target: str) -> str:
    """Compose the archive file name. Version and target keep platforms apart."""
    return f"{name}-{version}-{target}{ARCHIVE_SUFFIX}"


def _staged_files(staging_dir: Path) -> list[Path]:
    return sorted(path for path in staging_dir.iterdir() if path.is_file())


def package_archive(
    staging_dir: Path,
    name: str,
    version: str,
    target: str,
    output_dir: Path,
) -> Path:
    """
    Write the gzip-compressed tarball of a staging directory.

    An existing archive with the same name is replaced.

    Returns:
        Path of the written archive inside output_dir.

    Raises:
        ArchiveWriteError: The staging directory is unreadable or the
            archive cannot be written.
    """
    archive_path = output_dir / archive_name(name, version, target)

    try:
        files = _staged_files(staging_dir)
    except OSError as err:
        raise ArchiveWriteError(f"Cannot read staging directory {staging_dir}: {err}") from err

    temp_path: Optional[Path] = None
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=str(output_dir),
            prefix=".kaklsp_tmp_",
            suffix=ARCHIVE_SUFFIX,
            delete=False,
        ) as handle:
            temp_path = Path(handle.name)
            with tarfile.open(fileobj=handle, mode="w:gz") as tar:
                for file_path in files:
                    tar.add(str(file_path), arcname=file_path.name, recursive=False)
        # mkstemp files are 0600; releases get uploaded, so make it world-readable.
        temp_path.chmod(0o644)
        temp_path.replace(archive_path)
    except (OSError, tarfile.TarError) as err:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()
        raise ArchiveWriteError(f"Cannot write archive {archive_path}: {err}") from err

    _logger.info(
        "Archive written",
        extra={"archive": str(archive_path), "members": [f.name for f in files]},
    )
    return archive_path


def list_archive_members(archive_path: Path) -> list[str]:
    """Sorted member names of a release archive."""
    try:
        with tarfile.open(str(archive_path), mode="r:gz") as tar:
            return sorted(tar.getnames())
    except (OSError, tarfile.TarError) as err:
        raise ArchiveWriteError(f"Cannot read archive {archive_path}: {err}") from err
