# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities.

The release is always built from a Cargo project root, the directory that
holds Cargo.toml. Commands may be started from any subdirectory.
"""

from pathlib import Path
from typing import Optional

PROJECT_MARKER = "Cargo.toml"


def resolve_project_root(start: Optional[Path] = None) -> Path:
    """
    Walk up from start (default: the working directory) to the Cargo project root.

    Returns:
        Absolute path of the first ancestor containing Cargo.toml.

    Raises:
        RuntimeError: If no Cargo.toml is found in any ancestor directory.
    """
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / PROJECT_MARKER).is_file():
            return candidate
    raise RuntimeError(
        f"Cannot find project root. No {PROJECT_MARKER} found in {current} or any parent directory."
    )
