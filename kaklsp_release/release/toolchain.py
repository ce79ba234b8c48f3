# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Cross-compilation tool bootstrap.

The pipeline only needs something that answers "where is the tool?". That
is the ToolProvider protocol. CrossToolProvider is the real one: it finds
`cross` on PATH or in ~/.cargo/bin, and when it's missing it downloads the
trust installer script and runs it for the requested target.

Finding the tool never touches the network. Only installation does, which
keeps offline re-runs fast once the tool is present.
"""

import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Protocol

import requests

from kaklsp_release.config.schema import ToolConfig
from kaklsp_release.logging.logger import get_logger
from kaklsp_release.release.exceptions import ToolUnavailable

_logger: logging.Logger = get_logger(__name__)

_STABLE_TAG = re.compile(r"^v[0-9.]+$")
_LS_REMOTE_TIMEOUT_SECONDS = 60
_INSTALL_TIMEOUT_SECONDS = 600


class ToolProvider(Protocol):
    """Anything that can hand the pipeline a runnable build tool."""

    def ensure_installed(self) -> Path:
        """Return the tool executable, installing it first if needed."""
        ...


def _version_key(tag: str) -> tuple[int, ...]:
    return tuple(int(part) for part in tag.lstrip("v").split(".") if part)


def select_latest_tag(ls_remote_output: str) -> Optional[str]:
    """
    Pick the newest stable tag from `git ls-remote --tags --refs` output.

    Lines look like "<sha>\\trefs/tags/v0.2.1". Pre-release tags such as
    v0.2.0-alpha are skipped, and the rest are sorted numerically so that
    v0.10.0 beats v0.9.9.
    """
    tags: list[str] = []
    for line in ls_remote_output.splitlines():
        ref = line.split("\t")[-1].strip()
        name = ref.rsplit("/", maxsplit=1)[-1]
        if _STABLE_TAG.match(name):
            tags.append(name)
    if not tags:
        return None
    return sorted(tags, key=_version_key)[-1]


class CrossToolProvider:
    """Locates `cross`, installing it through the trust script if absent."""

    def __init__(self, config: ToolConfig, target: str) -> None:
        self._config = config
        self._target = target

    @property
    def install_dir(self) -> Path:
        return Path(self._config.install_dir).expanduser()

    def find_tool(self) -> Optional[Path]:
        """Look on PATH, then in the install directory."""
        found = shutil.which(self._config.name)
        if found is not None:
            return Path(found)
        candidate = shutil.which(self._config.name, path=str(self.install_dir))
        if candidate is not None:
            return Path(candidate)
        return None

    def ensure_installed(self) -> Path:
        tool_path = self.find_tool()
        if tool_path is not None:
            _logger.info("Build tool found", extra={"tool": str(tool_path)})
            return tool_path

        if not self._config.auto_install:
            raise ToolUnavailable(
                f"{self._config.name} not found on PATH or in {self.install_dir} "
                f"and automatic installation is disabled"
            )

        tag = self._config.tag or self.latest_tag()
        self.install(tag)

        tool_path = self.find_tool()
        if tool_path is None:
            raise ToolUnavailable(
                f"{self._config.name} {tag} was installed but is not in {self.install_dir}"
            )
        _logger.info("Build tool installed", extra={"tool": str(tool_path), "tag": tag})
        return tool_path

    def latest_tag(self) -> str:
        """Ask the tool's git repository for its newest stable release tag."""
        url = self._config.repository_url
        try:
            result = subprocess.run(
                ["git", "ls-remote", "--tags", "--refs", "--exit-code", url],
                capture_output=True,
                text=True,
                timeout=_LS_REMOTE_TIMEOUT_SECONDS,
                check=True,
            )
        except FileNotFoundError as err:
            raise ToolUnavailable("git executable not found") from err
        except subprocess.CalledProcessError as err:
            raise ToolUnavailable(
                f"Cannot list tags of {url}: {err.stderr.strip()}"
            ) from err
        except subprocess.TimeoutExpired as err:
            raise ToolUnavailable(f"Listing tags of {url} timed out") from err

        tag = select_latest_tag(result.stdout)
        if tag is None:
            raise ToolUnavailable(f"No stable release tags found at {url}")
        _logger.info("Selected latest tool release", extra={"repository": url, "tag": tag})
        return tag

    def fetch_installer(self) -> str:
        """Download the installer script."""
        url = self._config.installer_url
        try:
            response = requests.get(url, timeout=self._config.download_timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as err:
            raise ToolUnavailable(f"Cannot download installer from {url}: {err}") from err
        return response.text

    def install(self, tag: str) -> None:
        """Run the installer script for the configured tool, tag and target."""
        script = self.fetch_installer()
        command = [
            "sh",
            "-s",
            "--",
            "--force",
            "--git",
            self._config.git_repository,
            "--tag",
            tag,
            "--target",
            self._target,
        ]
        _logger.info(
            "Installing build tool",
            extra={"tool": self._config.name, "tag": tag, "target": self._target},
        )
        try:
            subprocess.run(
                command,
                input=script,
                capture_output=True,
                text=True,
                timeout=_INSTALL_TIMEOUT_SECONDS,
                check=True,
            )
        except FileNotFoundError as err:
            raise ToolUnavailable("sh not found, cannot run the installer") from err
        except subprocess.CalledProcessError as err:
            raise ToolUnavailable(
                f"Installer for {self._config.name} {tag} failed with status "
                f"{err.returncode}: {err.stderr.strip()}"
            ) from err
        except subprocess.TimeoutExpired as err:
            raise ToolUnavailable(
                f"Installer for {self._config.name} timed out after {_INSTALL_TIMEOUT_SECONDS}s"
            ) from err
