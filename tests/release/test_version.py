# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for version resolution.

The git-backed tests build a throwaway repository in tmp_path and are
skipped when git isn't installed.
"""

import shutil
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from kaklsp_release.release.exceptions import VersionResolutionError
from kaklsp_release.release.version import describe_head, resolve_version

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(repo: Path, *args: str) -> None:
    subprocess.run(
        [
            "git",
            "-c", "user.name=Release Test",
            "-c", "user.email=release@example.com",
            "-c", "commit.gpgsign=false",
            "-c", "tag.gpgsign=false",
            *args,
        ],
        cwd=str(repo),
        check=True,
        capture_output=True,
    )


def _commit(repo: Path, message: str) -> None:
    with (repo / "history.txt").open("a", encoding="utf-8") as handle:
        handle.write(message + "\n")
    _git(repo, "add", "history.txt")
    _git(repo, "commit", "-q", "-m", message)


@pytest.fixture()
def git_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    _commit(repo, "initial")
    return repo


class TestExplicitVersion:
    def test_explicit_version_skips_git(self, tmp_path: Path) -> None:
        with patch("kaklsp_release.release.version.subprocess.run") as run:
            assert resolve_version(tmp_path, "v1.2.0") == "v1.2.0"
        run.assert_not_called()

    def test_blank_explicit_version_uses_git(self, tmp_path: Path) -> None:
        completed = subprocess.CompletedProcess(["git"], 0, stdout="1.2.0\n", stderr="")
        with patch("kaklsp_release.release.version.subprocess.run", return_value=completed):
            assert resolve_version(tmp_path, "  ") == "1.2.0"


@requires_git
class TestGitDescribe:
    def test_exact_tag(self, git_repo: Path) -> None:
        _git(git_repo, "tag", "1.2.0")
        assert resolve_version(git_repo) == "1.2.0"

    def test_commits_after_tag_get_suffix(self, git_repo: Path) -> None:
        _git(git_repo, "tag", "1.2.0")
        _commit(git_repo, "fix")
        _commit(git_repo, "another fix")

        version = resolve_version(git_repo)
        assert version.startswith("1.2.0-2-g")

    def test_no_tags_is_an_error(self, git_repo: Path) -> None:
        with pytest.raises(VersionResolutionError, match="git describe failed"):
            resolve_version(git_repo)

    def test_not_a_repository(self, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()
        with patch.dict("os.environ", {"GIT_CEILING_DIRECTORIES": str(tmp_path)}):
            with pytest.raises(VersionResolutionError):
                resolve_version(plain)


class TestGitFailures:
    def test_missing_git_executable(self, tmp_path: Path) -> None:
        with patch(
            "kaklsp_release.release.version.subprocess.run",
            side_effect=FileNotFoundError("git"),
        ):
            with pytest.raises(VersionResolutionError, match="git executable not found"):
                describe_head(tmp_path)

    def test_timeout(self, tmp_path: Path) -> None:
        with patch(
            "kaklsp_release.release.version.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["git"], 30),
        ):
            with pytest.raises(VersionResolutionError, match="timed out"):
                describe_head(tmp_path)

    def test_empty_output(self, tmp_path: Path) -> None:
        completed = subprocess.CompletedProcess(["git"], 0, stdout="\n", stderr="")
        with patch("kaklsp_release.release.version.subprocess.run", return_value=completed):
            with pytest.raises(VersionResolutionError, match="no output"):
                describe_head(tmp_path)

    def test_git_error_message_is_kept(self, tmp_path: Path) -> None:
        completed = subprocess.CompletedProcess(
            ["git"], 128, stdout="", stderr="fatal: No names found, cannot describe anything."
        )
        with patch("kaklsp_release.release.version.subprocess.run", return_value=completed):
            with pytest.raises(VersionResolutionError, match="No names found"):
                resolve_version(tmp_path)
