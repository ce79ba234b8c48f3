# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for the release packager tests.

Fixtures here are available to every test file automatically.
We keep them minimal: a fake Cargo project on disk, a fake build tool,
and a config file or two.
"""

import stat
import textwrap
from pathlib import Path
from typing import Callable

import pytest

LINUX_TARGET = "x86_64-unknown-linux-musl"
PROJECT_FILES = ("kak-lsp.toml", "README.asciidoc", "COPYING", "MIT", "UNLICENSE")


class FakeToolProvider:
    """ToolProvider that hands back a fixed path and counts calls."""

    def __init__(self, tool_path: Path) -> None:
        self.tool_path = tool_path
        self.calls = 0

    def ensure_installed(self) -> Path:
        self.calls += 1
        return self.tool_path


@pytest.fixture()
def fake_provider() -> Callable[[Path], FakeToolProvider]:
    """Factory for FakeToolProvider (test modules can't import conftest directly)."""
    return FakeToolProvider


@pytest.fixture()
def cargo_project(tmp_path: Path) -> Path:
    """A Cargo project root holding every non-binary release artifact."""
    project = tmp_path / "kak-lsp"
    project.mkdir()
    (project / "Cargo.toml").write_text(
        '[package]\nname = "kak-lsp"\nversion = "1.2.0"\n', encoding="utf-8"
    )
    for name in PROJECT_FILES:
        (project / name).write_text(f"contents of {name}\n", encoding="utf-8")
    return project


@pytest.fixture()
def built_project(cargo_project: Path) -> Path:
    """cargo_project plus a compiled binary for the Linux musl target."""
    binary = cargo_project / "target" / LINUX_TARGET / "release" / "kak-lsp"
    binary.parent.mkdir(parents=True)
    binary.write_bytes(b"\x7fELF fake binary")
    return cargo_project


@pytest.fixture()
def make_fake_tool(tmp_path: Path) -> Callable[..., Path]:
    """
    Factory for a shell script that behaves like `cross`.

    `build` writes target/<triple>/release/kak-lsp in the cwd, `test` does
    nothing. Each call is appended to calls.log next to the script. The
    exit status of each phase is configurable.
    """

    def _make(build_status: int = 0, test_status: int = 0) -> Path:
        tool_dir = tmp_path / "toolbin"
        tool_dir.mkdir(exist_ok=True)
        script = tool_dir / "cross"
        script.write_text(
            textwrap.dedent(f"""\
                #!/bin/sh
                echo "$*" >> "{tool_dir}/calls.log"
                if [ "$1" = "build" ]; then
                    if [ {build_status} -ne 0 ]; then
                        exit {build_status}
                    fi
                    mkdir -p "target/$3/release"
                    printf 'fake binary' > "target/$3/release/kak-lsp"
                    exit 0
                fi
                exit {test_status}
            """),
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """A small valid config that overrides a couple of defaults."""
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          log_level: "DEBUG"
        package:
          name: "kak-lsp-test"
        tool:
          auto_install: false
    """)
    config_file = tmp_path / "release.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """Valid YAML that fails schema validation (unknown key)."""
    config_file = tmp_path / "invalid.yaml"
    config_file.write_text("package:\n  nmae: typo\n", encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
