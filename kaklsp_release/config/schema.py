# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for the release packager.

Every config section gets its own frozen pydantic model. Frozen means once you
create it, you cannot mutate it. A release run reads its settings once and
never changes them halfway through.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

Every field has a default, so `ReleaseToolConfig()` describes a stock kak-lsp
release and a YAML file only needs to list what differs.
"""

from pathlib import PurePosixPath
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_HOST_TARGETS: dict[str, str] = {
    "Linux": "x86_64-unknown-linux-musl",
    "Darwin": "x86_64-apple-darwin",
}


class GlobalConfig(BaseModel):
    """Cross-cutting settings: schema version and observability."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        default="1.0.0",
        description="Schema version for compatibility tracking, e.g. '1.0.0'",
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return upper


class ArtifactConfig(BaseModel):
    """
    The fixed list of files that go into every release archive.

    Paths other than the binary are relative to the project root. The binary
    path is computed from the target triple and build profile.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    binary: str = Field(default="kak-lsp", description="Name of the compiled executable")
    config_file: str = Field(default="kak-lsp.toml", description="Default configuration file")
    readme: str = Field(default="README.asciidoc", description="Readme shipped with the binary")
    license_files: list[str] = Field(
        default_factory=lambda: ["COPYING", "MIT", "UNLICENSE"],
        description="License files, an explicit list rather than a glob",
    )

    def source_files(self) -> list[str]:
        """Project-relative files copied next to the binary, in staging order."""
        return [self.config_file, self.readme, *self.license_files]

    @model_validator(mode="after")
    def _check_unique_names(self) -> "ArtifactConfig":
        # Every artifact lands at the archive root under its base name.
        seen: set[str] = set()
        for path in [self.binary, *self.source_files()]:
            name = PurePosixPath(path).name
            if name in seen:
                raise ValueError(f"artifact file name {name!r} is listed more than once")
            seen.add(name)
        return self


class PackageConfig(BaseModel):
    """What gets built and how the resulting archive is named."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    name: str = Field(
        default="kak-lsp",
        min_length=1,
        description="Archive name prefix: <name>-<version>-<target>.tar.gz",
    )
    target_directory: str = Field(
        default="target",
        description="Cargo target directory, relative to the project root",
    )
    profile: str = Field(
        default="release",
        description="Build profile directory the binary lands in",
    )
    host_targets: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_HOST_TARGETS),
        description="Host OS name (platform.system()) to default target triple",
    )
    artifacts: ArtifactConfig = Field(default_factory=ArtifactConfig)


class ToolConfig(BaseModel):
    """
    The external cross-compilation tool and how to bootstrap it.

    By default this is `cross`, installed through the trust installer script
    the same way the CI scripts always did.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    name: str = Field(default="cross", description="Executable name of the tool")
    git_repository: str = Field(
        default="rust-embedded/cross",
        description="GitHub owner/repo the tool is released from",
    )
    tag: Optional[str] = Field(
        default=None,
        description="Pinned tool release tag; None means the latest stable tag",
    )
    installer_url: str = Field(
        default="https://japaric.github.io/trust/install.sh",
        description="Installer script fetched when the tool is missing",
    )
    install_dir: str = Field(
        default="~/.cargo/bin",
        description="Where the installer drops the executable",
    )
    auto_install: bool = Field(
        default=True,
        description="Bootstrap the tool from the network when it is not found",
    )
    verbose: bool = Field(default=False, description="Pass --verbose to build and test")
    build_timeout_seconds: Optional[int] = Field(
        default=None,
        ge=1,
        description="Kill the build after this many seconds (no limit when unset)",
    )
    test_timeout_seconds: Optional[int] = Field(
        default=None,
        ge=1,
        description="Kill the test run after this many seconds (no limit when unset)",
    )
    download_timeout_seconds: int = Field(
        default=30,
        ge=1,
        le=600,
        description="HTTP timeout for fetching the installer script",
    )

    @property
    def repository_url(self) -> str:
        return f"https://github.com/{self.git_repository}"


class ReleaseToolConfig(BaseModel):
    """
    Top-level config container.

    A YAML file might contain just `package:` to rename the archive, or just
    `tool:` to pin a cross version. Missing sections fall back to defaults.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", validate_default=True, populate_by_name=True
    )

    global_config: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    package: PackageConfig = Field(default_factory=PackageConfig)
    tool: ToolConfig = Field(default_factory=ToolConfig)
