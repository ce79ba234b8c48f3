# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Schema-level validation tests.

These focus on the pydantic models themselves: defaults, constraint
enforcement, and structural correctness.
"""

import pytest
from pydantic import ValidationError

from kaklsp_release.config.schema import (
    DEFAULT_HOST_TARGETS,
    ArtifactConfig,
    GlobalConfig,
    PackageConfig,
    ReleaseToolConfig,
    ToolConfig,
)


class TestGlobalConfigSchema:
    def test_defaults(self) -> None:
        config = GlobalConfig()
        assert config.config_version == "1.0.0"
        assert config.log_level == "INFO"
        assert config.log_file is None

    def test_log_level_is_normalised(self) -> None:
        assert GlobalConfig(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GlobalConfig(log_level="CHATTY")


class TestArtifactConfigSchema:
    def test_default_artifact_set(self) -> None:
        artifacts = ArtifactConfig()
        assert artifacts.binary == "kak-lsp"
        assert artifacts.source_files() == [
            "kak-lsp.toml", "README.asciidoc", "COPYING", "MIT", "UNLICENSE",
        ]

    def test_unknown_field_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ArtifactConfig(changelog="CHANGELOG.md")  # type: ignore[call-arg]

    def test_duplicate_license_name_is_rejected(self) -> None:
        with pytest.raises(ValidationError, match="MIT"):
            ArtifactConfig(license_files=["COPYING", "MIT", "docs/MIT"])

    def test_license_named_like_binary_is_rejected(self) -> None:
        with pytest.raises(ValidationError, match="kak-lsp"):
            ArtifactConfig(license_files=["COPYING", "kak-lsp"])

    def test_nested_paths_with_distinct_names_are_accepted(self) -> None:
        artifacts = ArtifactConfig(license_files=["licenses/MIT", "licenses/APACHE"])
        assert artifacts.source_files()[-2:] == ["licenses/MIT", "licenses/APACHE"]


class TestPackageConfigSchema:
    def test_default_host_table(self) -> None:
        assert PackageConfig().host_targets == DEFAULT_HOST_TARGETS

    def test_default_table_is_not_shared(self) -> None:
        package = PackageConfig()
        assert package.host_targets is not DEFAULT_HOST_TARGETS

    def test_empty_name_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PackageConfig(name="")


class TestToolConfigSchema:
    def test_defaults_match_ci_scripts(self) -> None:
        tool = ToolConfig()
        assert tool.name == "cross"
        assert tool.git_repository == "rust-embedded/cross"
        assert tool.installer_url == "https://japaric.github.io/trust/install.sh"
        assert tool.tag is None
        assert tool.verbose is False
        assert tool.build_timeout_seconds is None

    def test_repository_url(self) -> None:
        assert ToolConfig().repository_url == "https://github.com/rust-embedded/cross"

    def test_timeouts_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ToolConfig(build_timeout_seconds=0)
        with pytest.raises(ValidationError):
            ToolConfig(download_timeout_seconds=0)


class TestReleaseToolConfigSchema:
    def test_global_alias(self) -> None:
        config = ReleaseToolConfig.model_validate({"global": {"log_level": "WARNING"}})
        assert config.global_config.log_level == "WARNING"

    def test_unknown_section_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ReleaseToolConfig.model_validate({"publish": {}})

    def test_is_frozen(self) -> None:
        config = ReleaseToolConfig()
        with pytest.raises(ValidationError):
            config.tool = ToolConfig()  # type: ignore[misc]
