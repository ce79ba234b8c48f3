# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader: reads YAML from disk and produces a validated, frozen
ReleaseToolConfig.

The loading pipeline is deliberately simple and linear:
  1. Read raw bytes from the file
  2. Parse as YAML into a plain dict
  3. Hand the dict to pydantic for schema validation
  4. Return the frozen, immutable config object

If anything goes wrong at any step, we fail immediately with a clear error.

Environment variables are only read by `read_ci_environment`, which the CLI
calls at the outermost boundary. Nothing below the CLI looks at os.environ
for release parameters.
"""

from pathlib import Path
from typing import Any, Mapping, NamedTuple, Optional

import yaml
from pydantic import ValidationError

from kaklsp_release.config.exceptions import (
    ConfigLoadError,
    ConfigValidationError,
    EnvironmentConfigError,
)
from kaklsp_release.config.schema import ReleaseToolConfig

DEFAULT_TAG_VARIABLE = "TRAVIS_TAG"


class CiEnvironment(NamedTuple):
    """Release parameters taken from a CI job's environment."""

    target: str
    crate_name: Optional[str]
    tag: str


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed dict.

    An empty file is treated as an empty mapping (all defaults).

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't valid YAML.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


def load_config(config_path: Optional[Path] = None) -> ReleaseToolConfig:
    """
    Load, validate, and freeze a config file into a ReleaseToolConfig.

    With no path, returns the built-in defaults.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations (wrong types, unknown keys).
    """
    if config_path is None:
        return ReleaseToolConfig()

    raw_data = _read_yaml_file(config_path)

    try:
        config = ReleaseToolConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(
            f"Config validation failed for {config_path}:\n{err}"
        ) from err

    return config


def _non_empty(environ: Mapping[str, str], key: str) -> Optional[str]:
    value = environ.get(key, "").strip()
    return value or None


def read_ci_environment(
    environ: Mapping[str, str],
    tag_variable: str = DEFAULT_TAG_VARIABLE,
) -> CiEnvironment:
    """
    Pull the release parameters a CI job exports.

    TARGET and the tag variable are required; CRATE_NAME is optional and
    falls back to the configured package name.

    Raises:
        EnvironmentConfigError: If a required variable is unset or empty.
    """
    target = _non_empty(environ, "TARGET")
    if target is None:
        raise EnvironmentConfigError("TARGET environment variable is not set")

    tag = _non_empty(environ, tag_variable)
    if tag is None:
        raise EnvironmentConfigError(f"{tag_variable} environment variable is not set")

    return CiEnvironment(
        target=target,
        crate_name=_non_empty(environ, "CRATE_NAME"),
        tag=tag,
    )
