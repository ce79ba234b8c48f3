# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the kaklsp-release CLI.

Each function here corresponds to one CLI subcommand and returns the process
exit code. This is the only layer that reads os.environ or argparse results;
everything below receives an explicit ReleaseRequest.

No print() calls, except `target` and `version`, whose single line of
stdout is meant to be captured by shell scripts.
"""

import argparse
import logging
import os
from pathlib import Path
from typing import Optional

from kaklsp_release.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, USER_ERROR
from kaklsp_release.config.exceptions import ConfigError
from kaklsp_release.config.loader import load_config, read_ci_environment
from kaklsp_release.config.schema import ReleaseToolConfig
from kaklsp_release.logging.logger import get_logger
from kaklsp_release.release.exceptions import ReleaseError
from kaklsp_release.release.pipeline import ReleaseRequest, run_release
from kaklsp_release.release.target import resolve_target
from kaklsp_release.release.version import resolve_version
from kaklsp_release.runtime.bootstrap import bootstrap
from kaklsp_release.runtime.environment import get_system_info
from kaklsp_release.utils.paths import resolve_project_root


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
    default_log_level: Optional[str] = None,
) -> tuple[int, Optional[ReleaseToolConfig], logging.Logger]:
    """
    The shared setup that every command needs: load config, run bootstrap.

    Returns a tuple of (exit_code, config, logger). If exit_code is not SUCCESS,
    the caller should return it immediately.
    """
    log_level = args.log_level or default_log_level
    logger = get_logger(f"kaklsp_release.cli.{command_name}", log_level=log_level or "INFO")

    config_path = Path(args.config) if args.config is not None else None
    try:
        config = load_config(config_path)
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "error": str(err)},
        )
        return CONFIG_ERROR, None, logger

    bootstrap(config.global_config, log_level_override=log_level)
    return SUCCESS, config, logger


def _resolve_project_dir(args: argparse.Namespace, logger: logging.Logger) -> Optional[Path]:
    start = Path(args.project_dir) if args.project_dir is not None else None
    try:
        return resolve_project_root(start)
    except RuntimeError as err:
        logger.error("Project root not found", extra={"error": str(err)})
        return None


def _output_dir(args: argparse.Namespace) -> Path:
    if args.output_dir is not None:
        return Path(args.output_dir).resolve()
    return Path.cwd()


def _execute_release(
    request: ReleaseRequest,
    config: ReleaseToolConfig,
    logger: logging.Logger,
    command_name: str,
) -> int:
    """Run the pipeline and turn its outcome into an exit code."""
    try:
        result = run_release(request, config)
    except ReleaseError as err:
        logger.error(
            "Release failed",
            extra={"command": command_name, "stage": err.stage, "error": str(err)},
        )
        return err.exit_code
    except Exception as err:
        logger.error(
            "Runtime error",
            extra={"command": command_name, "error": str(err)},
            exc_info=True,
        )
        return RUNTIME_ERROR

    logger.info(
        "Command completed",
        extra={
            "command": command_name,
            "archive": str(result.archive_path),
            "dry_run": result.dry_run,
        },
    )
    return SUCCESS


def handle_package(args: argparse.Namespace) -> int:
    """Build, test and package a release for a positional (or host-default) target."""
    exit_code, config, logger = _load_and_bootstrap(args, "package")
    if exit_code != SUCCESS or config is None:
        return exit_code

    project_dir = _resolve_project_dir(args, logger)
    if project_dir is None:
        return USER_ERROR

    if args.no_install:
        config = config.model_copy(
            update={"tool": config.tool.model_copy(update={"auto_install": False})}
        )

    request = ReleaseRequest(
        project_dir=project_dir,
        output_dir=_output_dir(args),
        target=args.target,
        version=args.release_version,
        verbose=True if args.verbose else None,
        skip_tests=args.skip_tests,
        dry_run=args.dry_run,
    )
    return _execute_release(request, config, logger, "package")


def handle_ci(args: argparse.Namespace) -> int:
    """Same pipeline, with target, crate name and tag taken from the CI environment."""
    exit_code, config, logger = _load_and_bootstrap(args, "ci")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        ci_env = read_ci_environment(os.environ, tag_variable=args.tag_variable)
    except ConfigError as err:
        logger.error("CI environment incomplete", extra={"error": str(err)})
        return CONFIG_ERROR

    project_dir = _resolve_project_dir(args, logger)
    if project_dir is None:
        return USER_ERROR

    request = ReleaseRequest(
        project_dir=project_dir,
        output_dir=_output_dir(args),
        target=ci_env.target,
        version=ci_env.tag,
        name=ci_env.crate_name,
        verbose=True,
        dry_run=args.dry_run,
    )
    return _execute_release(request, config, logger, "ci")


def handle_target(args: argparse.Namespace) -> int:
    """Print the target triple a release would use."""
    exit_code, config, logger = _load_and_bootstrap(args, "target", default_log_level="WARNING")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        target = resolve_target(args.target, host_targets=config.package.host_targets)
    except ReleaseError as err:
        logger.error("Target resolution failed", extra={"error": str(err)})
        return err.exit_code

    print(target)
    return SUCCESS


def handle_version(args: argparse.Namespace) -> int:
    """Print the version label a release would use."""
    exit_code, config, logger = _load_and_bootstrap(args, "version", default_log_level="WARNING")
    if exit_code != SUCCESS or config is None:
        return exit_code

    project_dir = _resolve_project_dir(args, logger)
    if project_dir is None:
        return USER_ERROR

    try:
        version = resolve_version(project_dir)
    except ReleaseError as err:
        logger.error("Version resolution failed", extra={"error": str(err)})
        return err.exit_code

    print(version)
    return SUCCESS


def handle_info(args: argparse.Namespace) -> int:
    """Log host information and the effective configuration."""
    exit_code, config, logger = _load_and_bootstrap(args, "info")
    if exit_code != SUCCESS or config is None:
        return exit_code

    system_info = get_system_info()
    logger.info(
        "Environment info",
        extra={
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
            "hostname": system_info.hostname,
            "config_version": config.global_config.config_version,
        },
    )
    logger.info("Effective configuration", extra={"config": config.model_dump(by_alias=True)})
    return SUCCESS
