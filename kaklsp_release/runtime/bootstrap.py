# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap.

The one-time setup every CLI command goes through before doing real work:
  1. Validate the interpreter version
  2. Apply the configured log level (and log file) to all package loggers
  3. Log a startup record with host information

A --log-level given on the command line beats the config file's level.
"""

from pathlib import Path
from typing import Optional

from kaklsp_release.config.schema import GlobalConfig
from kaklsp_release.logging.logger import configure_logging, get_logger
from kaklsp_release.runtime.environment import check_minimum_python, get_system_info


def bootstrap(config: GlobalConfig, log_level_override: Optional[str] = None) -> None:
    """
    Put the process into a known state before a command runs.

    Args:
        config: The validated global configuration.
        log_level_override: Level from the command line, if given.
    """
    check_minimum_python()

    level = log_level_override or config.log_level
    log_file = Path(config.log_file) if config.log_file is not None else None

    logger = get_logger("kaklsp_release.runtime", log_level=level)
    configure_logging(level, log_file)

    system_info = get_system_info()
    logger.debug(
        "Bootstrap complete",
        extra={
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
        },
    )
