# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Target triple resolution.

An explicit triple always wins. Without one, the host OS picks a default
from a static table; unknown hosts fail fast instead of guessing.
"""

import logging
from typing import Mapping, Optional

from kaklsp_release.config.schema import DEFAULT_HOST_TARGETS
from kaklsp_release.logging.logger import get_logger
from kaklsp_release.release.exceptions import UnsupportedPlatform
from kaklsp_release.runtime.environment import detect_host_os

_logger: logging.Logger = get_logger(__name__)


def resolve_target(
    explicit_target: Optional[str] = None,
    host_os: Optional[str] = None,
    host_targets: Mapping[str, str] = DEFAULT_HOST_TARGETS,
) -> str:
    """
    Pick the target triple for this release.

    Args:
        explicit_target: Triple supplied by the caller, used verbatim.
        host_os: Host OS name; detected with platform.system() when omitted.
        host_targets: Host OS name to triple table.

    Returns:
        The target triple.

    Raises:
        UnsupportedPlatform: No explicit target and the host is not in the table.
    """
    if explicit_target is not None and explicit_target.strip():
        target = explicit_target.strip()
        _logger.debug("Using explicit target", extra={"target": target})
        return target

    detected = host_os if host_os is not None else detect_host_os()
    target = host_targets.get(detected)
    if target is None:
        raise UnsupportedPlatform(detected)

    _logger.info("Resolved target from host", extra={"host_os": detected, "target": target})
    return target
