# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for kaklsp-release.

Every operation is a subcommand of `kaklsp-release`. The global options
(--config, --log-level, --dry-run) are inherited by every subcommand through
argparse's parent parser mechanism.

Usage:
    kaklsp-release package                       # host-default target
    kaklsp-release package aarch64-unknown-linux-musl --version 1.2.0
    TARGET=... CRATE_NAME=kak-lsp TRAVIS_TAG=v1.2.0 kaklsp-release ci
    kaklsp-release target
"""

import argparse
import sys

from kaklsp_release.cli.commands import (
    handle_ci,
    handle_info,
    handle_package,
    handle_target,
    handle_version,
)
from kaklsp_release.cli.exit_codes import USER_ERROR
from kaklsp_release.config.loader import DEFAULT_TAG_VARIABLE


def _build_global_parser(for_subcommand: bool = False) -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    add_help=False so help text doesn't collide between the parent and the
    subcommand parsers.

    The subcommand copy suppresses its defaults. Otherwise a global option
    given before the subcommand would be reset by the subparser.
    """

    def _default(value: object) -> object:
        return argparse.SUPPRESS if for_subcommand else value

    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=_default(None),
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=_default(None),
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides the config file).",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=_default(False),
        dest="dry_run",
        help="Resolve target, version and archive name without building anything.",
    )
    return parent


def _add_location_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--project-dir",
        type=str,
        default=None,
        dest="project_dir",
        help="Cargo project to release (default: nearest Cargo.toml above the cwd).",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        dest="output_dir",
        help="Directory the archive is written to (default: the cwd).",
    )


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """Register all subcommands with their handler functions."""
    package = subparsers.add_parser(
        "package", parents=[parent], help="Build, test and package a release archive."
    )
    package.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Target triple (default: picked from the host OS).",
    )
    package.add_argument(
        "--version",
        type=str,
        default=None,
        dest="release_version",
        help="Version label (default: git describe --tags).",
    )
    package.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Pass --verbose to the build tool.",
    )
    package.add_argument(
        "--no-install",
        action="store_true",
        default=False,
        dest="no_install",
        help="Fail instead of installing the build tool when it is missing.",
    )
    package.add_argument(
        "--skip-tests",
        action="store_true",
        default=False,
        dest="skip_tests",
        help="Build and package without running the test suite.",
    )
    _add_location_options(package)
    package.set_defaults(func=handle_package)

    ci = subparsers.add_parser(
        "ci",
        parents=[parent],
        help="Package a release from TARGET, CRATE_NAME and the release tag variable.",
    )
    ci.add_argument(
        "--tag-variable",
        type=str,
        default=DEFAULT_TAG_VARIABLE,
        dest="tag_variable",
        help=f"Environment variable holding the release tag (default: {DEFAULT_TAG_VARIABLE}).",
    )
    _add_location_options(ci)
    ci.set_defaults(func=handle_ci)

    target = subparsers.add_parser(
        "target", parents=[parent], help="Print the resolved target triple."
    )
    target.add_argument("target", nargs="?", default=None, help="Explicit target triple.")
    target.set_defaults(func=handle_target)

    version = subparsers.add_parser(
        "version", parents=[parent], help="Print the resolved release version."
    )
    version.add_argument(
        "--project-dir",
        type=str,
        default=None,
        dest="project_dir",
        help="Cargo project to describe (default: nearest Cargo.toml above the cwd).",
    )
    version.set_defaults(func=handle_version)

    info = subparsers.add_parser(
        "info", parents=[parent], help="Display environment and config info."
    )
    info.set_defaults(func=handle_info)


def main() -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    If no subcommand is given, we show help and exit with USER_ERROR.
    """
    root_parser = argparse.ArgumentParser(
        prog="kaklsp-release",
        description="Cross-compile, test and package kak-lsp release archives.",
        parents=[_build_global_parser()],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, _build_global_parser(for_subcommand=True))

    args = root_parser.parse_args()

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
