# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Release tooling for kak-lsp: cross-compile, test, and package per-target archives."""

__version__ = "0.1.0"
