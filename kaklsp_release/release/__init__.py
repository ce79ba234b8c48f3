# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release pipeline for kak-lsp.

Resolves target and version, drives the cross-compilation tool, stages the
fixed artifact set and writes one `<name>-<version>-<target>.tar.gz` per run.
This is operations infrastructure; none of the language server lives here.
"""
