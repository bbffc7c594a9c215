# SPDX-License-Identifier: MIT
"""Toolchain definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from crecipe.toolchains.clang import (
    ClangImage,
    ClangObject,
    ClangPrecompiledHeader,
    ClangToolchain,
)

if TYPE_CHECKING:
    from crecipe.packages.pkgconfig import PkgConfig


def platform_compiler(pkgconfig: PkgConfig | None = None) -> ClangToolchain:
    """Return the default toolchain for the host platform.

    clang is the only supported compiler; on macOS it is Apple clang and
    on Linux the system clang, both reached through ``clang``/``clang++``.
    """
    return ClangToolchain(pkgconfig)


__all__ = [
    "ClangImage",
    "ClangObject",
    "ClangPrecompiledHeader",
    "ClangToolchain",
    "platform_compiler",
]
