# SPDX-License-Identifier: MIT
"""
crecipe: build rules for C and C++ projects compiled with clang.

crecipe turns a description of executables and dynamic libraries into
rules (prerequisites, targets and a recipe) for an external build-graph
executor. External libraries are resolved with pkg-config; every library
the project builds gets a pkg-config descriptor of its own.
"""

from __future__ import annotations

import os

from crecipe.core.errors import ConfigureError, CrecipeError
from crecipe.core.language import CVersion, CxxVersion, Language
from crecipe.core.paths import BuildPath, SourcePath
from crecipe.core.project import Project
from crecipe.core.rule import Cookbook, RecipeArgs, Rule
from crecipe.packages.pkgconfig import PkgConfig
from crecipe.toolchains import ClangToolchain, platform_compiler

__version__ = "0.1.0"


def get_variant(default: str = "release") -> str:
    """Get the build variant (debug or release).

    Set it when running a build description:
        VARIANT=debug python build.py

    Precedence (highest to lowest):
        1. CRECIPE_VARIANT environment variable
        2. VARIANT environment variable
        3. default parameter

    Args:
        default: Default variant if not set.

    Returns:
        The variant name.
    """
    return os.environ.get("CRECIPE_VARIANT") or os.environ.get("VARIANT") or default


__all__ = [
    "__version__",
    "get_variant",
    "BuildPath",
    "ClangToolchain",
    "ConfigureError",
    "Cookbook",
    "CrecipeError",
    "CVersion",
    "CxxVersion",
    "Language",
    "PkgConfig",
    "Project",
    "RecipeArgs",
    "Rule",
    "SourcePath",
    "platform_compiler",
]
