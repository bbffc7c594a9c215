# SPDX-License-Identifier: MIT
"""Generated index files for crecipe builds."""

from crecipe.generators.compile_commands import CompileCommandsRule, join_fragments

__all__ = [
    "CompileCommandsRule",
    "join_fragments",
]
