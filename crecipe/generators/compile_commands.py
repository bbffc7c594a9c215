# SPDX-License-Identifier: MIT
"""compile_commands.json for IDE integration.

Each compile rule asks clang for a fragment of the compilation database
(-MJ). This rule concatenates the fragments into the JSON array IDEs,
clangd and clang-tidy read:

    [
        {"directory": "...", "file": "src/main.c", "arguments": [...]},
        ...
    ]
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from crecipe.core.paths import AnyPath, BuildPath

if TYPE_CHECKING:
    from crecipe.core.rule import RecipeArgs

logger = logging.getLogger(__name__)

_TRAILING_COMMA = re.compile(r",\s*$")


def join_fragments(fragments: Iterable[str]) -> str:
    """Join compile-command fragments into one JSON array.

    clang ends every fragment with ",\\n"; the comma after the last entry
    is dropped so the result parses as JSON.
    """
    parts = [f for f in fragments if f.strip()]
    if parts:
        parts[-1] = _TRAILING_COMMA.sub("\n", parts[-1])
    return "[" + "".join(parts) + "]"


class CompileCommandsRule:
    """Rule aggregating compile-command fragments.

    Attributes:
        fragments: Fragment files, in registration order.
        json: Output path (``compile_commands.json`` in the build dir).
    """

    OUTPUT = "compile_commands.json"

    def __init__(self, fragments: Iterable[BuildPath]) -> None:
        self.fragments = list(fragments)
        self.json = BuildPath(self.OUTPUT)

    def prereqs(self) -> list[AnyPath]:
        return list(self.fragments)

    def targets(self) -> list[BuildPath]:
        return [self.json]

    def recipe(self, args: RecipeArgs) -> bool:
        out = args.abs(self.json)
        contents = [p.read_text() for p in args.abs_all(*self.fragments)]
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(join_fragments(contents))
        logger.debug("Wrote %s from %d fragments", out, len(contents))
        return True

    def __repr__(self) -> str:
        return f"CompileCommandsRule({len(self.fragments)} fragments)"
