# SPDX-License-Identifier: MIT
"""Package descriptions for libraries built by the project.

Every library the project builds gets a pkg-config ``.pc`` file, so that
targets linking it resolve its flags the same way they resolve external
libraries.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from crecipe.core.paths import AnyPath, BuildPath

if TYPE_CHECKING:
    from crecipe.core.rule import RecipeArgs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageDescription:
    """A named, versioned record of compile and link flags.

    Attributes:
        name: Package name.
        version: Package version.
        description: One-line description.
        cflags: Flags consumers compile with.
        libs: Flags consumers link with.
    """

    name: str
    version: str
    description: str = ""
    cflags: str = ""
    libs: str = ""

    def to_pc(self) -> str:
        """Render as pkg-config file contents."""
        lines = [
            f"Name: {self.name}",
            f"Version: {self.version}",
            f"Description: {self.description or self.name}",
        ]
        if self.cflags:
            lines.append(f"Cflags: {self.cflags}")
        if self.libs:
            lines.append(f"Libs: {self.libs}")
        return "\n".join(lines) + "\n"


def format_cflags(
    include_paths: Iterable[str], definitions: Mapping[str, str]
) -> str:
    """Build a Cflags value from include paths and definitions.

    Tokens are joined unquoted and consumers split pkg-config output on
    whitespace, so paths and values must not contain whitespace.
    """
    parts = [f"-I{inc}" for inc in include_paths]
    parts.extend(f"-D{key}={value}" for key, value in definitions.items())
    return " ".join(parts)


def format_libs(library_dir: str, name: str) -> str:
    """Build a Libs value linking ``name`` from ``library_dir``."""
    return f"-L{library_dir} -l{name}"


class PackageDescriptorRule:
    """Rule writing a package description to a ``.pc`` file."""

    def __init__(self, description: PackageDescription, path: BuildPath) -> None:
        self.description = description
        self.path = path

    def prereqs(self) -> list[AnyPath]:
        return []

    def targets(self) -> list[BuildPath]:
        return [self.path]

    def recipe(self, args: RecipeArgs) -> bool:
        out = args.abs(self.path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(self.description.to_pc())
        logger.debug("Wrote package description %s", out)
        return True

    def __repr__(self) -> str:
        return f"PackageDescriptorRule({self.description.name!r}, {self.path.rel!r})"
