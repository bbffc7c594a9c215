# SPDX-License-Identifier: MIT
"""Path handles for rule prerequisites and targets.

Rules never store absolute paths. They refer to files through
SourcePath (relative to the project's source directory) and BuildPath
(relative to the build directory), and the Cookbook turns those into
absolute paths when a recipe runs. This keeps rule construction
independent of where the build directory ends up.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath


def _normalize(rel: str) -> str:
    # "/" and "" both mean the directory root
    path = PurePosixPath("/", rel.replace("\\", "/"))
    return str(path.relative_to("/")) if path != PurePosixPath("/") else ""


@dataclass(frozen=True)
class SourcePath:
    """A path relative to the project's source directory.

    Example:
        SourcePath.of("src/hello.c").rel == "src/hello.c"
    """

    rel: str

    @classmethod
    def of(cls, path: str | SourcePath) -> SourcePath:
        if isinstance(path, SourcePath):
            return path
        return cls(_normalize(str(path)))

    @property
    def suffix(self) -> str:
        return PurePosixPath(self.rel).suffix

    def __str__(self) -> str:
        return self.rel


@dataclass(frozen=True)
class BuildPath:
    """A path relative to the build directory.

    A BuildPath is also the handle a build description uses to refer to
    something the build produces, e.g. the return value of
    Project.add_library() passed in another target's ``link`` list.
    """

    rel: str

    @classmethod
    def of(cls, path: str | BuildPath) -> BuildPath:
        if isinstance(path, BuildPath):
            return path
        return cls(_normalize(str(path)))

    @classmethod
    def gen(cls, src: SourcePath, *, ext: str, under: str = "") -> BuildPath:
        """Derive a build path mirroring ``src`` with a new extension.

        Args:
            src: Source path to mirror.
            ext: New extension including the dot (e.g. ".o").
            under: Optional build subdirectory to mirror into.

        Returns:
            BuildPath such as ``src/hello.o`` for ``src/hello.c``, or
            ``obj.app/src/hello.o`` with ``under="obj.app"``.
        """
        return cls.of(str(PurePosixPath(under, src.rel).with_suffix(ext)))

    def join(self, *parts: str) -> BuildPath:
        return BuildPath.of(str(PurePosixPath(self.rel, *parts)))

    def with_suffix(self, suffix: str) -> BuildPath:
        """Append ``suffix`` to the file name (``a.o`` -> ``a.o.d``)."""
        return BuildPath(self.rel + suffix)

    @property
    def parent(self) -> BuildPath:
        return BuildPath.of(str(PurePosixPath(self.rel).parent))

    def __str__(self) -> str:
        return f"$(BUILD)/{self.rel}"


AnyPath = SourcePath | BuildPath
