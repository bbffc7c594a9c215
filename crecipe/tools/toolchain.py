# SPDX-License-Identifier: MIT
"""Toolchain protocol and base implementation.

A Toolchain turns normalized target options into rules: one compile rule
per translation unit, one link rule per image, plus the package
descriptor of every library it builds. Everything that does not depend
on a particular compiler lives in BaseToolchain: the registry of built
libraries, the split of link references into in-project libraries and
pkg-config queries, and linker selection.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from crecipe.core.compile_info import CompileInfo, merge_all
from crecipe.core.language import Language
from crecipe.core.paths import BuildPath
from crecipe.core.target import LibraryArtifact, transitive_libraries

if TYPE_CHECKING:
    from crecipe.core.rule import Cookbook
    from crecipe.core.target import ExecutableOpts, LibraryOpts, Linkable
    from crecipe.packages.pkgconfig import PkgConfig

logger = logging.getLogger(__name__)


@runtime_checkable
class Toolchain(Protocol):
    """Protocol for toolchains."""

    @property
    def name(self) -> str:
        """Toolchain name (e.g., 'clang')."""
        ...

    def add_executable(self, book: Cookbook, opts: ExecutableOpts) -> BuildPath:
        """Compile and link an executable. Returns its path."""
        ...

    def add_library(self, book: Cookbook, opts: LibraryOpts) -> BuildPath:
        """Compile and link a dynamic library. Returns its path."""
        ...

    def add_compile_commands(self, book: Cookbook) -> BuildPath:
        """Aggregate compile-command fragments. Returns the index path."""
        ...


@dataclass
class LinkSet:
    """Link references split by how they resolve.

    Attributes:
        libraries: In-project libraries linked directly.
        imports: References for pkg-config: descriptors of those libraries
            in place of their binaries, and external names as given.
    """

    libraries: list[LibraryArtifact]
    imports: list[Linkable]

    def compile_info(self) -> CompileInfo:
        """Merged requirements exported by the directly linked libraries."""
        return merge_all(lib.compile_info for lib in self.libraries)

    def link_imports(self) -> list[Linkable]:
        """pkg-config references for linking.

        The image's own references plus the descriptors of every library
        linked transitively, without duplicates.
        """
        result: list[Linkable] = list(self.imports)
        for lib in transitive_libraries(self.libraries):
            if lib.pkgconfig_path not in result:
                result.append(lib.pkgconfig_path)
        return result

    def binaries(self) -> list[BuildPath]:
        """Binaries of every library linked transitively."""
        return [lib.binary_path for lib in transitive_libraries(self.libraries)]


class BaseToolchain(ABC):
    """Abstract base class for toolchains.

    Attributes:
        pkgconfig: Resolver shared by every rule of this toolchain.
        libraries: Libraries built so far, keyed by build-relative path.
    """

    # Higher value wins when choosing which driver links an image.
    DEFAULT_LANGUAGE_PRIORITY: dict[Language, int] = {
        Language.C: 1,
        Language.CXX: 2,
    }

    def __init__(self, name: str, pkgconfig: PkgConfig | None = None) -> None:
        self._name = name
        self._pkgconfig = pkgconfig
        self.libraries: dict[str, LibraryArtifact] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def pkgconfig(self) -> PkgConfig:
        if self._pkgconfig is None:
            raise RuntimeError(
                f"toolchain {self.name!r} has no pkg-config resolver; "
                "attach one with bind()"
            )
        return self._pkgconfig

    def bind(self, pkgconfig: PkgConfig) -> None:
        """Attach the build session's pkg-config resolver."""
        self._pkgconfig = pkgconfig

    @property
    def language_priority(self) -> dict[Language, int]:
        """Override in subclasses if needed."""
        return self.DEFAULT_LANGUAGE_PRIORITY

    def linker_language(self, languages: set[Language]) -> Language:
        """Pick the language whose driver links objects of ``languages``."""
        if not languages:
            return Language.C
        return max(languages, key=lambda lang: self.language_priority.get(lang, 0))

    def partition_links(self, link: list[Linkable]) -> LinkSet:
        """Split link references into in-project libraries and imports.

        A plain string is first read as a build-relative path and matched
        against the libraries built so far; only if none matches is it an
        external package name.
        """
        libs: list[LibraryArtifact] = []
        imports: list[Linkable] = []
        for ref in link:
            lib = self.libraries.get(BuildPath.of(ref).rel)
            if lib is not None:
                libs.append(lib)
                imports.append(lib.pkgconfig_path)
            else:
                imports.append(ref)
        return LinkSet(libraries=libs, imports=imports)

    def register_library(self, lib: LibraryArtifact) -> None:
        self.libraries[lib.binary_path.rel] = lib
        logger.info("Registered library %s (%s)", lib.name, lib.binary_path.rel)

    @abstractmethod
    def add_executable(self, book: Cookbook, opts: ExecutableOpts) -> BuildPath: ...

    @abstractmethod
    def add_library(self, book: Cookbook, opts: LibraryOpts) -> BuildPath: ...

    @abstractmethod
    def add_compile_commands(self, book: Cookbook) -> BuildPath: ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"
