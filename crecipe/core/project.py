# SPDX-License-Identifier: MIT
"""Project: the entry point of a build description.

A Project normalizes user-friendly target options (plain strings for
sources and include directories, optional arguments with defaults) into
the ExecutableOpts / LibraryOpts a toolchain consumes, and forwards them
to the toolchain.

Example:
    book = Cookbook(src_dir=".", build_dir="build")
    project = Project(platform_compiler(), book, c_version="C17")

    foo = project.add_library("foo", "1.0.0", ["foo/foo.c"])
    project.add_executable("hello", ["src/hello.c"], link=[foo, "zlib"])
    project.add_compile_commands()
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from crecipe.core.errors import MissingLanguageVersionError, UnsupportedSourceError
from crecipe.core.language import (
    SOURCE_SUFFIX_MAP,
    CVersion,
    CxxVersion,
    Language,
    TranslationUnit,
)
from crecipe.core.paths import BuildPath, SourcePath
from crecipe.core.target import (
    ExecutableOpts,
    LibraryOpts,
    Linkable,
    runtime_language,
)
from crecipe.packages.pkgconfig import PkgConfig
from crecipe.util.source_location import SourceLocation, get_caller_location

if TYPE_CHECKING:
    from crecipe.core.rule import Cookbook
    from crecipe.tools.toolchain import BaseToolchain

logger = logging.getLogger(__name__)


def _as_c_version(value: CVersion | str | None) -> CVersion | None:
    if value is None or isinstance(value, CVersion):
        return value
    return CVersion(value)


def _as_cxx_version(value: CxxVersion | str | None) -> CxxVersion | None:
    if value is None or isinstance(value, CxxVersion):
        return value
    return CxxVersion(value)


class Project:
    """Build description for one source tree.

    Attributes:
        toolchain: Toolchain the targets are built with.
        book: Cookbook receiving the rules.
        pkgconfig: pkg-config session shared by every target.
        c_version: Version C sources are compiled with, if any.
        cxx_version: Version C++ sources are compiled with, if any.
        is_debug: Debug build (DEBUG defined) or release (NDEBUG defined).
    """

    def __init__(
        self,
        toolchain: BaseToolchain,
        book: Cookbook,
        *,
        c_version: CVersion | str | None = None,
        cxx_version: CxxVersion | str | None = None,
        is_debug: bool | None = None,
        pkgconfig: PkgConfig | None = None,
    ) -> None:
        # Deferred to avoid a cycle: crecipe/__init__ imports this module.
        from crecipe import get_variant

        self.toolchain = toolchain
        self.book = book
        self.pkgconfig = pkgconfig or PkgConfig(book)
        self.c_version = _as_c_version(c_version)
        self.cxx_version = _as_cxx_version(cxx_version)
        self.is_debug = (
            is_debug if is_debug is not None else get_variant() == "debug"
        )
        self.defined_at = get_caller_location()
        toolchain.bind(self.pkgconfig)

    # =========================================================================
    # Targets
    # =========================================================================

    def add_executable(
        self,
        name: str,
        src: Iterable[str],
        *,
        output_directory: str = "/",
        include_paths: Iterable[str] = ("include",),
        definitions: Mapping[str, str] | None = None,
        link: Iterable[Linkable] = (),
        precompiled_header: str | None = None,
    ) -> BuildPath:
        """Add an executable.

        Args:
            name: Executable name.
            src: Source files, relative to the source directory.
            output_directory: Build-relative directory of the executable.
            include_paths: Include directories, relative to the source
                directory.
            definitions: Preprocessor definitions.
            link: Libraries to link: paths returned by add_library() or
                names listed in pkgconfig.json.
            precompiled_header: Header every source is compiled with.

        Returns:
            Build path of the executable.

        Raises:
            ConfigureError: On unrecognized sources, missing language
                versions or unresolvable libraries.
        """
        location = get_caller_location()
        includes = self._resolve_includes(include_paths)
        defs = self._definitions(definitions)
        units = self._units(src, includes, defs, precompiled_header, location)

        opts = ExecutableOpts(
            name=name,
            output_directory=BuildPath.of(output_directory),
            src=units,
            link=list(link),
            runtime=runtime_language(units),
            is_debug=self.is_debug,
            defined_at=location,
        )
        return self.toolchain.add_executable(self.book, opts)

    def add_library(
        self,
        name: str,
        version: str,
        src: Iterable[str],
        *,
        output_directory: str = "/",
        include_paths: Iterable[str] = ("include",),
        definitions: Mapping[str, str] | None = None,
        link: Iterable[Linkable] = (),
        precompiled_header: str | None = None,
        private_definitions: Mapping[str, str] | None = None,
        private_includes: Iterable[str] = (),
        description: str | None = None,
    ) -> BuildPath:
        """Add a dynamic library and its package descriptor.

        ``include_paths`` and ``definitions`` are public: they are exported
        to every target linking the library. ``private_includes`` and
        ``private_definitions`` only apply when compiling the library.

        Returns:
            Build path of the library binary, usable in another target's
            ``link`` list.
        """
        location = get_caller_location()
        public_includes = self._resolve_includes(include_paths)
        includes = public_includes + [
            inc
            for inc in self._resolve_includes(private_includes)
            if inc not in public_includes
        ]

        defs = self._definitions(definitions)
        defs.update(private_definitions or {})

        units = self._units(src, includes, defs, precompiled_header, location)
        opts = LibraryOpts(
            name=name,
            output_directory=BuildPath.of(output_directory),
            src=units,
            link=list(link),
            runtime=runtime_language(units),
            is_debug=self.is_debug,
            defined_at=location,
            version=version,
            include_paths=public_includes,
            definitions=dict(definitions or {}),
            description=description,
        )
        return self.toolchain.add_library(self.book, opts)

    def add_compile_commands(self) -> BuildPath:
        """Add compile_commands.json covering every target added so far."""
        return self.toolchain.add_compile_commands(self.book)

    # =========================================================================
    # Normalization
    # =========================================================================

    def _resolve_includes(self, paths: Iterable[str]) -> list[str]:
        resolved: list[str] = []
        for path in paths:
            inc = str(self.book.abs(SourcePath.of(path)))
            if inc not in resolved:
                resolved.append(inc)
        return resolved

    def _definitions(self, definitions: Mapping[str, str] | None) -> dict[str, str]:
        defs = dict(definitions or {})
        if "DEBUG" not in defs and "NDEBUG" not in defs:
            defs["DEBUG" if self.is_debug else "NDEBUG"] = ""
        return defs

    def _units(
        self,
        src: Iterable[str],
        includes: list[str],
        defs: dict[str, str],
        precompiled_header: str | None,
        location: SourceLocation,
    ) -> list[TranslationUnit]:
        pch = SourcePath.of(precompiled_header) if precompiled_header else None
        return [
            self._make_unit(SourcePath.of(s), includes, defs, pch, location)
            for s in src
        ]

    def _make_unit(
        self,
        src: SourcePath,
        includes: list[str],
        defs: dict[str, str],
        pch: SourcePath | None,
        location: SourceLocation,
    ) -> TranslationUnit:
        language = SOURCE_SUFFIX_MAP.get(src.suffix)
        if language is None:
            raise UnsupportedSourceError(src.rel, location)

        version = self.c_version if language is Language.C else self.cxx_version
        if version is None:
            raise MissingLanguageVersionError(src.rel, language.value, location)

        return TranslationUnit(
            src=src,
            language=language,
            version=version,
            include_paths=tuple(includes),
            definitions=dict(defs),
            precompiled_header=pch,
        )

    def __repr__(self) -> str:
        return f"Project({self.toolchain!r}, {self.book.src_dir})"
