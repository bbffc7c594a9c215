# SPDX-License-Identifier: MIT
"""Link targets: what a toolchain is asked to build.

Project normalizes user options into ExecutableOpts / LibraryOpts and a
toolchain turns those into rules. Every library a toolchain builds is
recorded as a LibraryArtifact, which carries the usage requirements that
propagate to targets linking it (CMake-style).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from crecipe.core.compile_info import CompileInfo
from crecipe.core.errors import DependencyCycleError
from crecipe.core.language import Language, TranslationUnit
from crecipe.core.paths import BuildPath
from crecipe.util.source_location import SourceLocation, get_caller_location

# A link reference: an external package name, or a build-produced path
# (an in-project library binary or package descriptor).
Linkable = str | BuildPath


class ImageKind(Enum):
    """What a link rule produces."""

    EXECUTABLE = "executable"
    DYNAMIC_LIBRARY = "dynamic_library"


@dataclass
class ExecutableOpts:
    """Normalized options for a linked image.

    Attributes:
        name: Target name (also the executable file name).
        output_directory: Directory the image is written to.
        src: Translation units compiled into the image.
        link: Libraries the image links.
        runtime: Language whose driver links the image.
        is_debug: Whether this is a debug build.
        defined_at: Where the target was declared in user code.
    """

    name: str
    output_directory: BuildPath
    src: list[TranslationUnit]
    link: list[Linkable] = field(default_factory=list)
    runtime: Language = Language.C
    is_debug: bool = False
    defined_at: SourceLocation = field(default_factory=get_caller_location)


@dataclass
class LibraryOpts(ExecutableOpts):
    """Normalized options for a dynamic library.

    Attributes:
        version: Library version, exported in its package descriptor.
        include_paths: Public include directories.
        definitions: Public preprocessor definitions.
        description: Package description text.
    """

    version: str = "0.0.0"
    include_paths: list[str] = field(default_factory=list)
    definitions: dict[str, str] = field(default_factory=dict)
    description: str | None = None


@dataclass(frozen=True)
class LibraryArtifact:
    """A dynamic library produced by the build.

    Attributes:
        name: Library (and package) name.
        binary_path: The linked library file.
        pkgconfig_path: Its package descriptor.
        compile_info: Requirements exported to consumers, already folded
            with those of the libraries it links.
        runtime: Runtime language of the library.
        libraries: In-project libraries it links directly.
    """

    name: str
    binary_path: BuildPath
    pkgconfig_path: BuildPath
    compile_info: CompileInfo
    runtime: Language = Language.C
    libraries: tuple[LibraryArtifact, ...] = ()


def transitive_libraries(libs: list[LibraryArtifact]) -> list[LibraryArtifact]:
    """Return ``libs`` plus everything they link, dependencies first.

    DFS without duplicates; a library is listed after the libraries it
    links.

    Raises:
        DependencyCycleError: If the libraries link each other in a cycle.
    """
    result: list[LibraryArtifact] = []
    done: set[str] = set()
    stack: list[str] = []

    def _collect(lib: LibraryArtifact) -> None:
        key = lib.binary_path.rel
        if key in done:
            return
        if key in stack:
            cycle = stack[stack.index(key) :] + [key]
            raise DependencyCycleError(cycle)
        stack.append(key)
        for dep in lib.libraries:
            _collect(dep)
        stack.pop()
        done.add(key)
        result.append(lib)

    for lib in libs:
        _collect(lib)
    return result


def runtime_language(
    units: list[TranslationUnit], libs: list[LibraryArtifact] | None = None
) -> Language:
    """C++ if any unit, or any linked library, is C++; otherwise C."""
    for unit in units:
        if not unit.is_c:
            return Language.CXX
    for lib in transitive_libraries(libs or []):
        if lib.runtime is Language.CXX:
            return Language.CXX
    return Language.C
