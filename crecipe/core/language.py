# SPDX-License-Identifier: MIT
"""Languages, language versions and translation units."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from crecipe.core.paths import SourcePath


class Language(Enum):
    """Discriminant of a translation unit."""

    C = "C"
    CXX = "C++"


class _OrderedVersion(Enum):
    """Enum whose members compare by declaration order."""

    def _index(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._index() < other._index()  # type: ignore[attr-defined]

    def __le__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._index() <= other._index()  # type: ignore[attr-defined]

    def __gt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._index() > other._index()  # type: ignore[attr-defined]

    def __ge__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._index() >= other._index()  # type: ignore[attr-defined]

    @property
    def std_flag(self) -> str:
        """The ``-std=`` flag for this version (e.g. ``-std=c17``)."""
        return f"-std={self.value.lower()}"


class CVersion(_OrderedVersion):
    C89 = "C89"
    C99 = "C99"
    C11 = "C11"
    C17 = "C17"


class CxxVersion(_OrderedVersion):
    CXX98 = "C++98"
    CXX03 = "C++03"
    CXX11 = "C++11"
    CXX14 = "C++14"
    CXX17 = "C++17"
    CXX20 = "C++20"


LanguageVersion = CVersion | CxxVersion

# Source suffix -> language
SOURCE_SUFFIX_MAP: dict[str, Language] = {
    ".c": Language.C,
    ".cpp": Language.CXX,
    ".cxx": Language.CXX,
    ".cc": Language.CXX,
}


def max_version(a: LanguageVersion, b: LanguageVersion) -> LanguageVersion:
    """Return the higher of two versions of the same language."""
    return b if a < b else a


@dataclass(frozen=True)
class TranslationUnit:
    """One source file plus its compile-time configuration.

    ``language`` tags the unit; ``version`` is a CVersion for C units and
    a CxxVersion for C++ units.

    Attributes:
        src: Source file.
        language: Language of the source.
        version: Language version to compile with.
        include_paths: Absolute include directories, in search order.
        definitions: Preprocessor definitions (name -> value).
        precompiled_header: Header to precompile and include, if any.
    """

    src: SourcePath
    language: Language
    version: LanguageVersion
    include_paths: tuple[str, ...] = ()
    definitions: Mapping[str, str] = field(default_factory=dict)
    precompiled_header: SourcePath | None = None

    def __post_init__(self) -> None:
        expected = CVersion if self.language is Language.C else CxxVersion
        if not isinstance(self.version, expected):
            raise TypeError(
                f"{self.src} is a {self.language.value} unit but has version "
                f"{self.version!r}"
            )

    @property
    def is_c(self) -> bool:
        return self.language is Language.C
