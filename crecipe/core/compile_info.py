# SPDX-License-Identifier: MIT
"""Compile requirements and how they combine.

A CompileInfo is what a translation unit needs from the compiler beyond
its source: a language version, include directories and preprocessor
definitions. Libraries export a CompileInfo to the units that link them,
and the compile rule merges everything the unit depends on into one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from crecipe.core.errors import LanguageVersionError
from crecipe.core.language import (
    CVersion,
    CxxVersion,
    Language,
    TranslationUnit,
    max_version,
)

logger = logging.getLogger(__name__)


@dataclass
class CompileInfo:
    """Language version, include paths and definitions.

    Versions are tracked per language family; None means no requirement.

    Attributes:
        c_version: Minimum C version, if any.
        cxx_version: Minimum C++ version, if any.
        include_paths: Include directories in search order, no duplicates.
        definitions: Preprocessor definitions (name -> value).
    """

    c_version: CVersion | None = None
    cxx_version: CxxVersion | None = None
    include_paths: list[str] = field(default_factory=list)
    definitions: dict[str, str] = field(default_factory=dict)

    @classmethod
    def for_unit(cls, unit: TranslationUnit) -> CompileInfo:
        """The compile info a unit declares for itself."""
        info = cls(
            include_paths=_unique(unit.include_paths),
            definitions=dict(unit.definitions),
        )
        if isinstance(unit.version, CVersion):
            info.c_version = unit.version
        else:
            info.cxx_version = unit.version
        return info

    @classmethod
    def exported(
        cls,
        *,
        include_paths: Iterable[str] = (),
        definitions: Mapping[str, str] | None = None,
        c_version: CVersion | None = None,
        cxx_version: CxxVersion | None = None,
    ) -> CompileInfo:
        return cls(
            c_version=c_version,
            cxx_version=cxx_version,
            include_paths=_unique(include_paths),
            definitions=dict(definitions or {}),
        )

    def merge(self, addition: CompileInfo) -> CompileInfo:
        """Return a new CompileInfo combining this one with ``addition``.

        Versions take the maximum per language, include paths are a union
        (this one's first) and definitions are overridden key-wise by
        ``addition``. Neither input is modified.
        """
        return merge(self, addition)

    def version_for(self, language: Language) -> CVersion | CxxVersion | None:
        return self.c_version if language is Language.C else self.cxx_version

    def check_version(self, unit: TranslationUnit) -> None:
        """Reject compiling ``unit`` below the version required here.

        Raises:
            LanguageVersionError: If the unit's own version is lower than
                the minimum this info requires for the unit's language.
        """
        required = self.version_for(unit.language)
        if required is not None and unit.version < required:
            raise LanguageVersionError(
                unit.src.rel, required.value, unit.version.value
            )

    def copy(self) -> CompileInfo:
        return CompileInfo(
            c_version=self.c_version,
            cxx_version=self.cxx_version,
            include_paths=list(self.include_paths),
            definitions=dict(self.definitions),
        )


def merge(base: CompileInfo, addition: CompileInfo) -> CompileInfo:
    """Combine two CompileInfo values without modifying either.

    Colliding definitions keep the value from ``addition``. Callers that
    care about exact values must avoid collisions.
    """
    result = base.copy()

    if addition.c_version is not None:
        result.c_version = (
            addition.c_version
            if result.c_version is None
            else max_version(result.c_version, addition.c_version)
        )
    if addition.cxx_version is not None:
        result.cxx_version = (
            addition.cxx_version
            if result.cxx_version is None
            else max_version(result.cxx_version, addition.cxx_version)
        )

    for inc in addition.include_paths:
        if inc not in result.include_paths:
            result.include_paths.append(inc)

    for key, value in addition.definitions.items():
        old = result.definitions.get(key)
        if old is not None and old != value:
            logger.warning(
                "Definition %s=%s overridden by %s=%s", key, old, key, value
            )
        result.definitions[key] = value

    return result


def merge_all(infos: Iterable[CompileInfo]) -> CompileInfo:
    """Merge any number of CompileInfo values, in order."""
    result = CompileInfo()
    for info in infos:
        result = merge(result, info)
    return result


def _unique(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))
