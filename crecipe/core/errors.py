# SPDX-License-Identifier: MIT
"""Custom exceptions for crecipe.

All crecipe exceptions inherit from CrecipeError, which includes
optional source location information for better error messages.

Only configuration problems are raised as exceptions. A failing compiler,
linker or pkg-config invocation is not an exception: the owning recipe
returns False and the tool's stderr is the diagnostic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from crecipe.util.source_location import SourceLocation


class CrecipeError(Exception):
    """Base class for all crecipe exceptions.

    Attributes:
        message: The error message.
        location: Optional source location where the error occurred.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class ConfigureError(CrecipeError):
    """The build graph cannot be constructed.

    Raised while rules are being constructed, before any process is
    spawned. Aborts the whole build.
    """


class UnknownDependencyError(ConfigureError):
    """A library name is not listed in the dependency manifest.

    Attributes:
        name: The library that could not be resolved.
        manifest: Path of the manifest that was searched.
    """

    def __init__(
        self,
        name: str,
        manifest: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.name = name
        self.manifest = manifest
        super().__init__(
            f"'{name}' is not listed as a dependency in {manifest}", location
        )


class LanguageVersionError(ConfigureError):
    """A unit's language version is lower than a linked library requires.

    Attributes:
        src: The translation unit's source path.
        required: Minimum version required by linked libraries.
        actual: The unit's own version.
    """

    def __init__(
        self,
        src: str,
        required: str,
        actual: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.src = src
        self.required = required
        self.actual = actual
        super().__init__(
            f"{src} is compiled as {actual} but a linked library requires "
            f"at least {required}",
            location,
        )


class MissingLanguageVersionError(ConfigureError):
    """No language version was configured for a source file's language."""

    def __init__(
        self,
        src: str,
        language: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.src = src
        self.language = language
        super().__init__(
            f"source file {src} is a {language} file but no {language} "
            "version was given to the build system",
            location,
        )


class UnsupportedSourceError(ConfigureError):
    """A source file's extension is not recognized."""

    def __init__(
        self,
        src: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.src = src
        super().__init__(
            f"{src} has a file extension that is not recognized", location
        )


class DependencyCycleError(CrecipeError):
    """Circular dependency detected between linked libraries.

    Attributes:
        cycle: The names forming the cycle.
    """

    def __init__(
        self,
        cycle: list[str],
        location: SourceLocation | None = None,
    ) -> None:
        self.cycle = cycle
        cycle_str = " -> ".join(cycle)
        super().__init__(f"dependency cycle: {cycle_str}", location)


class BuilderError(CrecipeError):
    """Error in a rule definition or registration."""
