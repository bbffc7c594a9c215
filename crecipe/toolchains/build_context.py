# SPDX-License-Identifier: MIT
"""Build context classes for toolchain-specific build information.

A context holds the effective requirements of one compile step and
formats them into clang argument tokens (-std=, -I, -D).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from crecipe.core.compile_info import CompileInfo
    from crecipe.core.language import Language, LanguageVersion


@dataclass
class CompileContext:
    """Context for compiling one translation unit.

    Attributes:
        version: Language version of the unit.
        includes: Include directories (without -I prefix).
        defines: Preprocessor definitions (name -> value).
        flags: Additional compiler flags, appended last.
    """

    version: LanguageVersion
    includes: list[str] = field(default_factory=list)
    defines: dict[str, str] = field(default_factory=dict)
    flags: list[str] = field(default_factory=list)

    def to_args(self) -> list[str]:
        """All tokens, in command-line order.

        Each token is a single argv entry, so paths and definition values
        with spaces stay intact.
        """
        args = [self.version.std_flag]
        args.extend(f"-I{inc}" for inc in self.includes)
        args.extend(f"-D{key}={value}" for key, value in self.defines.items())
        args.extend(self.flags)
        return args

    @classmethod
    def from_compile_info(
        cls,
        info: CompileInfo,
        language: Language,
        flags: list[str] | None = None,
    ) -> CompileContext:
        """Create a CompileContext for ``language`` from merged compile info.

        Raises:
            ValueError: If ``info`` has no version for ``language``.
        """
        version = info.version_for(language)
        if version is None:
            raise ValueError(f"no {language.value} version in {info!r}")
        return cls(
            version=version,
            includes=list(info.include_paths),
            defines=dict(info.definitions),
            flags=list(flags or []),
        )
