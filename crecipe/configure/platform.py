# SPDX-License-Identifier: MIT
"""Platform detection.

Only the handful of facts the toolchains need: how shared libraries are
named and linked, and whether objects must be position-independent.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Platform:
    """Host platform description.

    Attributes:
        os: sys.platform-style name ("darwin", "linux", "win32", ...).
    """

    os: str

    @property
    def is_macos(self) -> bool:
        return self.os == "darwin"

    @property
    def is_linux(self) -> bool:
        return self.os.startswith("linux")

    @property
    def is_windows(self) -> bool:
        return self.os == "win32"

    @property
    def is_posix(self) -> bool:
        return not self.is_windows

    @property
    def shared_lib_suffix(self) -> str:
        if self.is_macos:
            return ".dylib"
        if self.is_windows:
            return ".dll"
        return ".so"

    @property
    def shared_lib_flag(self) -> str:
        return "-dynamiclib" if self.is_macos else "-shared"

    @property
    def exe_suffix(self) -> str:
        return ".exe" if self.is_windows else ""


@lru_cache(maxsize=1)
def get_platform() -> Platform:
    """Return the host platform."""
    return Platform(sys.platform)
