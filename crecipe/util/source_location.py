# SPDX-License-Identifier: MIT
"""Source locations for diagnostics.

Objects created from a user's build description remember where they were
created so that configuration errors can point back at the offending call.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from pathlib import Path

# Frames inside this package are skipped when looking for the user's call.
_PACKAGE_DIR = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class SourceLocation:
    """A file/line pair in user code.

    Attributes:
        filename: Path of the file.
        lineno: Line number (1-based).
    """

    filename: str
    lineno: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.lineno}"


def get_caller_location(skip_package: bool = True) -> SourceLocation:
    """Return the location of the first caller outside crecipe.

    Args:
        skip_package: If False, return the immediate caller instead.

    Returns:
        The caller's SourceLocation, or an "<unknown>" location if the
        stack cannot be inspected.
    """
    frame = inspect.currentframe()
    try:
        caller = frame.f_back if frame is not None else None
        while caller is not None:
            filename = caller.f_code.co_filename
            if not skip_package or not _in_package(filename):
                return SourceLocation(filename, caller.f_lineno)
            caller = caller.f_back
    finally:
        del frame
    return SourceLocation("<unknown>", 0)


def _in_package(filename: str) -> bool:
    # Generated code, e.g. dataclass __init__ methods
    if filename == "<string>":
        return True
    try:
        return Path(filename).resolve().is_relative_to(_PACKAGE_DIR)
    except (OSError, ValueError):
        return False
