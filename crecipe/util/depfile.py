# SPDX-License-Identifier: MIT
"""Parse make-style dependency files written by the compiler (-MD -MF)."""

from __future__ import annotations

import re

# A target separator is a colon followed by whitespace or the end of input,
# so "C:\path" drive letters are not mistaken for one.
_SEPARATOR = re.compile(r":(?=\s|$)")


def parse_prereqs(contents: str) -> list[str]:
    """Return the prerequisites listed in a depfile.

    The target is discarded. Backslash-newline continuations are joined
    first, so one prerequisite per line and several per line parse the
    same. Order and duplicates are preserved.

    Example:
        >>> parse_prereqs("foo.o: foo.c \\\\\\n  foo.h")
        ['foo.c', 'foo.h']
    """
    joined = contents.replace("\\\r\n", " ").replace("\\\n", " ")
    parts = _SEPARATOR.split(joined, maxsplit=1)
    if len(parts) < 2:
        return []
    return parts[1].split()
