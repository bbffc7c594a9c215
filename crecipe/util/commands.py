# SPDX-License-Identifier: MIT
"""Command-line helpers for crecipe builds.

Executors that cannot call recipes in-process, or users inspecting a
build directory, can reach the same logic through Python:
    python -m crecipe.util.commands depfile <file.d>
    python -m crecipe.util.commands compile-commands <frag1> ... <dest>
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from crecipe.generators.compile_commands import join_fragments
from crecipe.util.depfile import parse_prereqs

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt)


def depfile_prereqs(path: str) -> list[str]:
    """Prerequisites listed in a Makefile-syntax depfile."""
    return parse_prereqs(Path(path).read_text())


def compile_commands(fragments: list[str], dest: str) -> None:
    """Join compile-command fragments into ``dest``."""
    dest_path = Path(dest)
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    contents = [Path(f).read_text() for f in fragments]
    dest_path.write_text(join_fragments(contents))
    logger.info("Wrote %s from %d fragments", dest_path, len(contents))


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        prog="python -m crecipe.util.commands",
        description="crecipe build helpers",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--debug", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    dep = sub.add_parser("depfile", help="print the prerequisites of a depfile")
    dep.add_argument("path")

    cc = sub.add_parser(
        "compile-commands", help="join fragments into compile_commands.json"
    )
    cc.add_argument("fragments", nargs="*")
    cc.add_argument("dest")

    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.debug)

    if args.command == "depfile":
        try:
            prereqs = depfile_prereqs(args.path)
        except OSError as e:
            logger.error("Cannot read %s: %s", args.path, e)
            return 1
        for prereq in prereqs:
            print(prereq)
        return 0

    try:
        compile_commands(args.fragments, args.dest)
    except OSError as e:
        logger.error("Cannot write %s: %s", args.dest, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
