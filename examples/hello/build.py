#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Build script for a C program linking a C++ library.

This example demonstrates:
- A dynamic library with public and private include paths/definitions
- A precompiled header shared by the library's sources
- Linking the library and external pkg-config packages (pkgconfig.json)
- compile_commands.json for editors

crecipe only constructs rules. The loop at the bottom stands in for a
real executor: rules were added in dependency order, so running them
in order builds everything once.

Usage:
    VARIANT=debug python build.py
"""

import os
import sys
from pathlib import Path

from crecipe import Cookbook, Project, RecipeArgs, platform_compiler
from crecipe.util.commands import setup_logging

setup_logging(verbose=True)

src_dir = Path(__file__).parent
build_dir = Path(os.environ.get("CRECIPE_BUILD_DIR", src_dir / "build"))

book = Cookbook(src_dir=src_dir, build_dir=build_dir)
project = Project(platform_compiler(), book, c_version="C17", cxx_version="C++20")

foo = project.add_library(
    "foo",
    "1.0.0",
    ["foo/foo.cpp", "foo/bar.cpp"],
    output_directory="foolib",
    include_paths=["foo/include"],
    definitions={"FOO_TEST_MACRO": "4"},
    private_definitions={"EXPORT_FOO_API": ""},
    private_includes=["foo/private"],
    precompiled_header="foo/include/pch.hpp",
)

hello = project.add_executable("hello", ["src/hello.c"], link=[foo, "zlib", "sqlite3"])
project.add_compile_commands()

for rule in book.rules:
    args = RecipeArgs(book)
    ok = rule.recipe(args)
    sys.stderr.write(args.log.getvalue())
    if not ok:
        print(f"FAILED: {rule!r}", file=sys.stderr)
        sys.exit(1)

print(f"Built {book.abs(hello)}")
