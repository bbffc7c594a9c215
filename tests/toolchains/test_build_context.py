# SPDX-License-Identifier: MIT
"""Tests for crecipe.toolchains.build_context."""

import pytest

from crecipe.core.compile_info import CompileInfo
from crecipe.core.language import CVersion, CxxVersion, Language
from crecipe.toolchains.build_context import CompileContext


class TestCompileContext:
    def test_minimal(self):
        ctx = CompileContext(version=CVersion.C11)
        assert ctx.to_args() == ["-std=c11"]

    def test_all_groups(self):
        ctx = CompileContext(
            version=CxxVersion.CXX17,
            includes=["/a", "/b"],
            defines={"X": "1", "EMPTY": ""},
            flags=["-O2"],
        )
        assert ctx.to_args() == [
            "-std=c++17",
            "-I/a",
            "-I/b",
            "-DX=1",
            "-DEMPTY=",
            "-O2",
        ]

    def test_paths_with_spaces_stay_single_tokens(self):
        ctx = CompileContext(version=CVersion.C17, includes=["/my dir/include"])
        assert ctx.to_args() == ["-std=c17", "-I/my dir/include"]


class TestFromCompileInfo:
    def test_selects_language_version(self):
        info = CompileInfo(
            c_version=CVersion.C99,
            cxx_version=CxxVersion.CXX14,
            include_paths=["/inc"],
            definitions={"A": "1"},
        )
        c = CompileContext.from_compile_info(info, Language.C)
        cxx = CompileContext.from_compile_info(info, Language.CXX, ["-fPIC"])
        assert c.version is CVersion.C99
        assert cxx.version is CxxVersion.CXX14
        assert cxx.flags == ["-fPIC"]
        assert c.includes == ["/inc"]
        assert c.defines == {"A": "1"}

    def test_copies_inputs(self):
        info = CompileInfo(c_version=CVersion.C99, include_paths=["/inc"])
        ctx = CompileContext.from_compile_info(info, Language.C)
        ctx.includes.append("/other")
        assert info.include_paths == ["/inc"]

    def test_missing_version(self):
        with pytest.raises(ValueError, match="no C\\+\\+ version"):
            CompileContext.from_compile_info(CompileInfo(), Language.CXX)
