# SPDX-License-Identifier: MIT
"""Tests for crecipe.core.project."""

import pytest

from crecipe.core.errors import (
    MissingLanguageVersionError,
    UnknownDependencyError,
    UnsupportedSourceError,
)
from crecipe.core.language import CVersion, CxxVersion, Language
from crecipe.core.paths import BuildPath
from crecipe.core.project import Project
from crecipe.toolchains.clang import ClangImage, ClangObject, ClangToolchain


@pytest.fixture
def toolchain(linux):
    return ClangToolchain(platform=linux)


def make_project(toolchain, book, pkgconfig, **kwargs):
    kwargs.setdefault("c_version", "C17")
    kwargs.setdefault("cxx_version", "C++20")
    kwargs.setdefault("is_debug", False)
    return Project(toolchain, book, pkgconfig=pkgconfig, **kwargs)


def objects(book):
    return [r for r in book.rules if isinstance(r, ClangObject)]


class TestProjectCreation:
    def test_versions_from_strings(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig)
        assert project.c_version is CVersion.C17
        assert project.cxx_version is CxxVersion.CXX20

    def test_binds_toolchain(self, toolchain, book, pkgconfig):
        make_project(toolchain, book, pkgconfig)
        assert toolchain.pkgconfig is pkgconfig

    def test_variant_from_environment(self, toolchain, book, pkgconfig, monkeypatch):
        monkeypatch.delenv("CRECIPE_VARIANT", raising=False)
        monkeypatch.setenv("VARIANT", "debug")
        project = Project(toolchain, book, pkgconfig=pkgconfig)
        assert project.is_debug

    def test_release_by_default(self, toolchain, book, pkgconfig, monkeypatch):
        monkeypatch.delenv("CRECIPE_VARIANT", raising=False)
        monkeypatch.delenv("VARIANT", raising=False)
        project = Project(toolchain, book, pkgconfig=pkgconfig)
        assert not project.is_debug


class TestNormalization:
    def test_default_include_path(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig)
        project.add_executable("hello", ["src/hello.c"])
        unit = objects(book)[0].unit
        assert unit.include_paths == (str(book.src_dir / "include"),)

    def test_ndebug_injected_for_release(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig)
        project.add_executable("hello", ["src/hello.c"], definitions={"X": "1"})
        assert objects(book)[0].unit.definitions == {"X": "1", "NDEBUG": ""}

    def test_debug_injected_for_debug(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig, is_debug=True)
        project.add_executable("hello", ["src/hello.c"])
        assert objects(book)[0].unit.definitions == {"DEBUG": ""}

    def test_no_injection_when_set(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig, is_debug=True)
        project.add_executable("hello", ["src/hello.c"], definitions={"NDEBUG": "1"})
        assert objects(book)[0].unit.definitions == {"NDEBUG": "1"}

    def test_languages_by_extension(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig)
        project.add_executable("app", ["a.c", "b.cpp", "c.cxx", "d.cc"])
        languages = [o.unit.language for o in objects(book)]
        assert languages == [Language.C, Language.CXX, Language.CXX, Language.CXX]

    def test_unrecognized_extension(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig)
        with pytest.raises(UnsupportedSourceError, match="main.m"):
            project.add_executable("app", ["main.m"])

    def test_missing_c_version(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig, c_version=None)
        with pytest.raises(MissingLanguageVersionError) as exc:
            project.add_executable("app", ["main.c"])
        assert "no C version" in str(exc.value)
        assert exc.value.location.filename.endswith("test_project.py")

    def test_missing_cxx_version(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig, cxx_version=None)
        with pytest.raises(MissingLanguageVersionError, match="C\\+\\+"):
            project.add_executable("app", ["main.cpp"])

    def test_precompiled_header(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig)
        project.add_executable(
            "app", ["a.cpp"], precompiled_header="include/pch.hpp"
        )
        assert objects(book)[0].unit.precompiled_header.rel == "include/pch.hpp"


class TestLibraries:
    def test_private_settings_not_exported(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig)
        out = project.add_library(
            "foo",
            "1.0.0",
            ["foo/foo.cpp"],
            output_directory="foolib",
            include_paths=["foo/include"],
            definitions={"FOO_TEST_MACRO": "4"},
            private_definitions={"EXPORT_FOO_API": ""},
            private_includes=["foo/private"],
        )
        assert out == BuildPath.of("foolib/libfoo.so")

        unit = objects(book)[0].unit
        assert unit.include_paths == (
            str(book.src_dir / "foo/include"),
            str(book.src_dir / "foo/private"),
        )
        assert unit.definitions == {
            "FOO_TEST_MACRO": "4",
            "NDEBUG": "",
            "EXPORT_FOO_API": "",
        }

        exported = toolchain.libraries[out.rel].compile_info
        assert exported.include_paths == [str(book.src_dir / "foo/include")]
        assert exported.definitions == {"FOO_TEST_MACRO": "4"}
        assert exported.cxx_version is CxxVersion.CXX20

    def test_executable_links_library(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig)
        foo = project.add_library("foo", "1.0.0", ["foo/foo.cpp"])
        exe = project.add_executable("hello", ["src/hello.c"], link=[foo, "zlib"])

        image = book.rule_for(exe)
        assert isinstance(image, ClangImage)
        assert image.driver == "clang++"
        assert foo in image.prereqs()

    def test_library_linked_by_string_path(self, toolchain, book, pkgconfig, runner):
        project = make_project(toolchain, book, pkgconfig)
        foo = project.add_library("foo", "1.0.0", ["foo/foo.cpp"])
        exe = project.add_executable("hello", ["src/hello.c"], link=["libfoo.so"])

        image = book.rule_for(exe)
        assert image.driver == "clang++"
        assert foo in image.prereqs()
        assert runner.calls == []

    def test_unknown_dependency(self, toolchain, book, pkgconfig, runner):
        project = make_project(toolchain, book, pkgconfig)
        with pytest.raises(UnknownDependencyError, match="'core-graphics'"):
            project.add_executable("hello", ["src/hello.c"], link=["core-graphics"])
        assert runner.calls == []

    def test_compile_commands(self, toolchain, book, pkgconfig):
        project = make_project(toolchain, book, pkgconfig)
        project.add_executable("hello", ["src/hello.c"])
        out = project.add_compile_commands()
        assert out == BuildPath.of("compile_commands.json")
        assert book.rule_for(out).prereqs() == [BuildPath.of("obj.hello/src/hello.json")]
