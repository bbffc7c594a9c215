# SPDX-License-Identifier: MIT
"""Tests for crecipe.packages.pkgconfig."""

import os

import pytest

from crecipe.core.errors import BuilderError, ConfigureError, UnknownDependencyError
from crecipe.core.paths import BuildPath
from crecipe.packages.description import PackageDescriptorRule
from crecipe.packages.pkgconfig import PkgConfig


class TestAddPackage:
    def test_registers_rule(self, pkgconfig, book):
        path = pkgconfig.add_package(name="mylib", version="1.0.0", cflags="-I/x")
        assert path == BuildPath.of("pkgconfig/mylib.pc")
        rule = book.rule_for(path)
        assert isinstance(rule, PackageDescriptorRule)
        assert rule.description.description == "mylib"
        assert pkgconfig.package_path("mylib") == path
        assert pkgconfig.is_descriptor(path)

    def test_duplicate_name(self, pkgconfig):
        pkgconfig.add_package(name="mylib", version="1.0.0")
        with pytest.raises(BuilderError, match="mylib"):
            pkgconfig.add_package(name="mylib", version="2.0.0")


class TestQueryArgs:
    def test_external_names(self, pkgconfig):
        assert pkgconfig.query_args(["zlib", "sqlite3"]) == ["zlib >= 1.2", "sqlite3"]

    def test_in_project_path(self, pkgconfig, book):
        path = pkgconfig.add_package(name="mylib", version="1.0.0")
        assert pkgconfig.query_args([path]) == [str(book.abs(path))]

    def test_in_project_shadows_manifest(self, pkgconfig, book):
        # "foo" is also listed in the manifest
        path = pkgconfig.add_package(name="foo", version="1.0.0")
        assert pkgconfig.query_args([path]) == [str(book.abs(path))]
        assert pkgconfig.query_args(["foo"]) == [str(book.abs(path))]

    def test_unknown_build_path(self, pkgconfig):
        with pytest.raises(ConfigureError, match="not a package"):
            pkgconfig.query_args([BuildPath.of("pkgconfig/other.pc")])

    def test_unknown_name(self, pkgconfig, runner):
        with pytest.raises(UnknownDependencyError, match="'png'"):
            pkgconfig.check(["png"])
        with pytest.raises(UnknownDependencyError):
            pkgconfig.cflags(["zlib", "png"])
        assert runner.calls == []


class TestFlags:
    def test_cflags(self, pkgconfig, runner):
        runner.set("pkg-config", stdout="-I/usr/include  -DZ=1\n")
        result = pkgconfig.cflags(["zlib"])
        assert result.ok
        assert result.flags == ["-I/usr/include", "-DZ=1"]
        assert runner.calls == [["pkg-config", "--cflags", "zlib >= 1.2"]]

    def test_libs_single_batch(self, pkgconfig, runner, book):
        path = pkgconfig.add_package(name="mylib", version="1.0.0")
        runner.set("pkg-config", stdout="-lz -lsqlite3 -lmylib")
        result = pkgconfig.libs(["zlib", "sqlite3", path])
        assert result.flags == ["-lz", "-lsqlite3", "-lmylib"]
        assert runner.calls == [
            ["pkg-config", "--libs", "zlib >= 1.2", "sqlite3", str(book.abs(path))]
        ]

    def test_failure_surfaces_stderr(self, pkgconfig, runner):
        runner.set(
            "pkg-config",
            returncode=1,
            stdout="-lz",
            stderr="Requested 'zlib >= 1.2' but version of zlib is 1.1\n",
        )
        result = pkgconfig.libs(["zlib"])
        assert not result.ok
        assert result.flags == []
        assert result.stderr == "Requested 'zlib >= 1.2' but version of zlib is 1.1\n"

    def test_empty_refs_do_not_spawn(self, pkgconfig, runner):
        result = pkgconfig.cflags([])
        assert result.ok
        assert result.flags == []
        assert runner.calls == []

    def test_search_path(self, pkgconfig, runner, book, monkeypatch):
        monkeypatch.setenv("PKG_CONFIG_PATH", "/opt/lib/pkgconfig")
        pkgconfig.cflags(["zlib"])
        env = runner.kwargs[0]["env"]
        assert env["PKG_CONFIG_PATH"] == os.pathsep.join(
            [str(book.build_dir / "pkgconfig"), str(book.src_dir), "/opt/lib/pkgconfig"]
        )


class TestExecutable:
    def test_default(self, book, monkeypatch):
        monkeypatch.delenv("PKG_CONFIG", raising=False)
        assert PkgConfig(book).executable == "pkg-config"

    def test_environment(self, book, monkeypatch):
        monkeypatch.setenv("PKG_CONFIG", "/usr/bin/pkgconf")
        assert PkgConfig(book).executable == "/usr/bin/pkgconf"

    def test_argument_wins(self, book, monkeypatch):
        monkeypatch.setenv("PKG_CONFIG", "/usr/bin/pkgconf")
        assert PkgConfig(book, executable="pkg-config").executable == "pkg-config"

    def test_manifest_from_source_dir(self, book):
        assert PkgConfig(book).manifest.path == book.src_dir / "pkgconfig.json"
