# SPDX-License-Identifier: MIT
"""Shared fixtures for crecipe tests.

No test needs a real compiler or pkg-config: every subprocess goes
through a FakeRunner that records the command and returns a canned
result.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from crecipe.configure.platform import Platform
from crecipe.core.rule import Cookbook, RecipeArgs
from crecipe.packages.manifest import DependencyManifest
from crecipe.packages.pkgconfig import PkgConfig


class FakeRunner:
    """Stand-in for subprocess.run.

    Attributes:
        calls: argv of every invocation, in order.
        kwargs: Keyword arguments of every invocation.
        results: Program name -> (returncode, stdout, stderr).
        depfile: Written to the path after ``-MF`` when a compile succeeds.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.kwargs: list[dict] = []
        self.results: dict[str, tuple[int, str, str]] = {}
        self.depfile = "out.o: \\\n  src.c\n"

    def set(
        self, program: str, returncode: int = 0, stdout: str = "", stderr: str = ""
    ) -> None:
        self.results[program] = (returncode, stdout, stderr)

    def programs(self) -> list[str]:
        return [Path(argv[0]).name for argv in self.calls]

    def __call__(self, argv, **kwargs):
        argv = [str(a) for a in argv]
        self.calls.append(argv)
        self.kwargs.append(kwargs)
        returncode, stdout, stderr = self.results.get(
            Path(argv[0]).name, (0, "", "")
        )
        if returncode == 0 and "-MF" in argv:
            Path(argv[argv.index("-MF") + 1]).write_text(self.depfile)
        return subprocess.CompletedProcess(argv, returncode, stdout, stderr)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def book(tmp_path: Path) -> Cookbook:
    src = tmp_path / "src"
    src.mkdir()
    return Cookbook(src_dir=src, build_dir=tmp_path / "build")


@pytest.fixture
def manifest(book: Cookbook) -> DependencyManifest:
    (book.src_dir / "pkgconfig.json").write_text(
        '{"dependencies": {"zlib": ">= 1.2", "sqlite3": "", "foo": ">= 9.0"}}'
    )
    return DependencyManifest.in_dir(book.src_dir)


@pytest.fixture
def pkgconfig(book: Cookbook, manifest: DependencyManifest, runner: FakeRunner) -> PkgConfig:
    return PkgConfig(book, manifest=manifest, executable="pkg-config", runner=runner)


@pytest.fixture
def args(book: Cookbook, runner: FakeRunner) -> RecipeArgs:
    return RecipeArgs(book, runner=runner)


@pytest.fixture
def linux() -> Platform:
    return Platform("linux")


@pytest.fixture
def macos() -> Platform:
    return Platform("darwin")
