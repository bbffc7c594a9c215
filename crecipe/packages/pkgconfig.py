# SPDX-License-Identifier: MIT
"""Resolve library references to compiler and linker flags with pkg-config.

A PkgConfig instance is a per-build session object. It owns:
- the dependency manifest (external libraries and version constraints),
- the package descriptors of libraries built by the project,
- the search path pkg-config is run with.

References are resolved in two phases. In-project packages are checked
first, so a library built by the project always shadows an external
library of the same name. Only references that are not in-project fall
back to the manifest.

Example:
    pkg = PkgConfig(book)
    result = pkg.cflags(["zlib", foo_lib_pc])
    if result.ok:
        argv.extend(result.flags)
    else:
        log.write(result.stderr)
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from crecipe.core.errors import BuilderError, ConfigureError
from crecipe.core.paths import BuildPath
from crecipe.packages.description import (
    PackageDescription,
    PackageDescriptorRule,
)
from crecipe.packages.manifest import DependencyManifest

if TYPE_CHECKING:
    from crecipe.core.rule import Cookbook, Runner
    from crecipe.core.target import Linkable

logger = logging.getLogger(__name__)

# Build-relative directory holding generated .pc files.
PKGCONFIG_DIR = "pkgconfig"


@dataclass
class PkgConfigResult:
    """Outcome of a pkg-config query.

    Attributes:
        ok: True if pkg-config exited with status 0.
        flags: Whitespace-separated tokens of its output (success only).
        stderr: Its diagnostics (failure only).
    """

    ok: bool
    flags: list[str] = field(default_factory=list)
    stderr: str = ""

    @classmethod
    def success(cls, flags: list[str]) -> PkgConfigResult:
        return cls(ok=True, flags=flags)

    @classmethod
    def failure(cls, stderr: str) -> PkgConfigResult:
        return cls(ok=False, stderr=stderr)


class PkgConfig:
    """pkg-config resolver for one build session.

    Attributes:
        book: Cookbook whose directories define the search path.
        manifest: The project's dependency manifest.
    """

    def __init__(
        self,
        book: Cookbook,
        *,
        manifest: DependencyManifest | None = None,
        executable: str | None = None,
        runner: Runner = subprocess.run,
    ) -> None:
        self.book = book
        self.manifest = manifest or DependencyManifest.in_dir(book.src_dir)
        self._executable = executable
        self._runner = runner
        # package name -> descriptor path
        self._packages: dict[str, BuildPath] = {}
        # descriptor build-relative path -> package name
        self._descriptors: dict[str, str] = {}

    @property
    def executable(self) -> str:
        return self._executable or os.environ.get("PKG_CONFIG") or "pkg-config"

    # =========================================================================
    # In-project packages
    # =========================================================================

    def add_package(
        self,
        *,
        name: str,
        version: str,
        description: str | None = None,
        cflags: str = "",
        libs: str = "",
    ) -> BuildPath:
        """Register a package built by the project and add its .pc rule.

        Args:
            name: Package name.
            version: Package version.
            description: Description text (defaults to the name).
            cflags: Flags consumers compile with.
            libs: Flags consumers link with.

        Returns:
            Build path of the package's descriptor.

        Raises:
            BuilderError: If a package with this name is already registered.
        """
        if name in self._packages:
            raise BuilderError(f"package '{name}' is already defined")

        path = BuildPath(f"{PKGCONFIG_DIR}/{name}.pc")
        desc = PackageDescription(
            name=name,
            version=version,
            description=description or name,
            cflags=cflags,
            libs=libs,
        )
        self.book.add(PackageDescriptorRule(desc, path))
        self._packages[name] = path
        self._descriptors[path.rel] = name
        logger.info("Registered package %s %s (%s)", name, version, path.rel)
        return path

    def package_path(self, name: str) -> BuildPath | None:
        """Descriptor path of an in-project package, if registered."""
        return self._packages.get(name)

    def is_descriptor(self, path: BuildPath) -> bool:
        return path.rel in self._descriptors

    # =========================================================================
    # Queries
    # =========================================================================

    def query_args(self, refs: Iterable[Linkable]) -> list[str]:
        """Translate references into pkg-config package arguments.

        In-project descriptors become absolute .pc paths; other names are
        looked up in the manifest.

        Raises:
            UnknownDependencyError: A plain name is neither an in-project
                package nor in the manifest.
            ConfigureError: A build path is not a registered descriptor.
        """
        args: list[str] = []
        for ref in refs:
            if isinstance(ref, BuildPath):
                if not self.is_descriptor(ref):
                    raise ConfigureError(
                        f"{ref.rel} is not a package produced by this build"
                    )
                args.append(str(self.book.abs(ref)))
            elif (local := self._packages.get(ref)) is not None:
                args.append(str(self.book.abs(local)))
            else:
                args.append(self.manifest.versioned_name(ref))
        return args

    def check(self, refs: Iterable[Linkable]) -> None:
        """Validate references without running pkg-config.

        Raises the same errors as query_args().
        """
        self.query_args(refs)

    def search_path(self) -> str:
        """PKG_CONFIG_PATH pkg-config runs with.

        Generated descriptors first, then the source tree, then whatever
        the caller's environment already had.
        """
        dirs = [
            str(self.book.build_dir / PKGCONFIG_DIR),
            str(self.book.src_dir),
        ]
        existing = os.environ.get("PKG_CONFIG_PATH")
        if existing:
            dirs.append(existing)
        return os.pathsep.join(dirs)

    def cflags(self, refs: Iterable[Linkable]) -> PkgConfigResult:
        return self.flags("--cflags", refs)

    def libs(self, refs: Iterable[Linkable]) -> PkgConfigResult:
        return self.flags("--libs", refs)

    def flags(self, mode: str, refs: Iterable[Linkable]) -> PkgConfigResult:
        """Run pkg-config once for all references.

        Args:
            mode: "--cflags" or "--libs".
            refs: References to resolve.

        Returns:
            Success with the output split on whitespace, or failure with
            pkg-config's stderr.

        Raises:
            UnknownDependencyError, ConfigureError: See query_args().
        """
        queries = self.query_args(refs)
        if not queries:
            return PkgConfigResult.success([])

        argv = [self.executable, mode, *queries]
        env = dict(os.environ)
        env["PKG_CONFIG_PATH"] = self.search_path()
        logger.debug("Running: %s", shlex.join(argv))

        proc = self._runner(argv, capture_output=True, text=True, env=env)
        if proc.returncode != 0:
            return PkgConfigResult.failure(proc.stderr or "")
        return PkgConfigResult.success(proc.stdout.split())
