# SPDX-License-Identifier: MIT
"""Clang toolchain implementation.

Provides rules for building C and C++ projects with clang:
- ClangObject: compile one translation unit (clang / clang++)
- ClangPrecompiledHeader: precompile a header shared by several units
- ClangImage: link an executable or a dynamic library

Compile rules ask clang for a depfile (-MD -MF) and a compilation
database fragment (-MJ) alongside the object. After a successful compile
the headers listed in the depfile are registered as additional
prerequisites, so editing any included header recompiles the unit.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from crecipe.configure.platform import Platform, get_platform
from crecipe.core.compile_info import CompileInfo
from crecipe.core.errors import ConfigureError
from crecipe.core.language import CVersion, CxxVersion, Language, max_version
from crecipe.core.paths import AnyPath, BuildPath, SourcePath
from crecipe.core.target import (
    ImageKind,
    LibraryArtifact,
    runtime_language,
)
from crecipe.generators.compile_commands import CompileCommandsRule
from crecipe.packages.description import format_cflags, format_libs
from crecipe.toolchains.build_context import CompileContext
from crecipe.tools.toolchain import BaseToolchain
from crecipe.util.depfile import parse_prereqs

if TYPE_CHECKING:
    from crecipe.core.language import TranslationUnit
    from crecipe.core.rule import Cookbook, RecipeArgs
    from crecipe.core.target import ExecutableOpts, LibraryOpts, Linkable
    from crecipe.packages.pkgconfig import PkgConfig
    from crecipe.tools.toolchain import LinkSet

logger = logging.getLogger(__name__)


def base_clang_args() -> list[str]:
    return ["-fcolor-diagnostics"]


def variant_flags(is_debug: bool) -> list[str]:
    """Optimization flags for a build variant."""
    return ["-O0"] if is_debug else ["-O2"]


def _build_paths(refs: list[Linkable]) -> list[BuildPath]:
    return [r for r in refs if isinstance(r, BuildPath)]


def _register_headers(args: RecipeArgs, depfile: BuildPath) -> None:
    contents = args.abs(depfile).read_text()
    for header in parse_prereqs(contents):
        args.add_postreq(header)


class ClangPrecompiledHeader:
    """Rule precompiling one header.

    Built with the language, version, include paths, definitions and
    compile flags of the first unit that requested it. clang rejects a PCH
    whose optimization or PIC level differs from the consuming compile, so
    every consumer must share those flags. Consumers pass
    ``-include-pch <pch>``.

    Attributes:
        header: The header source.
        language: C or C++ (selects ``-x c-header`` / ``-x c++-header``).
        pch: The precompiled output.
        flags: Variant and PIC flags, identical to the consumers'.
    """

    def __init__(
        self,
        pkgconfig: PkgConfig,
        header: SourcePath,
        language: Language,
        info: CompileInfo,
        driver: str,
        imports: list[Linkable] | None = None,
        flags: list[str] | None = None,
    ) -> None:
        self.pkgconfig = pkgconfig
        self.header = header
        self.language = language
        self.info = info
        self.driver = driver
        self.imports = list(imports or [])
        self.flags = list(flags or [])
        self.pch = BuildPath.of(header.rel + ".pch")
        self.depfile = self.pch.with_suffix(".d")

    def prereqs(self) -> list[AnyPath]:
        return [self.header, *_build_paths(self.imports)]

    def targets(self) -> list[BuildPath]:
        return [self.pch, self.depfile]

    def recipe(self, args: RecipeArgs) -> bool:
        header, pch, dep = args.abs_all(self.header, self.pch, self.depfile)
        kind = "c-header" if self.language is Language.C else "c++-header"
        context = CompileContext.from_compile_info(
            self.info, self.language, self.flags
        )

        clang_args = base_clang_args()
        clang_args.extend(["-g", "-x", kind, *context.to_args()])
        clang_args.extend([str(header), "-MD", "-MF", str(dep), "-o", str(pch)])

        if self.imports:
            result = self.pkgconfig.cflags(self.imports)
            if not result.ok:
                args.log.write(result.stderr)
                return False
            clang_args.extend(result.flags)

        pch.parent.mkdir(parents=True, exist_ok=True)
        if not args.spawn(self.driver, clang_args):
            return False

        _register_headers(args, self.depfile)
        return True

    def __repr__(self) -> str:
        return f"ClangPrecompiledHeader({self.header.rel!r})"


class ClangObject:
    """Rule compiling one translation unit.

    Attributes:
        unit: The translation unit.
        info: Effective compile info (unit merged with linked libraries).
        obj: Object file output.
        json: Compilation database fragment output.
        depfile: Header dependency listing output.
        imports: pkg-config references for compile flags.
        pch: Precompiled header rule this unit uses, if any.
    """

    def __init__(
        self,
        pkgconfig: PkgConfig,
        unit: TranslationUnit,
        info: CompileInfo,
        obj: BuildPath,
        json: BuildPath,
        driver: str,
        *,
        imports: list[Linkable] | None = None,
        pch: ClangPrecompiledHeader | None = None,
        flags: list[str] | None = None,
    ) -> None:
        self.pkgconfig = pkgconfig
        self.unit = unit
        self.info = info
        self.obj = obj
        self.json = json
        self.depfile = obj.with_suffix(".d")
        self.driver = driver
        self.imports = list(imports or [])
        self.pch = pch
        self.flags = list(flags or [])

    def prereqs(self) -> list[AnyPath]:
        prereqs: list[AnyPath] = [self.unit.src]
        if self.pch is not None:
            prereqs.append(self.pch.pch)
        prereqs.extend(_build_paths(self.imports))
        return prereqs

    def targets(self) -> list[BuildPath]:
        return [self.obj, self.json, self.depfile]

    def command(self, args: RecipeArgs) -> list[str]:
        """Compiler arguments, without pkg-config flags."""
        src, obj, json, dep = args.abs_all(
            self.unit.src, self.obj, self.json, self.depfile
        )
        context = CompileContext.from_compile_info(
            self.info, self.unit.language, self.flags
        )

        clang_args = base_clang_args()
        clang_args.extend(["-g", "-c", str(src), "-MJ", str(json)])
        clang_args.extend(["-MD", "-MF", str(dep), "-o", str(obj)])
        clang_args.extend(context.to_args())
        if self.pch is not None:
            clang_args.extend(["-include-pch", str(args.abs(self.pch.pch))])
        return clang_args

    def recipe(self, args: RecipeArgs) -> bool:
        clang_args = self.command(args)

        if self.imports:
            result = self.pkgconfig.cflags(self.imports)
            if not result.ok:
                args.log.write(result.stderr)
                return False
            clang_args.extend(result.flags)

        args.abs(self.obj).parent.mkdir(parents=True, exist_ok=True)
        if not args.spawn(self.driver, clang_args):
            return False

        _register_headers(args, self.depfile)
        return True

    def __repr__(self) -> str:
        return f"ClangObject({self.unit.src.rel!r})"


class ClangImage:
    """Rule linking an executable or a dynamic library.

    Compile requirements were already folded into each object; linking
    only resolves link flags.

    Attributes:
        kind: Executable or dynamic library.
        objs: Object files to link.
        out: Output binary.
        imports: pkg-config references for link flags.
        libraries: Binaries of in-project libraries linked (transitively).
    """

    def __init__(
        self,
        pkgconfig: PkgConfig,
        kind: ImageKind,
        objs: list[BuildPath],
        out: BuildPath,
        driver: str,
        *,
        imports: list[Linkable] | None = None,
        libraries: list[BuildPath] | None = None,
        shared_flag: str = "-shared",
    ) -> None:
        self.pkgconfig = pkgconfig
        self.kind = kind
        self.objs = list(objs)
        self.out = out
        self.driver = driver
        self.imports = list(imports or [])
        self.libraries = list(libraries or [])
        self.shared_flag = shared_flag

    def prereqs(self) -> list[AnyPath]:
        return [*self.objs, *self.libraries, *_build_paths(self.imports)]

    def targets(self) -> list[BuildPath]:
        return [self.out]

    def recipe(self, args: RecipeArgs) -> bool:
        objs = args.abs_all(*self.objs)
        out = args.abs(self.out)

        clang_args = base_clang_args()
        if self.kind is ImageKind.DYNAMIC_LIBRARY:
            clang_args.append(self.shared_flag)
        clang_args.extend(["-o", str(out), *(str(o) for o in objs)])

        if self.imports:
            result = self.pkgconfig.libs(self.imports)
            if not result.ok:
                args.log.write(result.stderr)
                return False
            clang_args.extend(result.flags)

        out.parent.mkdir(parents=True, exist_ok=True)
        return args.spawn(self.driver, clang_args)

    def __repr__(self) -> str:
        return f"ClangImage({self.kind.value}, {self.out.rel!r})"


class ClangToolchain(BaseToolchain):
    """Clang toolchain for C and C++ executables and dynamic libraries.

    Example:
        book = Cookbook(src_dir=".", build_dir="build")
        clang = ClangToolchain(PkgConfig(book))
        clang.add_executable(book, opts)
        clang.add_compile_commands(book)

    Attributes:
        cc: C driver.
        cxx: C++ driver.
        platform: Platform the images are built for.
        compile_commands: Fragments produced by compile rules so far.
    """

    def __init__(
        self,
        pkgconfig: PkgConfig | None = None,
        *,
        cc: str = "clang",
        cxx: str = "clang++",
        platform: Platform | None = None,
    ) -> None:
        super().__init__("clang", pkgconfig)
        self.cc = cc
        self.cxx = cxx
        self.platform = platform or get_platform()
        self.compile_commands: list[BuildPath] = []
        self._pch: dict[str, ClangPrecompiledHeader] = {}

    def driver(self, language: Language) -> str:
        return self.cc if language is Language.C else self.cxx

    def get_shared_library_name(self, name: str) -> str:
        return f"lib{name}{self.platform.shared_lib_suffix}"

    def get_program_name(self, name: str) -> str:
        return f"{name}{self.platform.exe_suffix}"

    def get_compile_flags_for_library(self) -> list[str]:
        """Objects of shared libraries need -fPIC except on macOS."""
        if self.platform.is_posix and not self.platform.is_macos:
            return ["-fPIC"]
        return []

    # =========================================================================
    # Rule construction
    # =========================================================================

    def precompiled_header(
        self,
        book: Cookbook,
        unit: TranslationUnit,
        info: CompileInfo,
        imports: list[Linkable] | None = None,
        flags: list[str] | None = None,
    ) -> ClangPrecompiledHeader:
        """Return the precompiled header rule for ``unit``.

        The rule is created and added to ``book`` the first time a header
        is requested; later requests reuse it.

        Raises:
            ConfigureError: If the header was first requested by a unit of
                a different language or with different compile flags.
        """
        flags = list(flags or [])
        header = unit.precompiled_header
        if header is None:
            raise ValueError(f"{unit.src} has no precompiled header")

        rule = self._pch.get(header.rel)
        if rule is not None:
            if rule.language is not unit.language:
                raise ConfigureError(
                    f"precompiled header {header.rel} is built as "
                    f"{rule.language.value} but {unit.src.rel} is "
                    f"{unit.language.value}"
                )
            if rule.flags != flags:
                raise ConfigureError(
                    f"precompiled header {header.rel} is built with "
                    f"{rule.flags} but {unit.src.rel} is compiled with {flags}"
                )
            return rule

        rule = ClangPrecompiledHeader(
            self.pkgconfig,
            header,
            unit.language,
            info,
            self.driver(unit.language),
            imports,
            flags,
        )
        book.add(rule)
        self._pch[header.rel] = rule
        return rule

    def _add_objects(
        self,
        book: Cookbook,
        opts: ExecutableOpts,
        links: LinkSet,
        flags: list[str],
    ) -> list[BuildPath]:
        lib_info = links.compile_info()
        obj_dir = f"obj.{opts.name}"

        objs: list[BuildPath] = []
        for unit in opts.src:
            lib_info.check_version(unit)
            info = CompileInfo.for_unit(unit).merge(lib_info)

            pch = None
            if unit.precompiled_header is not None:
                pch = self.precompiled_header(
                    book, unit, info, links.imports, flags
                )

            obj = BuildPath.gen(unit.src, ext=".o", under=obj_dir)
            json = BuildPath.gen(unit.src, ext=".json", under=obj_dir)
            rule = ClangObject(
                self.pkgconfig,
                unit,
                info,
                obj,
                json,
                self.driver(unit.language),
                imports=links.imports,
                pch=pch,
                flags=flags,
            )
            book.add(rule)
            self.compile_commands.append(json)
            objs.append(obj)

        if not objs:
            logger.warning(
                "Target '%s' has no sources - only libraries will be linked",
                opts.name,
            )
        return objs

    def _link_driver(self, opts: ExecutableOpts, links: LinkSet) -> str:
        languages = {opts.runtime, runtime_language(opts.src, links.libraries)}
        return self.driver(self.linker_language(languages))

    def add_executable(self, book: Cookbook, opts: ExecutableOpts) -> BuildPath:
        """Add compile rules and the link rule for an executable.

        Raises:
            ConfigureError: On unresolvable libraries or version conflicts.
        """
        links = self.partition_links(opts.link)
        self.pkgconfig.check(links.imports)

        objs = self._add_objects(book, opts, links, variant_flags(opts.is_debug))
        output = opts.output_directory.join(self.get_program_name(opts.name))

        book.add(
            ClangImage(
                self.pkgconfig,
                ImageKind.EXECUTABLE,
                objs,
                output,
                self._link_driver(opts, links),
                imports=links.link_imports(),
                libraries=links.binaries(),
            )
        )
        logger.info("Added executable %s (%s)", opts.name, output.rel)
        return output

    def add_library(self, book: Cookbook, opts: LibraryOpts) -> BuildPath:
        """Add compile rules, link rule and package descriptor for a library.

        Raises:
            ConfigureError: On unresolvable libraries or version conflicts.
        """
        links = self.partition_links(opts.link)
        self.pkgconfig.check(links.imports)

        output = opts.output_directory.join(self.get_shared_library_name(opts.name))
        flags = variant_flags(opts.is_debug) + self.get_compile_flags_for_library()
        objs = self._add_objects(book, opts, links, flags)

        exported = self._exported_info(opts).merge(links.compile_info())
        pkgconfig_path = self.pkgconfig.add_package(
            name=opts.name,
            version=opts.version,
            description=opts.description,
            cflags=format_cflags(exported.include_paths, exported.definitions),
            libs=format_libs(str(book.abs(opts.output_directory)), opts.name),
        )

        runtime = runtime_language(opts.src, links.libraries)
        book.add(
            ClangImage(
                self.pkgconfig,
                ImageKind.DYNAMIC_LIBRARY,
                objs,
                output,
                self._link_driver(opts, links),
                imports=links.link_imports(),
                libraries=links.binaries(),
                shared_flag=self.platform.shared_lib_flag,
            )
        )

        self.register_library(
            LibraryArtifact(
                name=opts.name,
                binary_path=output,
                pkgconfig_path=pkgconfig_path,
                compile_info=exported,
                runtime=runtime,
                libraries=tuple(links.libraries),
            )
        )
        return output

    def add_compile_commands(self, book: Cookbook) -> BuildPath:
        """Add the rule aggregating every fragment produced so far."""
        rule = CompileCommandsRule(self.compile_commands)
        book.add(rule)
        return rule.json

    @staticmethod
    def _exported_info(opts: LibraryOpts) -> CompileInfo:
        """Public requirements of a library: its public paths/definitions
        and the highest version each language is compiled with."""
        c_version: CVersion | None = None
        cxx_version: CxxVersion | None = None
        for unit in opts.src:
            if isinstance(unit.version, CVersion):
                c_version = (
                    unit.version
                    if c_version is None
                    else max_version(c_version, unit.version)
                )
            else:
                cxx_version = (
                    unit.version
                    if cxx_version is None
                    else max_version(cxx_version, unit.version)
                )
        return CompileInfo.exported(
            include_paths=opts.include_paths,
            definitions=opts.definitions,
            c_version=c_version,
            cxx_version=cxx_version,
        )
