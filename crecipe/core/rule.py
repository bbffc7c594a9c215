# SPDX-License-Identifier: MIT
"""Rule protocol and the containers an executor needs to run rules.

A Rule declares the files it needs (prereqs), the files it produces
(targets), and a recipe that produces them. crecipe only constructs
rules; deciding when to run a recipe is the job of a build-graph
executor. The Cookbook collects rules for the executor, and RecipeArgs
is what the executor hands to a recipe when running it.
"""

from __future__ import annotations

import io
import logging
import shlex
import subprocess
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from crecipe.core.errors import BuilderError
from crecipe.core.paths import AnyPath, BuildPath, SourcePath

logger = logging.getLogger(__name__)

# Signature of subprocess.run, injectable for tests and executors.
Runner = Callable[..., "subprocess.CompletedProcess[str]"]


@runtime_checkable
class Rule(Protocol):
    """Protocol for rules.

    A rule's prerequisites must be up to date before its recipe runs;
    its targets are only valid if the recipe returned True.
    """

    def prereqs(self) -> list[AnyPath]:
        """Files this rule reads."""
        ...

    def targets(self) -> list[BuildPath]:
        """Files this rule produces."""
        ...

    def recipe(self, args: RecipeArgs) -> bool:
        """Produce the targets. Returns True on success."""
        ...


class Cookbook:
    """Collection of rules plus the directories their paths resolve against.

    Example:
        book = Cookbook(src_dir=Path("."), build_dir=Path("build"))
        book.add(rule)
        for rule in book.rules:
            ...

    Attributes:
        src_dir: Absolute project source directory.
        build_dir: Absolute build output directory.
    """

    def __init__(self, src_dir: Path | str, build_dir: Path | str) -> None:
        self.src_dir = Path(src_dir).absolute()
        self.build_dir = Path(build_dir).absolute()
        self._rules: list[Rule] = []
        self._producers: dict[str, Rule] = {}

    def add(self, rule: Rule) -> Rule:
        """Register a rule.

        Raises:
            BuilderError: If another rule already produces one of its targets.
        """
        for target in rule.targets():
            existing = self._producers.get(target.rel)
            if existing is not None and existing is not rule:
                raise BuilderError(
                    f"{target.rel} is already produced by {existing!r}"
                )
        for target in rule.targets():
            self._producers[target.rel] = rule
        self._rules.append(rule)
        logger.debug("Added rule %r", rule)
        return rule

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def rule_for(self, path: BuildPath) -> Rule | None:
        """Return the rule producing ``path``, if any."""
        return self._producers.get(path.rel)

    def abs(self, path: AnyPath) -> Path:
        if isinstance(path, SourcePath):
            return self.src_dir / path.rel
        if isinstance(path, BuildPath):
            return self.build_dir / path.rel
        raise TypeError(f"not a SourcePath or BuildPath: {path!r}")

    def abs_all(self, *paths: AnyPath) -> list[Path]:
        return [self.abs(p) for p in paths]


class RecipeArgs:
    """Services available to a running recipe.

    An executor creates one RecipeArgs per recipe invocation. Recipes
    use it to resolve paths, spawn tools, report diagnostics and register
    prerequisites discovered while running (e.g. headers from a depfile).

    Attributes:
        book: The cookbook the rule belongs to.
        log: Text buffer receiving tool diagnostics.
        postreqs: Prerequisites registered by the recipe.
    """

    def __init__(
        self,
        book: Cookbook,
        *,
        runner: Runner = subprocess.run,
        log: io.StringIO | None = None,
    ) -> None:
        self.book = book
        self.log = log if log is not None else io.StringIO()
        self.postreqs: list[Path] = []
        self._runner = runner

    def abs(self, path: AnyPath) -> Path:
        return self.book.abs(path)

    def abs_all(self, *paths: AnyPath) -> list[Path]:
        return self.book.abs_all(*paths)

    def add_postreq(self, path: Path | str) -> None:
        """Register an additional input of the running rule."""
        self.postreqs.append(Path(path))

    def spawn(self, cmd: str, args: Iterable[Any]) -> bool:
        """Run a tool and wait for it.

        Standard error is appended to ``log`` unmodified.

        Args:
            cmd: Executable name or path.
            args: Argument vector (converted with str()).

        Returns:
            True if the tool exited with status 0.
        """
        argv = [cmd, *(str(a) for a in args)]
        logger.debug("Running: %s", shlex.join(argv))
        result = self._runner(argv, capture_output=True, text=True)
        if result.stderr:
            self.log.write(result.stderr)
        if result.returncode != 0:
            logger.debug("%s exited with status %d", cmd, result.returncode)
            return False
        return True
