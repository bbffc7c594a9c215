# SPDX-License-Identifier: MIT
"""The dependency manifest: external libraries a project may link.

The manifest is a JSON file in the project's source directory:

    {
        "dependencies": {
            "zlib": ">= 1.2",
            "sqlite3": ">= 3.30"
        }
    }

It is read once, on first use, and never modified.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from crecipe.core.errors import ConfigureError, UnknownDependencyError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "pkgconfig.json"


class DependencyManifest:
    """Lazily loaded mapping of library name -> version constraint.

    Attributes:
        path: Location of the manifest file.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._dependencies: dict[str, str] | None = None

    @classmethod
    def in_dir(cls, directory: Path | str) -> DependencyManifest:
        return cls(Path(directory) / MANIFEST_NAME)

    @property
    def dependencies(self) -> dict[str, str]:
        """The manifest's dependencies, loaded on first access.

        A missing manifest is an empty one.

        Raises:
            ConfigureError: If the file is not valid JSON or has the
                wrong shape.
        """
        if self._dependencies is None:
            self._dependencies = self._load()
        return self._dependencies

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            logger.debug("No dependency manifest at %s", self.path)
            return {}

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise ConfigureError(f"cannot read {self.path}: {e}") from e

        deps = data.get("dependencies", {}) if isinstance(data, dict) else None
        if not isinstance(deps, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in deps.items()
        ):
            raise ConfigureError(
                f"{self.path}: 'dependencies' must map library names to "
                "version constraint strings"
            )

        logger.debug("Loaded %d dependencies from %s", len(deps), self.path)
        return dict(deps)

    def __contains__(self, name: str) -> bool:
        return name in self.dependencies

    def versioned_name(self, name: str) -> str:
        """Return the pkg-config query for ``name`` (e.g. ``"zlib >= 1.2"``).

        Raises:
            UnknownDependencyError: If ``name`` is not in the manifest.
        """
        constraint = self.dependencies.get(name)
        if constraint is None:
            raise UnknownDependencyError(name, str(self.path))
        constraint = constraint.strip()
        return f"{name} {constraint}" if constraint else name
