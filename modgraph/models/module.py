"""
Module reference and requirement models for modgraph.

A :class:`ModuleReference` names one version of one module; a
:class:`Requirement` is one ``require`` line of a module's ``go.mod``.
Both normalize their path on construction so they can be used directly
as table keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from modgraph.constants import LATEST_VERSION
from modgraph.utils.module_path import normalize_module_path


def module_id(path: str, version: str) -> str:
    """Return the ``path@version`` identifier used for tree and graph nodes."""
    return f"{path}@{version}"


@dataclass(frozen=True)
class ModuleReference:
    """
    A module path pinned to one version.

    Attributes:
        path: Normalized module path (lower-case, unquoted).
        version: Version string, e.g. ``"v1.8.0"``.
    """

    path: str
    version: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_module_path(self.path))

    @property
    def id(self) -> str:
        """Node identifier, ``path@version``."""
        return module_id(self.path, self.version)

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True)
class Requirement:
    """
    One requirement declared in a module manifest.

    Attributes:
        path: Normalized path of the required module.
        version_constraint: Version written in the manifest, or ``None``
            when the line carries no version.
    """

    path: str
    version_constraint: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_module_path(self.path))

    @property
    def effective_version(self) -> str:
        """The version to enqueue: the constraint, or ``"latest"``."""
        return self.version_constraint or LATEST_VERSION

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {"path": self.path, "version": self.version_constraint}

    def __str__(self) -> str:
        if self.version_constraint:
            return f"{self.path} {self.version_constraint}"
        return self.path
