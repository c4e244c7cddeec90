"""Dependency tree construction for modgraph.

Turns the tables of a :class:`~modgraph.core.resolver.ResolutionContext`
into an immutable :class:`~modgraph.models.graph.DependencyNode` tree.
Every child uses the version *selected* for its path, never the version
literally written in the parent's manifest.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence, Set

from modgraph.constants import DEFAULT_MAX_DEPTH, UNKNOWN_VERSION
from modgraph.core.resolver import ResolutionContext
from modgraph.models.graph import DependencyNode
from modgraph.models.module import Requirement, module_id
from modgraph.utils.logger import get_logger
from modgraph.utils.module_path import normalize_module_path

logger = get_logger("tree_builder")

__all__ = ["TreeBuilder"]


class TreeBuilder:
    """Build dependency trees bounded by depth and cycle detection.

    A module version already present in the tree, or one found deeper
    than ``max_depth``, is emitted as a leaf. Requirements whose target
    was never selected are left out.

    Args:
        max_depth: Deepest level whose children are still expanded
            (the root is level ``0``).
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        self.max_depth = max_depth

    def build_from(self, context: ResolutionContext) -> DependencyNode:
        """Build the tree rooted at the context's root module."""
        return self.build(
            context.root.path,
            context.selection,
            context.requirements,
            sizes=context.sizes,
        )

    def build(
        self,
        path: str,
        selection: Mapping[str, str],
        requirements: Mapping[str, Sequence[Requirement]],
        sizes: Optional[Mapping[str, Optional[int]]] = None,
        visited: Optional[Set[str]] = None,
        depth: int = 0,
    ) -> DependencyNode:
        """Build the subtree rooted at *path*.

        Args:
            path: Module path of the subtree root.
            selection: Path → selected version.
            requirements: Path → requirements of the selected version.
            sizes: Path → archive size, when tracked.
            visited: Node ids already expanded; shared across the whole
                build and updated in place.
            depth: Level of *path* in the tree.

        Returns:
            The subtree as a :class:`DependencyNode`.
        """
        if visited is None:
            visited = set()

        path = normalize_module_path(path)
        version = selection.get(path, UNKNOWN_VERSION)
        node_id = module_id(path, version)
        size = sizes.get(path) if sizes else None

        if node_id in visited or depth > self.max_depth:
            if depth > self.max_depth:
                logger.debug("Depth bound reached at %s (depth %d)", node_id, depth)
            return DependencyNode(id=node_id, path=path, release=version, size=size)

        visited.add(node_id)

        children: List[DependencyNode] = []
        for requirement in requirements.get(path, ()):
            child_path = normalize_module_path(requirement.path)
            if child_path not in selection:
                continue
            children.append(
                self.build(
                    child_path,
                    selection,
                    requirements,
                    sizes=sizes,
                    visited=visited,
                    depth=depth + 1,
                )
            )

        return DependencyNode(
            id=node_id,
            path=path,
            release=version,
            size=size,
            children=tuple(children),
        )
