"""
Tree and graph models produced by modgraph.

:class:`DependencyNode` is the hierarchical form built from the resolver's
tables. :class:`FlowGraph` is the flattened form handed to renderers: one
:class:`FlowNode` per module version and one :class:`FlowEdge` per
parent/child pair.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Set, Tuple


@dataclass(frozen=True)
class DependencyNode:
    """
    A module version in a dependency tree.

    Attributes:
        id: ``path@version``.
        path: Normalized module path.
        release: Selected version.
        size: Module archive size in bytes, when tracked.
        children: Direct dependencies, in manifest order.
    """

    id: str
    path: str
    release: str
    size: Optional[int] = None
    children: Tuple["DependencyNode", ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self) -> Iterator["DependencyNode"]:
        """Yield this node and every descendant, depth-first, pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable nested representation."""
        data: Dict[str, Any] = {
            "id": self.id,
            "path": self.path,
            "release": self.release,
        }
        if self.size is not None:
            data["size"] = self.size
        data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass
class FlowNode:
    """
    A graph node for a renderer.

    ``x`` and ``y`` are only a placement seed; the layout engine of the
    renderer decides final coordinates.
    """

    id: str
    path: str
    release: str
    size: Optional[int] = None
    x: int = 0
    y: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "path": self.path,
            "release": self.release,
            "x": self.x,
            "y": self.y,
        }
        if self.size is not None:
            data["size"] = self.size
        return data


@dataclass(frozen=True)
class FlowEdge:
    """A directed ``source → target`` edge, keyed ``"sourceId-targetId"``."""

    id: str
    source: str
    target: str

    @classmethod
    def between(cls, source: str, target: str) -> "FlowEdge":
        return cls(id=edge_id(source, target), source=source, target=target)

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "source": self.source, "target": self.target}


def edge_id(source: str, target: str) -> str:
    """Return the key of the edge from *source* to *target*."""
    return f"{source}-{target}"


@dataclass
class FlowGraph:
    """Flattened dependency graph; node and edge ids are unique keys."""

    nodes: Dict[str, FlowNode] = field(default_factory=dict)
    edges: Dict[str, FlowEdge] = field(default_factory=dict)

    def node_ids(self) -> Set[str]:
        return set(self.nodes)

    def edge_ids(self) -> Set[str]:
        return set(self.edges)

    def parents_of(self, node_id: str) -> Set[str]:
        """Return the ids of nodes with an edge into *node_id*."""
        return {edge.source for edge in self.edges.values() if edge.target == node_id}

    def total_size(self) -> int:
        """Sum of known node sizes in bytes."""
        return sum(node.size for node in self.nodes.values() if node.size)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes.values()],
            "edges": [edge.to_dict() for edge in self.edges.values()],
        }
