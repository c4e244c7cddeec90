"""Graph flattening for modgraph.

Collapses a :class:`~modgraph.models.graph.DependencyNode` tree into a
:class:`~modgraph.models.graph.FlowGraph`: one node per module version
and one edge per distinct parent/child pair, so a module required by
several parents keeps an edge from each of them.
"""

from __future__ import annotations

from typing import Set

from modgraph.constants import LAYOUT_LANES, LAYOUT_X_SPACING, LAYOUT_Y_SPACING
from modgraph.models.graph import DependencyNode, FlowEdge, FlowGraph, FlowNode, edge_id

__all__ = ["GraphFlattener"]


class GraphFlattener:
    """Flatten dependency trees into deduplicated node/edge maps.

    Nodes get a coarse placement seed: ``y`` grows with tree depth and
    ``x`` follows a counter that rotates through a few lanes. A renderer
    is expected to run its own layout on top.
    """

    def flatten(self, root: DependencyNode) -> FlowGraph:
        """Return the graph reachable from *root*."""
        graph = FlowGraph()
        self._visit(root, graph, visited=set(), level=0, offset=0)
        return graph

    def _visit(
        self,
        node: DependencyNode,
        graph: FlowGraph,
        visited: Set[str],
        level: int,
        offset: int,
    ) -> None:
        if node.id not in visited:
            visited.add(node.id)
            graph.nodes[node.id] = FlowNode(
                id=node.id,
                path=node.path,
                release=node.release,
                size=node.size,
                x=offset * LAYOUT_X_SPACING,
                y=level * LAYOUT_Y_SPACING,
            )

        for child in node.children:
            key = edge_id(node.id, child.id)
            if key not in graph.edges:
                graph.edges[key] = FlowEdge.between(node.id, child.id)
            # Children are walked even when already placed so that their
            # own edges are collected; the tree is finite, so this ends.
            self._visit(
                child,
                graph,
                visited,
                level=level + 1,
                offset=offset + len(graph.nodes) % LAYOUT_LANES,
            )
