"""
Unified data model exports for modgraph.

Example:
    >>> from modgraph.models import ModuleReference, Requirement, FlowGraph
"""

from __future__ import annotations

from modgraph.models.module import ModuleReference, Requirement, module_id
from modgraph.models.graph import (
    DependencyNode,
    FlowEdge,
    FlowGraph,
    FlowNode,
    edge_id,
)

__all__ = [
    "ModuleReference",
    "Requirement",
    "module_id",
    "DependencyNode",
    "FlowNode",
    "FlowEdge",
    "FlowGraph",
    "edge_id",
]
