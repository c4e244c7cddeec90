"""
Core functionality exports for modgraph.

This module provides convenient access to the core subsystems of modgraph.
Importing from here keeps user-facing imports clean and stable:

    from modgraph.core import ResolutionEngine, TreeBuilder, GraphFlattener
"""

from __future__ import annotations

from modgraph.core.gomod import parse_requirements
from modgraph.core.metadata_client import ModuleMetadataClient
from modgraph.core.resolver import ResolutionContext, ResolutionEngine, WorkItem
from modgraph.core.tree_builder import TreeBuilder
from modgraph.core.flattener import GraphFlattener
from modgraph.core.graph_service import (
    GraphLoader,
    GraphResult,
    get_dependency_graph,
    load_releases,
    resolve_root,
)

__all__ = [
    "parse_requirements",
    "ModuleMetadataClient",
    "ResolutionContext",
    "ResolutionEngine",
    "WorkItem",
    "TreeBuilder",
    "GraphFlattener",
    "GraphLoader",
    "GraphResult",
    "get_dependency_graph",
    "load_releases",
    "resolve_root",
]
