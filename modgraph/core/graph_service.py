"""Graph loading service for modgraph.

Glues the pieces together for callers: resolve a root (``latest`` when no
version is given), run the resolver, build the tree and flatten it.

:class:`GraphLoader` adds the "last started load wins" contract used by
interactive front-ends. Starting a new load supersedes the previous one;
a superseded load keeps running until its next checkpoint and then
returns ``None`` instead of a result. Checkpoints sit before the version
lookup, before graph construction and after graph construction; the
resolver loop itself is never interrupted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from modgraph.constants import DEFAULT_INCLUDE_SIZES, DEFAULT_MAX_DEPTH
from modgraph.core.flattener import GraphFlattener
from modgraph.core.resolver import ResolutionEngine
from modgraph.core.tree_builder import TreeBuilder
from modgraph.exceptions import ModGraphError, ModuleNotFound, ResolutionError
from modgraph.models.graph import DependencyNode, FlowGraph
from modgraph.models.module import ModuleReference
from modgraph.utils.logger import get_logger
from modgraph.utils.module_path import normalize_module_path, parse_module_input
from modgraph.utils.version_utils import sort_versions

if TYPE_CHECKING:
    from modgraph.core.metadata_client import ModuleMetadataClient

logger = get_logger("graph_service")

__all__ = [
    "GraphLoader",
    "GraphResult",
    "get_dependency_graph",
    "load_releases",
    "resolve_root",
]


@dataclass(frozen=True)
class GraphResult:
    """Output of one completed graph load."""

    root: ModuleReference
    tree: DependencyNode
    graph: FlowGraph


async def resolve_root(
    client: "ModuleMetadataClient",
    path: str,
    release: Optional[str] = None,
) -> ModuleReference:
    """Return the root reference, asking the proxy for ``latest`` if needed.

    Raises:
        ModuleNotFound: The proxy has no record of *path*.
        ResolutionError: The latest version could not be determined for
            another reason.
    """
    normalized = normalize_module_path(path)
    if release:
        return ModuleReference(normalized, release)

    try:
        latest = await client.resolve_latest_version(normalized)
    except ModuleNotFound:
        raise
    except ModGraphError as exc:
        raise ResolutionError(
            f"Failed to get latest release for {normalized}: {exc}",
            module_path=normalized,
            original_error=exc,
        ) from exc

    return ModuleReference(normalized, latest)


async def get_dependency_graph(
    client: "ModuleMetadataClient",
    path: str,
    release: Optional[str] = None,
    include_sizes: bool = DEFAULT_INCLUDE_SIZES,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> DependencyNode:
    """Resolve *path* (at *release*, or latest) and return its dependency tree."""
    root = await resolve_root(client, path, release)
    context = await ResolutionEngine(client, include_sizes=include_sizes).resolve(root)
    return TreeBuilder(max_depth=max_depth).build_from(context)


async def load_releases(client: "ModuleMetadataClient", path: str) -> List[str]:
    """Return the releases of *path*, newest first.

    Falls back to the latest version when the proxy lists none. Never
    raises; an unknown module or a network failure yields ``[]``.
    """
    normalized = normalize_module_path(path)
    try:
        versions = await client.list_versions(normalized)
    except ModGraphError as exc:
        logger.warning("Could not load versions for %s: %s", normalized, exc)
        return []

    if versions:
        return sort_versions(versions)

    try:
        return [await client.resolve_latest_version(normalized)]
    except ModGraphError as exc:
        logger.debug("No latest version for %s: %s", normalized, exc)
        return []


class GraphLoader:
    """Load dependency graphs where only the most recent request counts.

    Args:
        client: Metadata client shared by every load.
        include_sizes: Fetch module archive sizes.
        max_depth: Depth bound of the dependency tree.

    Example::

        loader = GraphLoader(client)
        result = await loader.load("github.com/spf13/cobra@v1.8.0")
        if result is not None:
            print(len(result.graph.nodes))
    """

    def __init__(
        self,
        client: "ModuleMetadataClient",
        include_sizes: bool = DEFAULT_INCLUDE_SIZES,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.client = client
        self.include_sizes = include_sizes
        self.max_depth = max_depth
        self._generation = 0
        self._running: Optional[int] = None

    @property
    def loading(self) -> bool:
        """True while the most recently started load is still running."""
        return self._running is not None

    def cancel(self) -> None:
        """Supersede the running load, if any, without starting a new one."""
        self._generation += 1
        self._running = None

    async def load(
        self,
        module_input: str,
        selected_release: Optional[str] = None,
    ) -> Optional[GraphResult]:
        """Load the graph for ``path[@version]`` input.

        A version in *module_input* wins over *selected_release*; with
        neither, the latest version is used.

        Returns:
            The :class:`GraphResult`, or ``None`` when the input is blank
            or this load was superseded before it finished.

        Raises:
            ParseError: *module_input* has no module path.
            ModuleNotFound: The root module does not exist.
            ReleaseNotFound: The root version does not exist.
            ResolutionError: The root could not be resolved otherwise.
        """
        if not module_input.strip():
            return None

        self._generation += 1
        generation = self._generation
        self._running = generation

        try:
            path, release = parse_module_input(module_input)

            if self._superseded(generation):
                return None
            root = await resolve_root(self.client, path, release or selected_release)

            if self._superseded(generation):
                return None
            engine = ResolutionEngine(self.client, include_sizes=self.include_sizes)
            context = await engine.resolve(root)
            tree = TreeBuilder(max_depth=self.max_depth).build_from(context)
            graph = GraphFlattener().flatten(tree)

            if self._superseded(generation):
                return None

            logger.info("Loaded %d dependencies for %s", len(graph.nodes), root)
            return GraphResult(root=root, tree=tree, graph=graph)
        except ModGraphError:
            # Errors of a superseded load are dropped along with its output
            if self._superseded(generation):
                return None
            raise
        finally:
            if self._running == generation:
                self._running = None

    def _superseded(self, generation: int) -> bool:
        if generation != self._generation:
            logger.debug("Discarding superseded graph load #%d", generation)
            return True
        return False
