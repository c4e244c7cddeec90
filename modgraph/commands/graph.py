"""Graph command implementation for modgraph.

Resolves the dependency graph of one Go module version using Minimal
Version Selection against a GOPROXY server and prints it.

The command wires three pieces together:

1. **HTTPClient**: pooled async HTTP with retries.
2. **ModuleMetadataClient**: cached proxy lookups (versions, ``go.mod``
   requirements, archive sizes).
3. **GraphLoader**: resolves the root, runs the resolver, builds the
   bounded tree and flattens it into nodes and edges.

Typical usage::

    # Latest version, printed as a tree
    $ modgraph graph github.com/spf13/cobra

    # A fixed version with archive sizes
    $ modgraph graph github.com/spf13/cobra@v1.8.0 --sizes

    # Nodes and edges for a renderer
    $ modgraph graph golang.org/x/tools --format json > graph.json
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from typing import Any, Dict, List, Optional

from modgraph.core import GraphLoader, GraphResult, ModuleMetadataClient
from modgraph.exceptions import ModGraphError
from modgraph.context import pass_context, ModGraphContext
from modgraph.utils import (
    HTTPClient,
    format_bytes,
    get_logger,
    print_dependency_tree,
    print_error,
    print_table,
    print_warning,
)

logger = get_logger("commands.graph")

# Rows shown in the "most required" section of ``--format stats``
_TOP_DEPENDENCIES = 10


@click.command()
@click.argument("module")
@click.option(
    "--sizes/--no-sizes",
    default=None,
    help="Fetch module archive sizes (overrides configuration).",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=0),
    default=None,
    help="Depth bound of the dependency tree (overrides configuration).",
)
@click.option(
    "--proxy",
    "proxy_url",
    default=None,
    envvar="MODGRAPH_PROXY_URL",
    help="GOPROXY base URL (overrides configuration).",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["tree", "json", "stats"], case_sensitive=False),
    default="tree",
    help="Output format.",
)
@pass_context
def graph(
    ctx: ModGraphContext,
    module: str,
    sizes: Optional[bool],
    max_depth: Optional[int],
    proxy_url: Optional[str],
    format: str,
) -> None:
    """Resolve and display the dependency graph of MODULE[@VERSION].

    Without a version the latest release known to the proxy is used.
    Each module path appears once, at the version Minimal Version
    Selection picks for it.

    Exits:
        0 on success, 1 if the root module or version cannot be resolved.
    """
    config = ctx.config
    include_sizes = config.include_sizes if sizes is None else sizes
    depth = config.max_depth if max_depth is None else max_depth
    proxy = proxy_url or config.proxy_url

    if not module.strip():
        raise click.BadParameter("module path must not be empty", param_hint="MODULE")

    try:
        result = asyncio.run(
            _graph_async(
                module,
                proxy_url=proxy,
                include_sizes=include_sizes,
                max_depth=depth,
                timeout=config.timeout,
            )
        )
    except ModGraphError as e:
        print_error(f"{e}")
        sys.exit(1)

    if result is None:
        print_warning("No graph was produced")
        sys.exit(1)

    format = format.lower()
    if format == "json":
        _display_json(result)
    elif format == "stats":
        _display_stats(result, include_sizes=include_sizes)
    else:
        print_dependency_tree(result.tree)


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _graph_async(
    module: str,
    *,
    proxy_url: str,
    include_sizes: bool,
    max_depth: int,
    timeout: int,
) -> Optional[GraphResult]:
    """Open an HTTP session and run one graph load."""
    logger.info("Resolving %s via %s", module, proxy_url)

    async with HTTPClient(timeout=timeout) as http:
        client = ModuleMetadataClient(http, proxy_url=proxy_url)
        loader = GraphLoader(client, include_sizes=include_sizes, max_depth=max_depth)
        return await loader.load(module)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def _display_json(result: GraphResult) -> None:
    """Print the root, nested tree and flat graph as one JSON document.

    Example::

        {
          "root": "github.com/spf13/cobra@v1.8.0",
          "tree": {"id": "...", "children": [...]},
          "graph": {"nodes": [...], "edges": [...]}
        }
    """
    data = {
        "root": result.root.id,
        "tree": result.tree.to_dict(),
        "graph": result.graph.to_dict(),
    }
    print(json.dumps(data, indent=2))


def _display_stats(result: GraphResult, *, include_sizes: bool) -> None:
    """Print a summary table and the most required modules."""
    flow = result.graph
    sources = {edge.source for edge in flow.edges.values()}
    leaves = sum(1 for node_id in flow.nodes if node_id not in sources)

    summary: List[Dict[str, Any]] = [
        {"Metric": "Root", "Value": result.root.id},
        {"Metric": "Modules", "Value": len(flow.nodes)},
        {"Metric": "Edges", "Value": len(flow.edges)},
        {"Metric": "Leaves", "Value": leaves},
    ]
    if include_sizes:
        summary.append({"Metric": "Total size", "Value": format_bytes(flow.total_size())})

    print_table(
        summary,
        headers=["Metric", "Value"],
        title="Dependency Graph",
        column_styles={"Metric": {"style": "bold"}},
    )

    ranked = sorted(
        ((len(flow.parents_of(node_id)), node_id) for node_id in flow.nodes if node_id != result.tree.id),
        key=lambda item: (-item[0], item[1]),
    )[:_TOP_DEPENDENCIES]

    if ranked:
        print_table(
            [{"Module": node_id, "Required by": count} for count, node_id in ranked],
            headers=["Module", "Required by"],
            title="Most Required",
            column_styles={"Required by": {"justify": "right"}},
        )
