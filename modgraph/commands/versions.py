"""Versions command implementation for modgraph.

Lists the published versions of a Go module, newest first.

Typical usage::

    $ modgraph versions golang.org/x/mod
    $ modgraph versions github.com/spf13/cobra --format json
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from typing import List, Optional

from modgraph.core import ModuleMetadataClient, load_releases
from modgraph.context import pass_context, ModGraphContext
from modgraph.exceptions import ParseError
from modgraph.utils import (
    HTTPClient,
    get_logger,
    get_raw_console,
    parse_module_input,
    print_error,
)

logger = get_logger("commands.versions")


@click.command()
@click.argument("module")
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
    type=click.Choice(["simple", "json"], case_sensitive=False),
    default="simple",
    help="Output format.",
)
@pass_context
def versions(
    ctx: ModGraphContext,
    module: str,
    proxy_url: Optional[str],
    format: str,
) -> None:
    """List the published versions of MODULE, newest first.

    A trailing ``@version`` in MODULE is ignored.

    Exits:
        0 when at least one version was found, 1 otherwise.
    """
    try:
        path, _ = parse_module_input(module)
    except ParseError as e:
        raise click.BadParameter(str(e), param_hint="MODULE") from e

    proxy = proxy_url or ctx.config.proxy_url
    releases = asyncio.run(_versions_async(path, proxy_url=proxy, timeout=ctx.config.timeout))

    if not releases:
        print_error(f"No versions found for {path}")
        sys.exit(1)

    if format.lower() == "json":
        print(json.dumps({"module": path, "versions": releases}, indent=2))
        return

    console = get_raw_console()
    for release in releases:
        console.print(release, markup=False)


async def _versions_async(path: str, *, proxy_url: str, timeout: int) -> List[str]:
    logger.info("Listing versions of %s via %s", path, proxy_url)
    async with HTTPClient(timeout=timeout) as http:
        client = ModuleMetadataClient(http, proxy_url=proxy_url)
        return await load_releases(client, path)
