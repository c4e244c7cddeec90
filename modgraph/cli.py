"""
Command-line interface for modgraph.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

import click

from modgraph.config import load_config
from modgraph.__version__ import __version__
from modgraph.context import ModGraphContext
from modgraph.exceptions import ConfigError, ModGraphError
from modgraph.utils.logger import get_logger, setup_logging, verbosity_to_level
from modgraph.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="MODGRAPH_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="MODGRAPH_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="modgraph",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """modgraph: dependency graphs for Go modules.

    \b
    Available commands:
      modgraph graph MODULE[@VERSION]   Resolve and show a dependency graph
      modgraph versions MODULE          List published versions

    \b
    Examples:
      modgraph graph github.com/spf13/cobra
      modgraph graph github.com/spf13/cobra@v1.8.0 --sizes
      modgraph -v versions golang.org/x/mod

    Use ``modgraph COMMAND --help`` for command-specific options.
    """
    # Respect NO_COLOR for Rich and downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose >= 2)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    modgraph_ctx = ModGraphContext()
    modgraph_ctx.config_path = config or loaded_config.source_path
    modgraph_ctx.color = color
    modgraph_ctx.verbose = verbose
    modgraph_ctx.config = loaded_config
    ctx.obj = modgraph_ctx

    logger.debug("modgraph v%s", __version__)
    logger.debug("Config path: %s", modgraph_ctx.config_path)
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


# Register CLI subcommands
try:
    from modgraph.commands.graph import graph
    from modgraph.commands.versions import versions

    cli.add_command(graph)
    cli.add_command(versions)

except ImportError as exc:
    sys.stderr.write(f"FATAL: Failed to import CLI commands: {exc}\n")
    sys.exit(1)


def main() -> int:
    """Main entry point for the modgraph CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except ModGraphError as exc:
        print_error(str(exc))
        logger.debug(
            "ModGraphError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except SystemExit as exc:
        if exc.code is None:
            return 0
        return exc.code if isinstance(exc.code, int) else 1

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
