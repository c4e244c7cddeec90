"""
Executable module for modgraph.

Running:
    python -m modgraph

is equivalent to:
    modgraph

This module simply forwards execution to the CLI entrypoint defined in
`modgraph.cli`.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Write a short diagnostic when the CLI cannot be imported."""
    sys.stderr.write("modgraph CLI could not be loaded.\n")
    sys.stderr.write(f"Python version : {sys.version}\n")
    try:
        from modgraph.__version__ import __version__

        sys.stderr.write(f"modgraph version: {__version__}\n")
    except ImportError:
        sys.stderr.write("modgraph version: <unknown>\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """
    Main entrypoint when executing `python -m modgraph`.

    Returns:
        Exit code returned by the CLI.
    """
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from modgraph.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
