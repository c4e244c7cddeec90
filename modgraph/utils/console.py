"""
Console output utilities for modgraph using Rich.

This module provides user-facing output helpers for CLI commands.
For diagnostic or debug output, use :mod:`modgraph.utils.logger`.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Callable, Dict, List, Optional

from rich.tree import Tree
from rich.table import Table
from rich.theme import Theme
from rich.console import Console

from modgraph.models.graph import DependencyNode

# ---------------------------------------------------------------------------
# Theme configuration
# ---------------------------------------------------------------------------

MODGRAPH_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "module": "bold cyan",
        "release": "green",
    }
)

# Upper bounds in MiB and the style used below each bound
_SIZE_STYLES = (
    (1, "green"),
    (5, "yellow"),
    (10, "dark_orange"),
    (25, "red"),
)
_LARGEST_SIZE_STYLE = "bold red"

# ---------------------------------------------------------------------------
# Console lifecycle management
# ---------------------------------------------------------------------------

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return a singleton Rich Console instance."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=MODGRAPH_THEME,
                    no_color=not use_color,
                    highlight=False,
                )
    return _console


def reconfigure_console() -> None:
    """Drop the cached console so the next call re-reads ``NO_COLOR``."""
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    """Return the underlying Rich Console instance."""
    return _get_console()


# ---------------------------------------------------------------------------
# Status message helpers
# ---------------------------------------------------------------------------


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    """Print an error message."""
    _get_console().print(f"{prefix} {message}", style="error", markup=False)


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    """Print a warning message."""
    _get_console().print(f"{prefix} {message}", style="warning", markup=False)


# ---------------------------------------------------------------------------
# Sizes
# ---------------------------------------------------------------------------


def format_bytes(size: int) -> str:
    """Format a byte count for humans.

    Examples:
        >>> format_bytes(0)
        '0 B'
        >>> format_bytes(1536)
        '1.5 KB'
        >>> format_bytes(5 * 1024 * 1024)
        '5 MB'
    """
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(units) - 1:
        exponent += 1
    value = round(size / (1024**exponent), 1)
    text = f"{value:g}" if value != int(value) else str(int(value))
    return f"{text} {units[exponent]}"


def size_style(size: int) -> str:
    """Return a Rich style that grows hotter with module size."""
    mib = size / (1024 * 1024)
    for bound, style in _SIZE_STYLES:
        if mib < bound:
            return style
    return _LARGEST_SIZE_STYLE


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
    row_styler: Optional[Callable[[Dict[str, Any]], Optional[str]]] = None,
) -> None:
    """Render structured data as a Rich table.

    Args:
        data: List of row dictionaries.
        headers: Column order. Defaults to keys of the first row.
        title: Optional table title.
        caption: Optional table caption.
        column_styles: Per-column style configuration.
        row_styler: Optional callback returning a row style.
    """
    if not data:
        return

    if headers is None:
        headers = list(data[0].keys())

    table = Table(title=title, caption=caption, show_header=True, header_style="bold")

    column_styles = column_styles or {}
    for header in headers:
        config = column_styles.get(header, {})
        table.add_column(
            header,
            style=config.get("style"),
            justify=config.get("justify", "default"),
            no_wrap=config.get("no_wrap", False),
        )

    for row in data:
        values = [str(row.get(h, "")) for h in headers]
        style = row_styler(row) if row_styler else None
        table.add_row(*values, style=style)

    _get_console().print(table)


def build_rich_tree(root: DependencyNode) -> Tree:
    """Convert a dependency tree into a :class:`rich.tree.Tree`.

    Nodes that were cut by the tree builder (repeated modules or the
    depth bound) appear as plain leaves.
    """
    tree = Tree(_node_label(root))
    stack = [(root, tree)]
    while stack:
        node, branch = stack.pop()
        for child in node.children:
            child_branch = branch.add(_node_label(child))
            stack.append((child, child_branch))
    return tree


def print_dependency_tree(root: DependencyNode) -> None:
    """Print a dependency tree to the console."""
    _get_console().print(build_rich_tree(root))


def _node_label(node: DependencyNode) -> str:
    label = f"[module]{_escape(node.path)}[/module] [release]{_escape(node.release)}[/release]"
    if node.size is not None:
        style = size_style(node.size)
        label += f" [{style}]({format_bytes(node.size)})[/{style}]"
    return label


def _escape(text: str) -> str:
    return text.replace("[", r"\[")
