"""
Utility helpers for modgraph.

This package provides reusable utilities used across modgraph, including:

- Version ordering for Go module versions
- Module path normalization, escaping and input parsing
- Logging configuration and retrieval
- Async HTTP client utilities
- Console output helpers (Rich-based)

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from modgraph.utils.version_utils import (
    compare_versions,
    is_pseudo_version,
    max_version,
    sort_versions,
    version_sort_key,
)

# ---------------------------------------------------------------------------
# Module path utilities
# ---------------------------------------------------------------------------

from modgraph.utils.module_path import (
    escape_module_path,
    normalize_module_path,
    parse_module_input,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from modgraph.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
    verbosity_to_level,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from modgraph.utils.http import HTTPClient

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from modgraph.utils.console import (
    format_bytes,
    get_raw_console,
    print_dependency_tree,
    print_error,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Versions
    "compare_versions",
    "is_pseudo_version",
    "max_version",
    "sort_versions",
    "version_sort_key",
    # Module paths
    "escape_module_path",
    "normalize_module_path",
    "parse_module_input",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    "verbosity_to_level",
    # HTTP
    "HTTPClient",
    # Console
    "format_bytes",
    "get_raw_console",
    "print_dependency_tree",
    "print_error",
    "print_table",
    "print_warning",
    "reconfigure_console",
]
