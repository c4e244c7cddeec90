"""
modgraph: Go module dependency graphs via Minimal Version Selection

modgraph resolves the full transitive dependency closure of a Go module
by querying a GOPROXY-compatible registry, selects exactly one version per
module path with Minimal Version Selection (MVS), and flattens the result
into a deduplicated node/edge graph ready for rendering.

Features include:
    • MVS resolution with pseudo-version aware version ordering
    • Cycle- and depth-bounded dependency trees
    • Deduplicated graph output (one node per module, one edge per parent)
    • Optional module archive sizes
    • Rich terminal output and JSON export
"""

from __future__ import annotations

from modgraph.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "modgraph Contributors"
__license__ = "Apache-2.0"
__description__ = "Go module dependency graphs with Minimal Version Selection."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
]
