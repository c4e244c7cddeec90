"""
Centralized constants for modgraph.

This module defines immutable configuration values used across modgraph,
including GOPROXY endpoints, network settings, resolution limits and
logging formats. All values are intended to be treated as read-only.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "modgraph/{version}"

# ---------------------------------------------------------------------------
# GOPROXY endpoints
# ---------------------------------------------------------------------------

#: Default module proxy.
DEFAULT_PROXY_URL: Final[str] = "https://proxy.golang.org"

#: Version list for a module (one version per line).
PROXY_LIST_PATH: Final[str] = "{module}/@v/list"

#: Latest known version of a module (JSON ``{"Version": ...}``).
PROXY_LATEST_PATH: Final[str] = "{module}/@latest"

#: ``go.mod`` file of one module version.
PROXY_MOD_PATH: Final[str] = "{module}/@v/{version}.mod"

#: Source archive of one module version (only its size is read).
PROXY_ZIP_PATH: Final[str] = "{module}/@v/{version}.zip"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

#: Status codes a GOPROXY uses for "no such module or version".
NOT_FOUND_STATUS_CODES: Final[frozenset] = frozenset({404, 410})

# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

#: Version placeholder for requirements that carry no version.
LATEST_VERSION: Final[str] = "latest"

#: Version shown for a path that was never selected.
UNKNOWN_VERSION: Final[str] = "unknown"

#: Default depth bound for dependency trees.
DEFAULT_MAX_DEPTH: Final[int] = 50

#: Whether module archive sizes are fetched by default.
DEFAULT_INCLUDE_SIZES: Final[bool] = False

#: Horizontal spacing of the layout seed (pixels per offset step).
LAYOUT_X_SPACING: Final[int] = 300

#: Vertical spacing of the layout seed (pixels per tree level).
LAYOUT_Y_SPACING: Final[int] = 150

#: Number of horizontal lanes the layout seed rotates through.
LAYOUT_LANES: Final[int] = 3

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
