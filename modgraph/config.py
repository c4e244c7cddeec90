"""Configuration file loader for modgraph.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``modgraph.toml``: settings under ``[modgraph]`` table
- ``pyproject.toml``: settings under ``[tool.modgraph]`` table

Discovery order:

1. Explicit path from ``--config`` or ``MODGRAPH_CONFIG``
2. ``modgraph.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.modgraph]`` section

Configuration precedence: defaults < config file < environment < CLI args.

Example (``modgraph.toml``)::

    [modgraph]
    proxy_url = "https://goproxy.io"
    include_sizes = true
    max_depth = 20
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple
from dataclasses import dataclass, field

from modgraph.exceptions import ConfigError
from modgraph.utils.logger import get_logger
from modgraph.constants import (
    DEFAULT_INCLUDE_SIZES,
    DEFAULT_MAX_DEPTH,
    DEFAULT_PROXY_URL,
    DEFAULT_TIMEOUT,
)

logger = get_logger("config")

#: Largest accepted ``max_depth``; tree building is recursive.
MAX_DEPTH_LIMIT = 500


@dataclass
class ModGraphConfig:
    """Parsed and validated modgraph configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        proxy_url: Base URL of the GOPROXY to query.
        include_sizes: Fetch module archive sizes while resolving.
        max_depth: Depth bound of dependency trees.
        timeout: HTTP timeout in seconds.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    proxy_url: str = DEFAULT_PROXY_URL
    include_sizes: bool = DEFAULT_INCLUDE_SIZES
    max_depth: int = DEFAULT_MAX_DEPTH
    timeout: int = DEFAULT_TIMEOUT

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {
            "proxy_url": self.proxy_url,
            "include_sizes": self.include_sizes,
            "max_depth": self.max_depth,
            "timeout": self.timeout,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    modgraph_toml = cwd / "modgraph.toml"
    if modgraph_toml.is_file():
        logger.debug("Found modgraph.toml: %s", modgraph_toml)
        return modgraph_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_modgraph_section(pyproject_toml):
        logger.debug("Found [tool.modgraph] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_modgraph_section(path: Path) -> bool:
    """Check whether ``pyproject.toml`` has a ``[tool.modgraph]`` table.

    A pyproject that cannot be parsed is not ours to complain about, so
    errors simply mean "no section".
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "modgraph" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> ModGraphConfig:
    """Load and validate modgraph configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`ModGraphConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return ModGraphConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("modgraph", {})
    else:
        section = raw.get("modgraph", {})

    if not section:
        logger.debug("Config file found but no modgraph section, using defaults")
        return ModGraphConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_int(value: Any) -> bool:
    # bool is a subclass of int; reject it explicitly
    return isinstance(value, int) and not isinstance(value, bool)


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


# option → (type check, expected type name, extra validation or None)
_OPTIONS: Dict[str, Tuple[Callable[[Any], bool], str, Optional[Callable[[Any], Optional[str]]]]] = {
    "proxy_url": (
        _is_str,
        "a string",
        lambda v: None if v.startswith(("http://", "https://")) else "must be an http(s) URL",
    ),
    "include_sizes": (_is_bool, "a boolean", None),
    "max_depth": (
        _is_int,
        "an integer",
        lambda v: None if 0 <= v <= MAX_DEPTH_LIMIT else f"must be between 0 and {MAX_DEPTH_LIMIT}",
    ),
    "timeout": (
        _is_int,
        "an integer",
        lambda v: None if v > 0 else "must be positive",
    ),
}


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> ModGraphConfig:
    """Parse and validate the ``[modgraph]`` / ``[tool.modgraph]`` table.

    Raises:
        ConfigError: Unknown keys, wrong types or out-of-range values.
    """
    unknown = set(section) - set(_OPTIONS)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    config = ModGraphConfig()

    for option, (type_check, type_name, validate) in _OPTIONS.items():
        if option not in section:
            continue

        value = section[option]
        if not type_check(value):
            raise ConfigError(
                f"{option} must be {type_name}, got {type(value).__name__}",
                config_path=config_path,
                option=option,
            )

        problem = validate(value) if validate else None
        if problem:
            raise ConfigError(
                f"{option} {problem}, got {value!r}",
                config_path=config_path,
                option=option,
            )

        setattr(config, option, value)

    return config
