"""
Module path helpers for modgraph.

Three small concerns live here:

- :func:`normalize_module_path` turns a path as written in a ``go.mod``
  file (possibly quoted, any casing) into the key used by every table in
  the resolver.
- :func:`escape_module_path` applies the GOPROXY case-encoding to one URL
  segment. Paths are lower-cased by normalization before they reach the
  proxy client, so in practice only versions carry upper-case letters.
- :func:`parse_module_input` splits user input such as
  ``https://github.com/spf13/cobra@v1.8.0`` into a path and a version.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from modgraph.exceptions import ParseError

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_module_path(path: str) -> str:
    """Return the canonical map key for a module path.

    Surrounding whitespace and one pair of matching single or double
    quotes are removed, then the path is lower-cased.

    Examples:
        >>> normalize_module_path('"GitHub.com/Foo/Bar"')
        'github.com/foo/bar'
        >>> normalize_module_path("  golang.org/x/mod ")
        'golang.org/x/mod'
    """
    trimmed = path.strip()
    if len(trimmed) >= 2 and trimmed[0] == trimmed[-1] and trimmed[0] in "\"'":
        trimmed = trimmed[1:-1]
    return trimmed.lower()


def escape_module_path(value: str) -> str:
    """Case-encode a module path or version for use in a proxy URL.

    Every upper-case letter is replaced by ``!`` followed by its lower-case
    form, as required by the GOPROXY protocol.

    Examples:
        >>> escape_module_path("github.com/Azure/azure-sdk-for-go")
        'github.com/!azure/azure-sdk-for-go'
    """
    return "".join(f"!{ch.lower()}" if "A" <= ch <= "Z" else ch for ch in value)


def parse_module_input(text: str) -> Tuple[str, Optional[str]]:
    """Split ``path[@version]`` user input.

    A leading ``http://`` or ``https://`` is dropped and the path is
    lower-cased. The version is everything after the first ``@``.

    Args:
        text: Raw input, e.g. ``"github.com/spf13/cobra@v1.8.0"``.

    Returns:
        ``(path, version)``; ``version`` is ``None`` when absent.

    Raises:
        ParseError: The input contains no module path.

    Examples:
        >>> parse_module_input("https://github.com/Spf13/Cobra")
        ('github.com/spf13/cobra', None)
        >>> parse_module_input("golang.org/x/mod@v0.14.0")
        ('golang.org/x/mod', 'v0.14.0')
    """
    without_scheme = _SCHEME_RE.sub("", text.strip())
    path, _, version = without_scheme.partition("@")
    path = path.strip().rstrip("/").lower()

    if not path:
        raise ParseError("Module path is empty", raw_input=text)

    return path, (version.strip() or None)
