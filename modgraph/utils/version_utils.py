"""
Version comparison utilities for modgraph.

Go module versions are semantic versions with a leading ``v``. Untagged
commits are referenced through pseudo-versions such as
``v0.0.0-20191109021931-daa7c04131f5``, which embed a 14-digit UTC
timestamp and a short commit hash.

:func:`compare_versions` defines the single ordering used by the
resolver: pseudo-versions order by timestamp among themselves and always
rank below tagged releases; tagged releases compare component by
component.
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from itertools import zip_longest
from typing import Iterable, List, Optional, Tuple

_PSEUDO_VERSION_RE = re.compile(r"^v0\.0\.0-(\d{14})-[0-9a-f]+$")
_LEADING_DIGITS_RE = re.compile(r"^\d+")

# (number, 1 for a plain component / 0 for a prerelease one, suffix)
_Component = Tuple[int, int, str]
_MISSING: _Component = (0, 1, "")


def is_pseudo_version(version: str) -> bool:
    """Return True if *version* has the ``v0.0.0-<timestamp>-<hash>`` shape.

    Examples:
        >>> is_pseudo_version("v0.0.0-20191109021931-daa7c04131f5")
        True
        >>> is_pseudo_version("v1.2.3")
        False
    """
    return _PSEUDO_VERSION_RE.match(version) is not None


def pseudo_version_timestamp(version: str) -> Optional[str]:
    """Return the 14-digit timestamp embedded in a pseudo-version, if any."""
    match = _PSEUDO_VERSION_RE.match(version)
    return match.group(1) if match else None


def compare_versions(a: str, b: str) -> int:
    """Order two version strings.

    Args:
        a: First version.
        b: Second version.

    Returns:
        ``-1`` if *a* ranks below *b*, ``0`` if they are equivalent and
        ``1`` if *a* ranks above *b*.

    Examples:
        >>> compare_versions("v1.10.0", "v1.9.3")
        1
        >>> compare_versions("v1.0", "v1.0.0")
        0
        >>> compare_versions("v1.0.0-rc1", "v1.0.0")
        -1
        >>> compare_versions("v0.0.0-20200101000000-abc", "v0.0.1")
        -1
    """
    a_stamp = pseudo_version_timestamp(a)
    b_stamp = pseudo_version_timestamp(b)

    if a_stamp is not None and b_stamp is not None:
        return _sign(a_stamp, b_stamp)
    if a_stamp is not None:
        return -1
    if b_stamp is not None:
        return 1

    for left, right in zip_longest(
        _components(a), _components(b), fillvalue=_MISSING
    ):
        result = _sign(left, right)
        if result:
            return result
    return 0


#: Sort key for ``sorted(..., key=version_sort_key)``.
version_sort_key = cmp_to_key(compare_versions)


def sort_versions(versions: Iterable[str], *, descending: bool = True) -> List[str]:
    """Return *versions* ordered by :func:`compare_versions`.

    Newest first by default, which is what release pickers expect.
    """
    return sorted(versions, key=version_sort_key, reverse=descending)


def max_version(versions: Iterable[str]) -> Optional[str]:
    """Return the highest version in *versions*, or ``None`` when empty."""
    best: Optional[str] = None
    for version in versions:
        if best is None or compare_versions(version, best) > 0:
            best = version
    return best


def _components(version: str) -> List[_Component]:
    stripped = version[1:] if version.startswith("v") else version
    return [_parse_component(part) for part in stripped.split(".")]


def _parse_component(part: str) -> _Component:
    number, dash, suffix = part.partition("-")
    if dash:
        return (_leading_int(number), 0, suffix)
    return (_leading_int(number), 1, "")


def _leading_int(text: str) -> int:
    # Non-numeric components count as zero, e.g. "x" or "".
    match = _LEADING_DIGITS_RE.match(text)
    return int(match.group(0)) if match else 0


def _sign(left, right) -> int:
    if left < right:
        return -1
    if left > right:
        return 1
    return 0
