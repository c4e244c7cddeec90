"""Parser for the ``require`` directives of a ``go.mod`` file.

Only requirements matter to the resolver, so everything else in the file
(``module``, ``go``, ``replace``, ``exclude``, ``retract`` ...) is skipped.
Both directive forms are understood::

    require golang.org/x/mod v0.14.0

    require (
        github.com/spf13/cobra v1.8.0
        github.com/spf13/pflag v1.0.5 // indirect
    )
"""

from __future__ import annotations

from typing import List, Optional

from modgraph.models.module import Requirement
from modgraph.utils.logger import get_logger

logger = get_logger("gomod")

__all__ = ["parse_requirements"]

_REQUIRE = "require"


def parse_requirements(text: str) -> List[Requirement]:
    """Extract the requirements of a ``go.mod`` body, in file order.

    Lines are tolerated rather than validated: an entry without a version
    yields a :class:`Requirement` whose ``version_constraint`` is ``None``.

    Args:
        text: Contents of a ``go.mod`` file.

    Returns:
        One :class:`Requirement` per require entry.

    Example::

        >>> parse_requirements("require (\\n\\tgithub.com/A/b v1.0.0\\n)")
        [Requirement(path='github.com/a/b', version_constraint='v1.0.0')]
    """
    requirements: List[Requirement] = []
    block: Optional[str] = None

    for raw_line in text.splitlines():
        line = _strip_comment(raw_line).strip()
        if not line:
            continue

        if block is not None:
            if line == ")":
                block = None
            elif block == _REQUIRE:
                _append(requirements, line.split())
            continue

        words = line.split()
        keyword = words[0]

        if keyword.endswith("(") or (len(words) > 1 and words[-1] == "("):
            # "require (" or "require(" opens a block
            block = keyword.rstrip("(") or keyword
            continue

        if keyword == _REQUIRE:
            _append(requirements, words[1:])

    return requirements


def _append(requirements: List[Requirement], words: List[str]) -> None:
    if not words:
        return
    version = words[1] if len(words) > 1 else None
    requirements.append(Requirement(path=words[0], version_constraint=version))


def _strip_comment(line: str) -> str:
    index = line.find("//")
    return line if index < 0 else line[:index]
