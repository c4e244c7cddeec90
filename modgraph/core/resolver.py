"""Minimal Version Selection for modgraph.

:class:`ResolutionEngine` walks the requirement graph of a root module
with a FIFO worklist and keeps, for every module path, the highest
version any visited manifest asks for. The outcome is a
:class:`ResolutionContext` holding four tables:

- ``selection``:    path → the one selected version
- ``requirements``: path → requirements of the selected version
- ``dependents``:   path → paths that declared a requirement on it
- ``sizes``:        path → archive size of the selected version
  (only filled when size tracking is enabled)

All network I/O goes through a metadata client with the interface of
:class:`~modgraph.core.metadata_client.ModuleMetadataClient`.

Typical usage::

    async with HTTPClient() as http:
        client  = ModuleMetadataClient(http)
        engine  = ResolutionEngine(client)
        context = await engine.resolve(ModuleReference("github.com/spf13/cobra", "v1.8.0"))
        print(context.selection["github.com/spf13/pflag"])
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Deque, Dict, List, Optional, Set

from modgraph.models.module import ModuleReference, Requirement
from modgraph.utils.logger import get_logger
from modgraph.utils.module_path import normalize_module_path
from modgraph.utils.version_utils import compare_versions
from modgraph.exceptions import (
    ModuleNotFound,
    ReleaseNotFound,
    ResolutionError,
)

if TYPE_CHECKING:
    from modgraph.core.metadata_client import ModuleMetadataClient

logger = get_logger("resolver")

# Public API
__all__ = [
    "ResolutionEngine",
    "ResolutionContext",
    "WorkItem",
]


# ---------------------------------------------------------------------------
# Resolution state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WorkItem:
    """One pending worklist entry.

    Attributes:
        path: Module path as found in the manifest (normalized on use).
        version: Version asked for.
        required_by: Path of the module whose manifest asked for it, or
            ``None`` for the root entry.
    """

    path: str
    version: str
    required_by: Optional[str] = None


@dataclass
class ResolutionContext:
    """Tables of one resolution run.

    A fresh context is created for every :meth:`ResolutionEngine.resolve`
    call and never shared between runs.

    Attributes:
        root: The root module reference.
        selection: Normalized path → selected version. Only ever
            overwritten by a strictly higher version.
        requirements: Normalized path → requirements of the selected
            version. Replaced wholesale when the selection changes.
        dependents: Normalized path → paths that required it. Entries
            accumulate and are never retracted, even when a dependent's
            own selection moves to a version that no longer requires
            the module.
        sizes: Normalized path → archive size of the selected version.
        failed_paths: Paths whose requirements could not be fetched and
            were treated as having none.
        fetch_count: Number of requirement fetches performed.
    """

    root: ModuleReference
    selection: Dict[str, str] = field(default_factory=dict)
    requirements: Dict[str, List[Requirement]] = field(default_factory=dict)
    dependents: Dict[str, Set[str]] = field(default_factory=dict)
    sizes: Dict[str, Optional[int]] = field(default_factory=dict)
    failed_paths: Set[str] = field(default_factory=set)
    fetch_count: int = 0

    def selected_reference(self, path: str) -> Optional[ModuleReference]:
        """Return the selected :class:`ModuleReference` for *path*, if any."""
        normalized = normalize_module_path(path)
        version = self.selection.get(normalized)
        return ModuleReference(normalized, version) if version is not None else None

    def summary(self) -> str:
        """One-line description for logs."""
        return (
            f"{len(self.selection)} module(s) selected, "
            f"{self.fetch_count} manifest fetch(es), "
            f"{len(self.failed_paths)} failed"
        )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class ResolutionEngine:
    """Run Minimal Version Selection over a module's requirement graph.

    The worklist is processed strictly in FIFO order and every fetch is
    awaited before the next entry is taken, so one engine call performs
    at most one request at a time.

    Args:
        client: Metadata client providing ``fetch_requirements`` and
            ``fetch_size``.
        include_sizes: Also fetch the archive size of every selected
            module version.

    Example::

        >>> engine  = ResolutionEngine(client, include_sizes=True)
        >>> context = await engine.resolve(ModuleReference("example.com/m", "v1.0.0"))
        >>> context.selection
        {'example.com/m': 'v1.0.0', 'example.com/a': 'v1.2.0'}
    """

    def __init__(
        self,
        client: "ModuleMetadataClient",
        include_sizes: bool = False,
    ) -> None:
        if client is None:
            raise TypeError("client must not be None; pass a ModuleMetadataClient")

        self.client = client
        self.include_sizes = include_sizes

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(self, root: ModuleReference) -> ResolutionContext:
        """Select one version for every module reachable from *root*.

        Algorithm outline:

        1. Seed the worklist with the root entry.
        2. Pop the front entry and record who required it.
        3. An unselected path is selected at the entry's version; a
           selected path is bumped only when the entry's version ranks
           strictly higher. Either way the manifest of the newly selected
           version is fetched and its requirements are enqueued.
        4. Stop when the worklist is empty.

        Termination relies on the registry data converging; there is no
        iteration cap.

        Args:
            root: Root module and version.

        Returns:
            The populated :class:`ResolutionContext`.

        Raises:
            ModuleNotFound: The root module does not exist.
            ReleaseNotFound: The root version does not exist.
            ResolutionError: The root manifest could not be fetched for
                any other reason.
        """
        context = ResolutionContext(root=root)
        queue: Deque[WorkItem] = deque([WorkItem(root.path, root.version)])
        is_root = True

        logger.info("Resolving %s", root)

        while queue:
            item = queue.popleft()
            path = normalize_module_path(item.path)
            required_by = (
                normalize_module_path(item.required_by) if item.required_by else None
            )

            if required_by:
                context.dependents.setdefault(path, set()).add(required_by)

            current = context.selection.get(path)

            if current is None:
                logger.debug("Selected %s@%s", path, item.version)
            elif compare_versions(item.version, current) > 0:
                logger.debug("Bumped %s: %s -> %s", path, current, item.version)
            else:
                # Lower or equal version: MVS keeps the current selection
                is_root = False
                continue

            context.selection[path] = item.version
            await self._select(context, queue, path, item.version, is_root=is_root)
            is_root = False

        logger.info("Resolved %s: %s", root, context.summary())
        return context

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _select(
        self,
        context: ResolutionContext,
        queue: Deque[WorkItem],
        path: str,
        version: str,
        *,
        is_root: bool,
    ) -> None:
        """Fetch the manifest of a newly selected version and enqueue it."""
        context.fetch_count += 1
        try:
            requirements = await self.client.fetch_requirements(path, version)
        except (ModuleNotFound, ReleaseNotFound):
            if is_root:
                raise
            self._degrade(context, path, version, "not found")
            return
        except Exception as exc:  # noqa: BLE001
            if is_root:
                raise ResolutionError(
                    f"Failed to resolve {path}@{version}: {exc}",
                    module_path=path,
                    release=version,
                    original_error=exc,
                ) from exc
            self._degrade(context, path, version, str(exc))
            return

        context.requirements[path] = requirements
        context.failed_paths.discard(path)

        if self.include_sizes:
            context.sizes[path] = await self.client.fetch_size(path, version)

        for requirement in requirements:
            queue.append(
                WorkItem(
                    path=requirement.path,
                    version=requirement.effective_version,
                    required_by=path,
                )
            )

    @staticmethod
    def _degrade(
        context: ResolutionContext,
        path: str,
        version: str,
        reason: str,
    ) -> None:
        """Record a module whose requirements could not be fetched as a leaf."""
        logger.debug("No requirements for %s@%s (%s); treating as leaf", path, version, reason)
        context.requirements[path] = []
        context.sizes.pop(path, None)
        context.failed_paths.add(path)
