from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Union

import pytest

from modgraph.models.module import Requirement
from modgraph.exceptions import ModuleNotFound, ReleaseNotFound
from modgraph.utils.module_path import normalize_module_path


Manifest = Union[List[Requirement], Exception]


class FakeMetadataClient:
    """In-memory stand-in for :class:`ModuleMetadataClient`.

    Manifests are registered per ``(path, version)``; a registered
    exception is raised instead of returning requirements. Every call is
    recorded so tests can assert on fetch order and counts.
    """

    def __init__(self) -> None:
        self.manifests: Dict[Tuple[str, str], Manifest] = {}
        self.sizes: Dict[Tuple[str, str], Optional[int]] = {}
        self.latest: Dict[str, Union[str, Exception]] = {}
        self.versions: Dict[str, Union[List[str], Exception]] = {}
        self.calls: List[Tuple[str, ...]] = []

    # -- registration helpers -------------------------------------------

    def add(self, path: str, version: str, *requires: str, size: Optional[int] = None) -> None:
        """Register ``path@version`` requiring each ``"dep@ver"`` in *requires*."""
        requirements = []
        for entry in requires:
            dep, _, dep_version = entry.partition("@")
            requirements.append(Requirement(dep, dep_version or None))
        self.manifests[(path, version)] = requirements
        if size is not None:
            self.sizes[(path, version)] = size

    def fail(self, path: str, version: str, exc: Exception) -> None:
        self.manifests[(path, version)] = exc

    # -- client interface -----------------------------------------------

    async def resolve_latest_version(self, path: str) -> str:
        path = normalize_module_path(path)
        self.calls.append(("latest", path))
        value = self.latest.get(path)
        if value is None:
            raise ModuleNotFound(path)
        if isinstance(value, Exception):
            raise value
        return value

    async def list_versions(self, path: str) -> List[str]:
        path = normalize_module_path(path)
        self.calls.append(("list", path))
        value = self.versions.get(path)
        if value is None:
            raise ModuleNotFound(path)
        if isinstance(value, Exception):
            raise value
        return list(value)

    async def fetch_requirements(self, path: str, version: str) -> List[Requirement]:
        path = normalize_module_path(path)
        self.calls.append(("mod", path, version))
        if version == "latest":
            version = await self.resolve_latest_version(path)

        manifest = self.manifests.get((path, version))
        if manifest is None:
            if any(known == path for known, _ in self.manifests):
                raise ReleaseNotFound(path, version)
            raise ModuleNotFound(path)
        if isinstance(manifest, Exception):
            raise manifest
        return list(manifest)

    async def fetch_size(self, path: str, version: str) -> Optional[int]:
        path = normalize_module_path(path)
        self.calls.append(("size", path, version))
        return self.sizes.get((path, version))

    def fetched(self) -> List[Tuple[str, str]]:
        """Return the ``(path, version)`` pairs whose manifest was requested."""
        return [(call[1], call[2]) for call in self.calls if call[0] == "mod"]


@pytest.fixture
def fake_client() -> FakeMetadataClient:
    """An empty fake registry."""
    return FakeMetadataClient()


@pytest.fixture
def unification_client() -> FakeMetadataClient:
    """Registry where two paths ask for different versions of one module.

    ``m@v1.0.0`` requires ``a@v1.0.0`` and ``b@v1.0.0``; ``a`` asks for
    ``c@v1.1.0`` and ``b`` for ``c@v1.2.0``.
    """
    client = FakeMetadataClient()
    client.add("m", "v1.0.0", "a@v1.0.0", "b@v1.0.0")
    client.add("a", "v1.0.0", "c@v1.1.0")
    client.add("b", "v1.0.0", "c@v1.2.0")
    client.add("c", "v1.1.0")
    client.add("c", "v1.2.0")
    return client
