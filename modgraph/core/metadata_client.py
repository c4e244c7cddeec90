"""Module metadata client for modgraph.

Talks to a GOPROXY-protocol server and exposes the four lookups the
resolver needs: the latest version of a module, its version list, the
requirements of one version and the archive size of one version.

Version lists and parsed ``go.mod`` requirements are cached per client
instance, so one module version is fetched at most once per process.
Nothing is persisted between processes.

Typical usage::

    from modgraph.utils.http import HTTPClient
    from modgraph.core.metadata_client import ModuleMetadataClient

    async with HTTPClient() as http:
        client = ModuleMetadataClient(http)
        latest = await client.resolve_latest_version("github.com/spf13/cobra")
        reqs   = await client.fetch_requirements("github.com/spf13/cobra", latest)
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Tuple

from modgraph.core.gomod import parse_requirements
from modgraph.models.module import Requirement
from modgraph.utils.http import HTTPClient
from modgraph.utils.logger import get_logger
from modgraph.utils.module_path import escape_module_path, normalize_module_path
from modgraph.exceptions import (
    ModuleNotFound,
    NetworkError,
    ReleaseNotFound,
)
from modgraph.constants import (
    DEFAULT_PROXY_URL,
    LATEST_VERSION,
    NOT_FOUND_STATUS_CODES,
    PROXY_LATEST_PATH,
    PROXY_LIST_PATH,
    PROXY_MOD_PATH,
    PROXY_ZIP_PATH,
)

logger = get_logger("metadata_client")

# Public API
__all__ = ["ModuleMetadataClient"]


class ModuleMetadataClient:
    """Async, per-process cached access to a module proxy.

    A :class:`asyncio.Semaphore` caps concurrent proxy fetches and a
    second cache check inside the semaphore keeps concurrent callers from
    fetching the same resource twice.

    Args:
        http_client: A pre-configured :class:`HTTPClient` (owns the
            connection pool).
        proxy_url: Base URL of the module proxy.
        concurrent_limit: Maximum number of proxy fetches in flight.

    Example::

        async with HTTPClient() as http:
            client = ModuleMetadataClient(http, proxy_url="https://goproxy.io")
            versions = await client.list_versions("golang.org/x/mod")
    """

    def __init__(
        self,
        http_client: HTTPClient,
        proxy_url: str = DEFAULT_PROXY_URL,
        concurrent_limit: int = 10,
    ) -> None:
        self.http_client = http_client
        self.proxy_url = proxy_url.rstrip("/")
        self._semaphore = asyncio.Semaphore(concurrent_limit)

        # normalised path → version list as served by the proxy
        self._versions_cache: Dict[str, List[str]] = {}

        # (normalised path, version) → requirements of that go.mod
        self._requirements_cache: Dict[Tuple[str, str], List[Requirement]] = {}

    # ------------------------------------------------------------------
    # Public async accessors
    # ------------------------------------------------------------------

    async def resolve_latest_version(self, path: str) -> str:
        """Return the version the proxy reports as latest for *path*.

        Raises:
            ModuleNotFound: The proxy has no record of *path*, or its
                answer carries no version.
            NetworkError: Any other failure talking to the proxy.
        """
        normalized = normalize_module_path(path)
        url = self._url(PROXY_LATEST_PATH, normalized)

        try:
            data = await self.http_client.get_json(url)
        except NetworkError as exc:
            if exc.status_code in NOT_FOUND_STATUS_CODES:
                raise ModuleNotFound(normalized) from exc
            raise

        version = data.get("Version")
        if not version or not isinstance(version, str):
            raise ModuleNotFound(normalized)

        logger.debug("Latest version of %s is %s", normalized, version)
        return version

    async def list_versions(self, path: str) -> List[str]:
        """Return the versions the proxy lists for *path*.

        The order is the reverse of the proxy's listing and carries no
        meaning; sort with :func:`modgraph.utils.version_utils.sort_versions`
        when an order is needed.

        Raises:
            ModuleNotFound: The proxy has no record of *path*.
            NetworkError: Any other failure talking to the proxy.
        """
        normalized = normalize_module_path(path)

        if normalized in self._versions_cache:
            return list(self._versions_cache[normalized])

        async with self._semaphore:
            if normalized not in self._versions_cache:
                url = self._url(PROXY_LIST_PATH, normalized)
                try:
                    body = await self.http_client.get_text(url)
                except NetworkError as exc:
                    if exc.status_code in NOT_FOUND_STATUS_CODES:
                        raise ModuleNotFound(normalized) from exc
                    raise
                versions = [line.strip() for line in body.splitlines() if line.strip()]
                versions.reverse()
                self._versions_cache[normalized] = versions

        return list(self._versions_cache[normalized])

    async def fetch_requirements(self, path: str, version: str) -> List[Requirement]:
        """Return the requirements declared by ``go.mod`` of *path* at *version*.

        The ``"latest"`` placeholder is first resolved through
        :meth:`resolve_latest_version`.

        Raises:
            ReleaseNotFound: *path* exists but *version* does not.
            ModuleNotFound: *path* itself does not exist.
            NetworkError: Any other failure talking to the proxy.
        """
        normalized = normalize_module_path(path)
        if version == LATEST_VERSION:
            version = await self.resolve_latest_version(normalized)

        cache_key = (normalized, version)
        if cache_key in self._requirements_cache:
            return list(self._requirements_cache[cache_key])

        not_found: Optional[NetworkError] = None
        async with self._semaphore:
            if cache_key not in self._requirements_cache:
                url = self._url(PROXY_MOD_PATH, normalized, version)
                try:
                    body = await self.http_client.get_text(url)
                except NetworkError as exc:
                    if exc.status_code not in NOT_FOUND_STATUS_CODES:
                        raise
                    not_found = exc
                else:
                    self._requirements_cache[cache_key] = parse_requirements(body)

        if not_found is not None:
            raise await self._classify_missing_mod(normalized, version) from not_found

        return list(self._requirements_cache[cache_key])

    async def fetch_size(self, path: str, version: str) -> Optional[int]:
        """Return the size in bytes of the module archive, if the proxy says.

        Best effort: every failure, including a missing ``Content-Length``,
        yields ``None``.
        """
        normalized = normalize_module_path(path)
        url = self._url(PROXY_ZIP_PATH, normalized, version)

        try:
            response = await self.http_client.head(url)
        except Exception as exc:  # noqa: BLE001
            logger.debug("No size for %s@%s: %s", normalized, version, exc)
            return None

        content_length = response.headers.get("Content-Length")
        if not content_length:
            return None
        try:
            return int(content_length)
        except ValueError:
            logger.debug(
                "Unparseable Content-Length %r for %s@%s",
                content_length,
                normalized,
                version,
            )
            return None

    # ------------------------------------------------------------------
    # Helpers (private)
    # ------------------------------------------------------------------

    async def _classify_missing_mod(self, path: str, version: str) -> Exception:
        """Tell "unknown release" from "unknown module" after a missing go.mod."""
        try:
            module_exists = bool(await self.list_versions(path))
        except (ModuleNotFound, NetworkError):
            module_exists = False

        if module_exists:
            return ReleaseNotFound(path, version)
        return ModuleNotFound(path)

    def _url(self, template: str, path: str, version: Optional[str] = None) -> str:
        """Build a proxy URL. *path* is normally already lower-cased."""
        module = escape_module_path(path)
        if version is None:
            return f"{self.proxy_url}/{template.format(module=module)}"
        return (
            f"{self.proxy_url}/"
            f"{template.format(module=module, version=escape_module_path(version))}"
        )
