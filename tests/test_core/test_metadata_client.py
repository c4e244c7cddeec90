from __future__ import annotations

import httpx
import pytest
from typing import Dict, List, Tuple, Union

from modgraph.core.metadata_client import ModuleMetadataClient
from modgraph.exceptions import ModuleNotFound, NetworkError, ReleaseNotFound
from modgraph.models.module import Requirement
from modgraph.utils.http import HTTPClient

PROXY = "https://proxy.test"

Route = Union[httpx.Response, Tuple[int, str]]


class FakeProxy:
    """Route table for ``httpx.MockTransport``; unknown URLs answer 404."""

    def __init__(self, routes: Dict[str, Route]) -> None:
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.method} {request.url.path}"
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, httpx.Response):
            return httpx.Response(route.status_code, headers=route.headers, content=route.content)
        status, body = route
        return httpx.Response(status, text=body)

    def paths(self) -> List[str]:
        return [f"{r.method} {r.url.path}" for r in self.requests]


def _client(proxy: FakeProxy) -> Tuple[HTTPClient, ModuleMetadataClient]:
    http = HTTPClient(transport=httpx.MockTransport(proxy), max_retries=0)
    return http, ModuleMetadataClient(http, proxy_url=PROXY + "/")


@pytest.mark.unit
class TestResolveLatestVersion:
    @pytest.mark.asyncio
    async def test_returns_version(self) -> None:
        proxy = FakeProxy({"GET /golang.org/x/mod/@latest": (200, '{"Version": "v0.14.0"}')})
        http, client = _client(proxy)

        async with http:
            assert await client.resolve_latest_version("golang.org/x/mod") == "v0.14.0"

    @pytest.mark.asyncio
    async def test_unknown_module(self) -> None:
        http, client = _client(FakeProxy({}))

        async with http:
            with pytest.raises(ModuleNotFound) as exc_info:
                await client.resolve_latest_version("example.com/missing")

        assert exc_info.value.module_path == "example.com/missing"

    @pytest.mark.asyncio
    async def test_gone_module(self) -> None:
        proxy = FakeProxy({"GET /example.com/gone/@latest": (410, "gone")})
        http, client = _client(proxy)

        async with http:
            with pytest.raises(ModuleNotFound):
                await client.resolve_latest_version("example.com/gone")

    @pytest.mark.asyncio
    async def test_missing_version_field(self) -> None:
        proxy = FakeProxy({"GET /example.com/m/@latest": (200, '{"Time": "2024-01-01"}')})
        http, client = _client(proxy)

        async with http:
            with pytest.raises(ModuleNotFound):
                await client.resolve_latest_version("example.com/m")

    @pytest.mark.asyncio
    async def test_uppercase_path_is_normalized(self) -> None:
        proxy = FakeProxy({"GET /github.com/spf13/cobra/@latest": (200, '{"Version": "v1.8.0"}')})
        http, client = _client(proxy)

        async with http:
            assert await client.resolve_latest_version("GitHub.com/Spf13/Cobra") == "v1.8.0"


@pytest.mark.unit
class TestListVersions:
    @pytest.mark.asyncio
    async def test_lines_reversed_and_cached(self) -> None:
        proxy = FakeProxy({"GET /example.com/m/@v/list": (200, "v1.0.0\nv1.1.0\n\nv1.2.0\n")})
        http, client = _client(proxy)

        async with http:
            first = await client.list_versions("example.com/m")
            second = await client.list_versions("example.com/m")

        assert first == ["v1.2.0", "v1.1.0", "v1.0.0"]
        assert second == first
        assert len(proxy.requests) == 1

    @pytest.mark.asyncio
    async def test_unknown_module(self) -> None:
        http, client = _client(FakeProxy({}))

        async with http:
            with pytest.raises(ModuleNotFound):
                await client.list_versions("example.com/missing")

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self) -> None:
        proxy = FakeProxy({"GET /example.com/m/@v/list": (403, "forbidden")})
        http, client = _client(proxy)

        async with http:
            with pytest.raises(NetworkError) as exc_info:
                await client.list_versions("example.com/m")

        assert exc_info.value.status_code == 403


@pytest.mark.unit
class TestFetchRequirements:
    GO_MOD = "module example.com/m\n\nrequire (\n\texample.com/a v1.0.0\n\texample.com/b v1.2.0\n)\n"

    @pytest.mark.asyncio
    async def test_parses_go_mod(self) -> None:
        proxy = FakeProxy({"GET /example.com/m/@v/v1.0.0.mod": (200, self.GO_MOD)})
        http, client = _client(proxy)

        async with http:
            result = await client.fetch_requirements("example.com/m", "v1.0.0")

        assert result == [
            Requirement("example.com/a", "v1.0.0"),
            Requirement("example.com/b", "v1.2.0"),
        ]

    @pytest.mark.asyncio
    async def test_cached_per_version(self) -> None:
        proxy = FakeProxy({"GET /example.com/m/@v/v1.0.0.mod": (200, self.GO_MOD)})
        http, client = _client(proxy)

        async with http:
            await client.fetch_requirements("example.com/m", "v1.0.0")
            await client.fetch_requirements("Example.com/M", "v1.0.0")

        assert len(proxy.requests) == 1

    @pytest.mark.asyncio
    async def test_latest_is_resolved_first(self) -> None:
        proxy = FakeProxy(
            {
                "GET /example.com/m/@latest": (200, '{"Version": "v1.0.0"}'),
                "GET /example.com/m/@v/v1.0.0.mod": (200, self.GO_MOD),
            }
        )
        http, client = _client(proxy)

        async with http:
            result = await client.fetch_requirements("example.com/m", "latest")

        assert len(result) == 2
        assert proxy.paths() == [
            "GET /example.com/m/@latest",
            "GET /example.com/m/@v/v1.0.0.mod",
        ]

    @pytest.mark.asyncio
    async def test_case_escaping(self) -> None:
        proxy = FakeProxy({"GET /github.com/azure/go-autorest/@v/v1.0.0-!r!c1.mod": (200, "module x\n")})
        http, client = _client(proxy)

        async with http:
            # paths are lower-cased on normalization; versions keep their case
            result = await client.fetch_requirements("github.com/Azure/go-autorest", "v1.0.0-RC1")

        assert result == []
        assert proxy.paths() == ["GET /github.com/azure/go-autorest/@v/v1.0.0-!r!c1.mod"]

    @pytest.mark.asyncio
    async def test_missing_release_of_known_module(self) -> None:
        proxy = FakeProxy({"GET /example.com/m/@v/list": (200, "v1.0.0\n")})
        http, client = _client(proxy)

        async with http:
            with pytest.raises(ReleaseNotFound) as exc_info:
                await client.fetch_requirements("example.com/m", "v9.9.9")

        assert exc_info.value.release == "v9.9.9"
        assert exc_info.value.module_path == "example.com/m"

    @pytest.mark.asyncio
    async def test_missing_module(self) -> None:
        http, client = _client(FakeProxy({}))

        async with http:
            with pytest.raises(ModuleNotFound):
                await client.fetch_requirements("example.com/nope", "v1.0.0")

    @pytest.mark.asyncio
    async def test_empty_version_list_means_missing_module(self) -> None:
        proxy = FakeProxy({"GET /example.com/m/@v/list": (200, "")})
        http, client = _client(proxy)

        async with http:
            with pytest.raises(ModuleNotFound):
                await client.fetch_requirements("example.com/m", "v1.0.0")

    @pytest.mark.asyncio
    async def test_server_error_propagates(self) -> None:
        proxy = FakeProxy({"GET /example.com/m/@v/v1.0.0.mod": (500, "boom")})
        http, client = _client(proxy)

        async with http:
            with pytest.raises(NetworkError):
                await client.fetch_requirements("example.com/m", "v1.0.0")


@pytest.mark.unit
class TestFetchSize:
    @pytest.mark.asyncio
    async def test_content_length(self) -> None:
        proxy = FakeProxy(
            {"HEAD /example.com/m/@v/v1.0.0.zip": httpx.Response(200, headers={"Content-Length": "2048"})}
        )
        http, client = _client(proxy)

        async with http:
            assert await client.fetch_size("example.com/m", "v1.0.0") == 2048

    @pytest.mark.asyncio
    async def test_missing_archive_is_none(self) -> None:
        http, client = _client(FakeProxy({}))

        async with http:
            assert await client.fetch_size("example.com/m", "v1.0.0") is None

    @pytest.mark.asyncio
    async def test_unparseable_content_length_is_none(self) -> None:
        proxy = FakeProxy(
            {"HEAD /example.com/m/@v/v1.0.0.zip": httpx.Response(200, headers={"Content-Length": "lots"})}
        )
        http, client = _client(proxy)

        async with http:
            assert await client.fetch_size("example.com/m", "v1.0.0") is None


@pytest.mark.unit
class TestUrlBuilding:
    def test_escapes_path_and_version(self) -> None:
        client = ModuleMetadataClient(HTTPClient(), proxy_url="https://proxy.test/")

        url = client._url("{module}/@v/{version}.mod", "github.com/Azure/go-autorest", "v1.0.0-RC1")

        assert url == "https://proxy.test/github.com/!azure/go-autorest/@v/v1.0.0-!r!c1.mod"

    def test_without_version(self) -> None:
        client = ModuleMetadataClient(HTTPClient(), proxy_url="https://proxy.test")

        assert client._url("{module}/@latest", "golang.org/x/mod") == "https://proxy.test/golang.org/x/mod/@latest"

    @pytest.mark.asyncio
    async def test_mixed_case_path_is_requested_lower_cased(self) -> None:
        proxy = FakeProxy({"GET /github.com/burntsushi/toml/@v/list": (200, "v1.3.2\n")})
        http, client = _client(proxy)

        async with http:
            assert await client.list_versions("github.com/BurntSushi/toml") == ["v1.3.2"]

        assert proxy.paths() == ["GET /github.com/burntsushi/toml/@v/list"]
