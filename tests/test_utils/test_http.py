from __future__ import annotations

import httpx
import pytest
from typing import Callable, List, Optional
from unittest.mock import AsyncMock, patch

from modgraph.utils.http import HTTPClient, _retry_after_seconds
from modgraph.exceptions import NetworkError, ProxyError


def _transport(*responses: httpx.Response, seen: Optional[List[httpx.Request]] = None) -> httpx.MockTransport:
    """Return a transport that replays *responses* in order (last one repeats)."""
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        template = queue.pop(0) if len(queue) > 1 else queue[0]
        # fresh copy per request; a response object can only be sent once
        return httpx.Response(
            template.status_code,
            headers=template.headers,
            content=template.content,
        )

    return httpx.MockTransport(handler)


def _raising_then(exc_factory: Callable[[httpx.Request], Exception], ok: httpx.Response) -> httpx.MockTransport:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] == 1:
            raise exc_factory(request)
        return ok

    return httpx.MockTransport(handler)


@pytest.fixture
def no_sleep():
    """Skip backoff and Retry-After waits."""
    with patch("modgraph.utils.http.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


@pytest.mark.unit
class TestHTTPClientInit:
    def test_default_values(self) -> None:
        client = HTTPClient()

        assert client.timeout == 30
        assert client.max_retries == 3
        assert client.verify_ssl is True
        assert client.max_concurrency == 10
        assert "modgraph" in client.user_agent
        assert client._max_429_retries == 5
        assert client._client is None

    def test_custom_values(self) -> None:
        client = HTTPClient(
            timeout=10,
            max_retries=5,
            verify_ssl=False,
            user_agent="CustomAgent/1.0",
            max_concurrency=20,
        )

        assert client.timeout == 10
        assert client.max_retries == 5
        assert client.verify_ssl is False
        assert client.user_agent == "CustomAgent/1.0"
        assert client._semaphore._value == 20


@pytest.mark.unit
class TestHTTPClientLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_creates_and_closes_client(self) -> None:
        client = HTTPClient(transport=_transport(httpx.Response(200)))

        async with client:
            assert isinstance(client._client, httpx.AsyncClient)

        assert client._client is None

    @pytest.mark.asyncio
    async def test_close_without_client(self) -> None:
        client = HTTPClient()
        await client.close()
        assert client._client is None

    @pytest.mark.asyncio
    async def test_user_agent_header_sent(self) -> None:
        seen: List[httpx.Request] = []
        async with HTTPClient(transport=_transport(httpx.Response(200), seen=seen)) as client:
            await client.get("https://proxy.test/x")

        assert seen[0].headers["User-Agent"].startswith("modgraph/")


@pytest.mark.unit
class TestRequestWithRetry:
    @pytest.mark.asyncio
    async def test_successful_request(self) -> None:
        async with HTTPClient(transport=_transport(httpx.Response(200, text="ok"))) as client:
            assert await client.get_text("https://proxy.test/ok") == "ok"

    @pytest.mark.asyncio
    async def test_strips_quotes_and_whitespace_from_url(self) -> None:
        seen: List[httpx.Request] = []
        async with HTTPClient(transport=_transport(httpx.Response(200), seen=seen)) as client:
            await client.get('  "https://proxy.test/quoted"  ')

        assert str(seen[0].url) == "https://proxy.test/quoted"

    @pytest.mark.asyncio
    async def test_404_raises_proxy_error(self) -> None:
        async with HTTPClient(transport=_transport(httpx.Response(404))) as client:
            with pytest.raises(ProxyError) as exc_info:
                await client.get("https://proxy.test/missing")

        assert exc_info.value.status_code == 404
        assert isinstance(exc_info.value, NetworkError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 403, 410])
    async def test_other_4xx_raise_network_error_without_retry(self, status: int) -> None:
        seen: List[httpx.Request] = []
        transport = _transport(httpx.Response(status, text="gone"), seen=seen)
        async with HTTPClient(transport=transport) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get("https://proxy.test/x")

        assert exc_info.value.status_code == status
        assert exc_info.value.response_body == "gone"
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_5xx_is_retried(self, no_sleep: AsyncMock) -> None:
        seen: List[httpx.Request] = []
        transport = _transport(httpx.Response(503), httpx.Response(200, text="ok"), seen=seen)
        async with HTTPClient(transport=transport, max_retries=2) as client:
            assert await client.get_text("https://proxy.test/x") == "ok"

        assert len(seen) == 2
        assert no_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_exhausted(self, no_sleep: AsyncMock) -> None:
        seen: List[httpx.Request] = []
        transport = _transport(httpx.Response(500), seen=seen)
        async with HTTPClient(transport=transport, max_retries=2) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get("https://proxy.test/x")

        assert "after 3 attempts" in str(exc_info.value)
        assert len(seen) == 3

    @pytest.mark.asyncio
    async def test_timeout_is_retried(self, no_sleep: AsyncMock) -> None:
        transport = _raising_then(
            lambda request: httpx.ReadTimeout("slow", request=request),
            httpx.Response(200, text="ok"),
        )
        async with HTTPClient(transport=transport, max_retries=1) as client:
            assert await client.get_text("https://proxy.test/x") == "ok"

    @pytest.mark.asyncio
    async def test_connection_error_is_retried(self, no_sleep: AsyncMock) -> None:
        transport = _raising_then(
            lambda request: httpx.ConnectError("refused", request=request),
            httpx.Response(200, text="ok"),
        )
        async with HTTPClient(transport=transport, max_retries=1) as client:
            assert await client.get_text("https://proxy.test/x") == "ok"

    @pytest.mark.asyncio
    async def test_protocol_error_is_retried(self, no_sleep: AsyncMock) -> None:
        transport = _raising_then(
            lambda request: httpx.RemoteProtocolError("peer closed", request=request),
            httpx.Response(200, text="ok"),
        )
        async with HTTPClient(transport=transport, max_retries=1) as client:
            assert await client.get_text("https://proxy.test/x") == "ok"

    @pytest.mark.asyncio
    async def test_protocol_error_exhausted_raises_network_error(self, no_sleep: AsyncMock) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.RemoteProtocolError("peer closed", request=request)

        async with HTTPClient(transport=httpx.MockTransport(handler), max_retries=0) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get("https://proxy.test/x")

        assert isinstance(exc_info.value.__cause__, httpx.RemoteProtocolError)

    @pytest.mark.asyncio
    async def test_unsupported_protocol_raises_network_error(self, no_sleep: AsyncMock) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.UnsupportedProtocol("no scheme", request=request)

        async with HTTPClient(transport=httpx.MockTransport(handler), max_retries=1) as client:
            with pytest.raises(NetworkError, match="after 2 attempts"):
                await client.get("https://proxy.test/x")

    @pytest.mark.asyncio
    async def test_429_uses_retry_after(self, no_sleep: AsyncMock) -> None:
        transport = _transport(
            httpx.Response(429, headers={"Retry-After": "7"}),
            httpx.Response(200, text="ok"),
        )
        async with HTTPClient(transport=transport, max_retries=0) as client:
            assert await client.get_text("https://proxy.test/x") == "ok"

        no_sleep.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_429_budget_exhausted(self, no_sleep: AsyncMock) -> None:
        transport = _transport(httpx.Response(429, headers={"Retry-After": "0"}))
        client = HTTPClient(transport=transport, max_retries=10)
        client._max_429_retries = 1

        async with client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get("https://proxy.test/x")

        assert exc_info.value.status_code == 429
        assert "Rate limit exceeded" in str(exc_info.value)


@pytest.mark.unit
class TestGetJson:
    @pytest.mark.asyncio
    async def test_returns_object(self) -> None:
        transport = _transport(httpx.Response(200, json={"Version": "v1.0.0"}))
        async with HTTPClient(transport=transport) as client:
            assert await client.get_json("https://proxy.test/@latest") == {"Version": "v1.0.0"}

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        transport = _transport(httpx.Response(200, text="not json"))
        async with HTTPClient(transport=transport) as client:
            with pytest.raises(NetworkError, match="Invalid JSON"):
                await client.get_json("https://proxy.test/@latest")

    @pytest.mark.asyncio
    async def test_non_object_json(self) -> None:
        transport = _transport(httpx.Response(200, json=["v1.0.0"]))
        async with HTTPClient(transport=transport) as client:
            with pytest.raises(NetworkError, match="Expected JSON object"):
                await client.get_json("https://proxy.test/@latest")


@pytest.mark.unit
class TestRetryAfterSeconds:
    @pytest.mark.parametrize(
        "headers,expected",
        [
            ({"Retry-After": "3"}, 3),
            ({}, 1),
            ({"Retry-After": "soon"}, 1),
            ({"Retry-After": "-5"}, 0),
        ],
    )
    def test_parsing(self, headers: dict, expected: int) -> None:
        assert _retry_after_seconds(httpx.Response(429, headers=headers)) == expected
