from __future__ import annotations

import asyncio

import httpx

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.config import RateLimit, ResilienceConfig


def test_client_is_built_from_config() -> None:
    config = ResilienceConfig(
        name="catalog",
        base_url="https://catalog.example.com",
        timeout_seconds=5.0,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        default_headers={"Accept": "application/json"},
    )

    client = ResilientClient(config, auth=httpx.BasicAuth("svc-sync", "secret"))

    inner = client._client  # noqa: SLF001  # type: ignore[reportPrivateUsage]
    assert inner.base_url.host == "catalog.example.com"
    assert inner.headers["Accept"] == "application/json"
    assert inner.timeout == httpx.Timeout(5.0)
    assert isinstance(inner.auth, httpx.BasicAuth)
    asyncio.run(client.aclose())


def test_requests_go_through_the_rate_limiter() -> None:
    seen: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"ok": True})

    async def scenario() -> list[int]:
        client = ResilientClient(
            ResilienceConfig(name="catalog", ratelimit=RateLimit(max_calls=5, per_seconds=1.0))
        )
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        async with client:
            responses = [
                await client.request("GET", f"https://catalog.example.com/jobs/{index}")
                for index in range(3)
            ]
        return [response.status_code for response in responses]

    assert asyncio.run(scenario()) == [200, 200, 200]
    assert seen == ["/jobs/0", "/jobs/1", "/jobs/2"]
