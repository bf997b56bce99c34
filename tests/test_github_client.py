"""GitHub client request, retry and error-mapping tests."""

from __future__ import annotations

import httpx
import pytest
from assistant_action.config import ClientLimits
from assistant_action.errors import ActionError
from assistant_action.github_client import GitHubClient


@pytest.mark.asyncio
async def test_sends_bearer_auth_and_json_body() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["method"] = request.method
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = request.content
        return httpx.Response(200, json={"id": 1})

    client = GitHubClient(token="tok", limits=ClientLimits(max_attempts=1), transport=httpx.MockTransport(handler))
    out = await client.request_json(method="PATCH", path="/repos/octo/repo/issues/comments/1", json_body={"body": "x"})

    assert out == {"id": 1}
    assert seen["url"] == "https://api.github.com/repos/octo/repo/issues/comments/1"
    assert seen["method"] == "PATCH"
    assert seen["auth"] == "Bearer tok"
    assert b'"body"' in seen["body"]


def test_rejects_non_https_api_url() -> None:
    with pytest.raises(ActionError) as exc:
        _ = GitHubClient(token="tok", limits=ClientLimits(), api_base_url="http://api.github.com")

    assert exc.value.code == "Config"


def test_accepts_enterprise_api_url() -> None:
    _ = GitHubClient(token="tok", limits=ClientLimits(), api_base_url="https://ghe.example.com/api/v3/")


@pytest.mark.asyncio
async def test_retries_on_429_then_succeeds() -> None:
    calls = {"n": 0}

    def handler(_request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] < 3:
            return httpx.Response(429, json={"message": "rate limited"})
        return httpx.Response(200, json={"ok": True})

    client = GitHubClient(
        token="tok",
        limits=ClientLimits(max_attempts=3, max_backoff_s=0.0),
        transport=httpx.MockTransport(handler),
    )

    assert await client.request_json(method="GET", path="/rate_limit") == {"ok": True}
    assert calls["n"] == 3


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts_on_5xx() -> None:
    calls = {"n": 0}

    def handler(_request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(502, json={"message": "bad gateway"})

    client = GitHubClient(
        token="tok",
        limits=ClientLimits(max_attempts=2, max_backoff_s=0.0),
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(ActionError) as exc:
        _ = await client.request_json(method="GET", path="/x")

    assert calls["n"] == 2
    assert exc.value.status_code == 502
    assert exc.value.hint == "bad gateway"


@pytest.mark.asyncio
async def test_404_is_not_retried() -> None:
    calls = {"n": 0}

    def handler(_request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(404, json={"message": "Not Found"})

    client = GitHubClient(
        token="tok",
        limits=ClientLimits(max_attempts=3, max_backoff_s=0.0),
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(ActionError) as exc:
        _ = await client.request_json(method="GET", path="/x")

    assert calls["n"] == 1
    assert exc.value.code == "GitHub"
    assert exc.value.hint == "Not Found"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_auth_failures_map_to_forbidden(status: int) -> None:
    client = GitHubClient(
        token="tok",
        limits=ClientLimits(max_attempts=1),
        transport=httpx.MockTransport(lambda _r: httpx.Response(status, json={"message": "nope"})),
    )

    with pytest.raises(ActionError) as exc:
        _ = await client.request_json(method="GET", path="/x")

    assert exc.value.code == "Forbidden"
    assert exc.value.status_code == status


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [b"not-json", b'{"id": ' + b"9" * 5000 + b"}"])
async def test_invalid_json_response(content: bytes) -> None:
    client = GitHubClient(
        token="tok",
        limits=ClientLimits(max_attempts=1),
        transport=httpx.MockTransport(lambda _r: httpx.Response(200, content=content)),
    )

    with pytest.raises(ActionError) as exc:
        _ = await client.request_json(method="GET", path="/x")

    assert "invalid json" in exc.value.message.lower()


@pytest.mark.asyncio
async def test_transport_errors_become_network_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    client = GitHubClient(
        token="tok",
        limits=ClientLimits(max_attempts=2, max_backoff_s=0.0),
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(ActionError) as exc:
        _ = await client.request_json(method="GET", path="/x")

    assert exc.value.code == "Network"
