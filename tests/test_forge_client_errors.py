"""Forge client error translation tests."""

from __future__ import annotations

import httpx
import pytest
from gitea_mcp.config import LimitsConfig
from gitea_mcp.errors import SafeError
from gitea_mcp.forge_client import ForgeClient


def _client(handler) -> ForgeClient:
    return ForgeClient(
        token="s3cret-token",
        base_url="https://git.example.com",
        limits=LimitsConfig(error_body_max_chars=40),
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "code"),
    [
        (401, "Forbidden"),
        (403, "Forbidden"),
        (404, "NotFound"),
        (409, "Conflict"),
        (412, "Conflict"),
        (422, "Remote"),
        (500, "Remote"),
        (503, "Remote"),
    ],
)
async def test_status_codes_map_to_safe_errors(status: int, code: str) -> None:
    calls = {"n": 0}

    def handler(_request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(status, json={"message": "nope"})

    with pytest.raises(SafeError) as exc:
        await _client(handler).request_json(method="GET", path="/repos/acme/widgets")

    assert exc.value.code == code
    assert exc.value.status_code == status
    # No automatic retries.
    assert calls["n"] == 1


@pytest.mark.asyncio
async def test_remote_message_is_carried_as_hint() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "[Title]: Required"})

    with pytest.raises(SafeError) as exc:
        await _client(handler).request_json(method="POST", path="/repos/acme/widgets/issues", json_body={})

    assert exc.value.hint == "[Title]: Required"
    assert "422" in exc.value.message


@pytest.mark.asyncio
async def test_non_json_error_body_is_truncated_and_redacted() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="token s3cret-token rejected " + "x" * 200)

    with pytest.raises(SafeError) as exc:
        await _client(handler).request_json(method="GET", path="/x")

    assert exc.value.hint is not None
    assert "s3cret-token" not in exc.value.hint
    assert exc.value.hint.endswith("...")
    assert len(exc.value.hint) <= 43


@pytest.mark.asyncio
async def test_invalid_json_success_body() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"{not json")

    with pytest.raises(SafeError) as exc:
        await _client(handler).request_json(method="GET", path="/x")

    assert exc.value.code == "Remote"
    assert "invalid JSON" in exc.value.message


@pytest.mark.asyncio
async def test_transport_error_maps_to_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(SafeError) as exc:
        await _client(handler).request_json(method="GET", path="/x")

    assert exc.value.code == "Network"


@pytest.mark.asyncio
async def test_timeout_maps_to_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(SafeError) as exc:
        await _client(handler).request_json(method="GET", path="/x")

    assert exc.value.code == "Network"
    assert "timed out" in exc.value.message


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [301, 302, 307])
async def test_redirects_are_not_followed_and_fail(status: int) -> None:
    calls = {"n": 0}

    def handler(_request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(status, headers={"Location": "https://elsewhere.example.com/"})

    with pytest.raises(SafeError) as exc:
        await _client(handler).request_json(method="GET", path="/repos/acme/old-name/issues")

    assert exc.value.code == "Remote"
    assert exc.value.status_code == status
    assert "renamed" in (exc.value.hint or "")
    assert calls["n"] == 1


@pytest.mark.asyncio
async def test_no_content_redirect_is_a_failure() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(302, headers={"Location": "https://elsewhere.example.com/"})

    with pytest.raises(SafeError) as exc:
        await _client(handler).request_no_content(method="DELETE", path="/x")
    assert exc.value.status_code == 302


@pytest.mark.asyncio
async def test_forbidden_keeps_forge_message_in_hint() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"message": "token lacks scope [write:issue]"})

    with pytest.raises(SafeError) as exc:
        await _client(handler).request_json(method="POST", path="/repos/acme/widgets/issues", json_body={})

    assert exc.value.code == "Forbidden"
    assert "write:issue" in (exc.value.hint or "")


@pytest.mark.asyncio
async def test_forbidden_hint_is_redacted() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="bad token s3cret-token")

    with pytest.raises(SafeError) as exc:
        await _client(handler).request_json(method="GET", path="/user")

    assert "s3cret-token" not in (exc.value.hint or "")


@pytest.mark.asyncio
async def test_non_utf8_success_body_is_remote_error() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"\xff\xfe\xfa")

    with pytest.raises(SafeError) as exc:
        await _client(handler).request_json(method="GET", path="/repos/acme/widgets")

    assert exc.value.code == "Remote"
    assert "invalid JSON" in exc.value.message
