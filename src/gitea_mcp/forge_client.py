"""Gitea/Forgejo REST client wrapper.

Provides:
- token authentication on every request and no-redirect behavior
- finite timeouts
- safe translation of remote statuses into SafeError codes
- sequential list-all pagination

Requests are never retried and responses are never cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .config import LimitsConfig
from .errors import SafeError, forge_auth_forbidden
from .safety import redact_text, truncate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RemoteRequest:
    """A single call against the forge API. ``path`` is relative to ``/api/v1``."""

    method: str
    path: str
    params: dict[str, Any] | None = None
    json_body: Any = None


@dataclass(frozen=True, slots=True)
class RemoteResponse:
    status_code: int
    body: Any


@dataclass(frozen=True, slots=True)
class PageCursor:
    page: int
    per_page: int

    def next(self) -> PageCursor:
        return PageCursor(page=self.page + 1, per_page=self.per_page)

    def as_params(self) -> dict[str, int]:
        return {"page": self.page, "limit": self.per_page}


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return None
    return {k: v for k, v in params.items() if v is not None}


class ForgeClient:
    """Minimal Gitea/Forgejo REST client."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str,
        limits: LimitsConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Create a forge REST client.

        Args:
            token: API token sent as ``Authorization: token <token>``.
            base_url: Forge root URL, without the ``/api/v1`` suffix.
            limits: Timeouts and pagination limits.
            transport: Optional httpx transport for tests.
        """
        self._token = token
        self._api_base_url = f"{base_url.rstrip('/')}/api/v1"
        self._limits = limits
        self._transport = transport

    @property
    def limits(self) -> LimitsConfig:
        return self._limits

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self._token}",
            "Accept": "application/json",
        }

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            timeout=self._limits.total_timeout_s,
            connect=self._limits.connect_timeout_s,
            read=self._limits.read_timeout_s,
        )

    def _failure(self, resp: httpx.Response) -> SafeError:
        status = resp.status_code
        detail: str | None = None
        try:
            payload = resp.json()
            if isinstance(payload, dict) and isinstance(payload.get("message"), str):
                detail = payload["message"]
        except ValueError:
            detail = None
        if detail is None and resp.text:
            detail = resp.text
        if detail is not None:
            detail = truncate(redact_text(detail, self._token), self._limits.error_body_max_chars)

        if status in (401, 403):
            return forge_auth_forbidden(status_code=status, detail=detail)
        if 300 <= status < 400:
            # Redirects are not followed; a renamed or transferred repository answers 301.
            return SafeError(
                code="Remote",
                message=f"Forge redirected the request (HTTP {status})",
                hint="The repository may have been renamed or transferred; check owner and repo",
                status_code=status,
            )
        if status == 404:
            return SafeError(code="NotFound", message="Resource not found", hint=detail, status_code=status)
        if status in (409, 412):
            return SafeError(code="Conflict", message="Remote reported a conflict", hint=detail, status_code=status)
        if status >= 500:
            message = f"Forge service error (HTTP {status})"
        else:
            message = f"Forge rejected the request (HTTP {status})"
        return SafeError(code="Remote", message=message, hint=detail, status_code=status)

    async def send(self, request: RemoteRequest, *, expect: str = "json") -> RemoteResponse:
        """Send one request and decode the body.

        ``expect`` is ``"json"``, ``"text"`` or ``"none"``.
        """
        url = f"{self._api_base_url}{request.path}"
        try:
            async with httpx.AsyncClient(
                follow_redirects=False,
                timeout=self._timeout(),
                transport=self._transport,
            ) as client:
                resp = await client.request(
                    request.method,
                    url,
                    headers=self._headers(),
                    params=_clean_params(request.params),
                    json=request.json_body,
                )
        except httpx.TimeoutException as exc:
            raise SafeError(code="Network", message="Request to the forge timed out") from exc
        except httpx.HTTPError as exc:
            raise SafeError(code="Network", message="Network request failed") from exc

        logger.debug("%s %s -> %s", request.method, request.path, resp.status_code)

        if not resp.is_success:
            raise self._failure(resp)

        if expect == "none":
            return RemoteResponse(status_code=resp.status_code, body=None)
        if expect == "text":
            return RemoteResponse(status_code=resp.status_code, body=resp.text)

        if not resp.content:
            return RemoteResponse(status_code=resp.status_code, body=None)
        try:
            data = resp.json()
        except ValueError as exc:
            # JSONDecodeError and UnicodeDecodeError (non UTF-8 body) alike
            raise SafeError(
                code="Remote",
                message="Forge returned invalid JSON",
                status_code=resp.status_code,
            ) from exc
        return RemoteResponse(status_code=resp.status_code, body=data)

    async def request_json(
        self,
        *,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> Any:
        """Make a request and return decoded JSON (object, array or None)."""
        resp = await self.send(RemoteRequest(method=method, path=path, params=params, json_body=json_body))
        return resp.body

    async def request_text(self, *, path: str, params: dict[str, Any] | None = None) -> str:
        """GET a raw text resource such as a diff or job log."""
        resp = await self.send(RemoteRequest(method="GET", path=path, params=params), expect="text")
        return resp.body

    async def request_no_content(
        self,
        *,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> int:
        """Make a request whose response body is ignored; return the status code."""
        resp = await self.send(
            RemoteRequest(method=method, path=path, params=params, json_body=json_body),
            expect="none",
        )
        return resp.status_code

    async def paginate(
        self,
        *,
        path: str,
        params: dict[str, Any] | None = None,
        per_page: int | None = None,
        items_key: str | None = None,
    ) -> list[Any]:
        """Fetch every page of a list endpoint and concatenate the items in order.

        Pages are requested one at a time starting at 1. Iteration stops at the first
        empty page or the first page shorter than ``per_page``. Any failing page fails
        the whole call; no partial list is ever returned.

        Args:
            items_key: For endpoints that wrap the array in an object (e.g. ``data``).
        """
        size = per_page or self._limits.default_page_size
        size = max(1, min(size, self._limits.max_page_size))
        base_params = dict(params or {})

        items: list[Any] = []
        cursor = PageCursor(page=1, per_page=size)
        while True:
            if cursor.page > self._limits.max_pages:
                raise SafeError(
                    code="Remote",
                    message=f"Listing exceeded {self._limits.max_pages} pages",
                    hint="Narrow the query or request pages individually",
                )
            page_params = {**base_params, **cursor.as_params()}
            data = await self.request_json(method="GET", path=path, params=page_params)
            if items_key is not None and isinstance(data, dict):
                data = data.get(items_key)
            if data is None:
                data = []
            if not isinstance(data, list):
                raise SafeError(code="Remote", message="Unexpected non-list page in paginated response")

            items.extend(data)
            if len(data) < size:
                break
            cursor = cursor.next()

        logger.debug("Paginated %s: %s items over %s pages", path, len(items), cursor.page)
        return items
