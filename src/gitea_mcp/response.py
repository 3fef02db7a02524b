"""Tool result envelopes.

Success: ``{"ok": true, "correlation_id": ..., **result}``.
Failure: ``{"ok": false, "error": true, "code", "category", "message", "hint"?, "status"?}``.
"""

from __future__ import annotations

from typing import Any

from .errors import SafeError, error_category


def success_result(result: dict[str, Any], correlation_id: str | None = None) -> dict[str, Any]:
    out: dict[str, Any] = {"ok": True}
    if correlation_id is not None:
        out["correlation_id"] = correlation_id
    out.update(result)
    return out


def to_error_result(
    *,
    code: str,
    message: str,
    hint: str | None = None,
    status_code: int | None = None,
) -> dict[str, Any]:
    """Build a standard tool error envelope."""
    out: dict[str, Any] = {
        "ok": False,
        "error": True,
        "code": code,
        "category": error_category(code),
        "message": message,
    }
    if hint:
        out["hint"] = hint
    if status_code is not None:
        out["status"] = status_code
    return out


def safe_error_to_result(err: SafeError, correlation_id: str | None = None) -> dict[str, Any]:
    """Convert a SafeError into the standard tool envelope."""
    out = to_error_result(code=err.code, message=err.message, hint=err.hint, status_code=err.status_code)
    if correlation_id is not None:
        out["correlation_id"] = correlation_id
    return out


def internal_error(message: str = "Internal error", correlation_id: str | None = None) -> dict[str, Any]:
    """Error for unexpected failures."""
    out = to_error_result(code="Internal", message=message)
    if correlation_id is not None:
        out["correlation_id"] = correlation_id
    return out
