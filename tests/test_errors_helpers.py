"""Error taxonomy and response envelope tests."""

from __future__ import annotations

import pytest
from gitea_mcp.errors import (
    SafeError,
    error_category,
    invalid_value,
    missing_field,
    stale_concurrency_token,
    unknown_tool,
)
from gitea_mcp.response import internal_error, safe_error_to_result, success_result


@pytest.mark.parametrize(
    ("code", "category"),
    [
        ("MissingField", "Validation"),
        ("TypeMismatch", "Validation"),
        ("InvalidValue", "Validation"),
        ("UnexpectedField", "Validation"),
        ("MissingTarget", "Resolution"),
        ("NoMetadataFound", "Resolution"),
        ("NoRemoteConfigured", "Resolution"),
        ("UnrecognizedRemoteFormat", "Resolution"),
        ("NotFound", "Remote"),
        ("Conflict", "Remote"),
        ("Network", "Remote"),
        ("UnknownTool", "Dispatch"),
        ("Config", "Config"),
        ("SomethingElse", "Internal"),
    ],
)
def test_error_category(code: str, category: str) -> None:
    assert error_category(code) == category
    assert SafeError(code=code, message="m").category == category


def test_invalid_value_lists_allowed_set() -> None:
    err = invalid_value("state", ["open", "closed", "all"])
    assert err.code == "InvalidValue"
    assert "state" in err.message
    assert err.hint == "Allowed values: open, closed, all"


def test_missing_field_names_field() -> None:
    err = missing_field("title")
    assert err.code == "MissingField"
    assert err.message.endswith("title")


def test_stale_token_error_mentions_fresh_read() -> None:
    err = stale_concurrency_token("README.md", 409)
    assert err.code == "Conflict"
    assert err.status_code == 409
    assert "file_read" in (err.hint or "")


def test_error_envelope_shape() -> None:
    out = safe_error_to_result(SafeError(code="NotFound", message="gone", hint="h", status_code=404), "cid")
    assert out == {
        "ok": False,
        "error": True,
        "code": "NotFound",
        "category": "Remote",
        "message": "gone",
        "hint": "h",
        "status": 404,
        "correlation_id": "cid",
    }


def test_error_envelope_omits_empty_hint_and_status() -> None:
    out = safe_error_to_result(unknown_tool("x", []))
    assert out["code"] == "UnknownTool"
    assert "status" not in out
    assert "correlation_id" not in out


def test_success_envelope_merges_result() -> None:
    out = success_result({"issue": {"number": 1}}, "cid")
    assert out == {"ok": True, "correlation_id": "cid", "issue": {"number": 1}}


def test_internal_error_is_generic() -> None:
    out = internal_error()
    assert out["code"] == "Internal"
    assert out["category"] == "Internal"
    assert out["error"] is True
