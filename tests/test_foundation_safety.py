"""Safety helper tests."""

from __future__ import annotations

import pytest
from gitea_mcp.errors import SafeError
from gitea_mcp.safety import enforce_max_bytes, redact_text, truncate, validate_no_secrets


@pytest.mark.parametrize("name", ["token", "Authorization", " PASSWORD ", "api_key"])
def test_validate_no_secrets_rejects_credential_fields(name: str) -> None:
    with pytest.raises(SafeError) as exc:
        validate_no_secrets({"owner": "acme", name: "value-123"})

    assert exc.value.code == "UserInput"
    assert "value-123" not in exc.value.message


def test_validate_no_secrets_checks_nested_structures() -> None:
    with pytest.raises(SafeError):
        validate_no_secrets({"items": [{"password": "x"}]})


def test_validate_no_secrets_accepts_regular_arguments() -> None:
    validate_no_secrets({"owner": "acme", "repo": "widgets", "labels": [1, 2], "body": "token in prose is fine"})


def test_redact_text_replaces_secret() -> None:
    assert redact_text("bad token abc123 here", "abc123") == "bad token <redacted> here"
    assert redact_text("nothing", None) == "nothing"


def test_enforce_max_bytes() -> None:
    enforce_max_bytes(data=b"abc", max_bytes=3, what="payload")
    with pytest.raises(SafeError) as exc:
        enforce_max_bytes(data=b"abcd", max_bytes=3, what="payload")
    assert "payload exceeds size limit" == exc.value.message


def test_truncate() -> None:
    assert truncate("abcdef", 10) == "abcdef"
    assert truncate("abcdef", 3) == "abc..."
