"""Safety helpers.

Deterministic credential detection/redaction rules and size limit helpers.

Key rule: if an agent-provided input appears to be a credential, reject the request
and do not echo the suspected secret value.
"""

from __future__ import annotations

from typing import Any

from .errors import SafeError

_CRED_FIELD_NAMES = {
    "token",
    "access_token",
    "authorization",
    "password",
    "private_key",
    "api_key",
}

REDACTED = "<redacted>"


def looks_like_credential_field_name(field_name: str) -> bool:
    """Return True if a key name looks like a credential field."""
    if not isinstance(field_name, str):
        return False
    return field_name.strip().lower() in _CRED_FIELD_NAMES


def validate_no_secrets(obj: Any) -> None:
    """Reject agent-provided input that carries credential-like field names.

    Raises SafeError without echoing the offending value.
    """
    if isinstance(obj, dict):
        for k, v in obj.items():
            if looks_like_credential_field_name(str(k)):
                raise SafeError(code="UserInput", message="Credential-like fields are not allowed")
            validate_no_secrets(v)
        return
    if isinstance(obj, list):
        for item in obj:
            validate_no_secrets(item)


def enforce_max_bytes(*, data: bytes, max_bytes: int, what: str) -> None:
    """Enforce an upper bound on byte payloads."""
    if len(data) > max_bytes:
        raise SafeError(code="UserInput", message=f"{what} exceeds size limit")


def redact_text(text: str, secret: str | None) -> str:
    """Return ``text`` with every occurrence of ``secret`` replaced."""
    if not isinstance(text, str):
        return "<non-string>"
    if secret:
        return text.replace(secret, REDACTED)
    return text


def truncate(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."
