"""Safe error types and factories.

Errors returned to agents must be non-secret and stable. Every failure raised inside the
dispatch pipeline is a SafeError whose ``code`` belongs to exactly one category.
"""

from __future__ import annotations

from dataclasses import dataclass

VALIDATION_CODES = frozenset({"MissingField", "TypeMismatch", "InvalidValue", "UnexpectedField", "UserInput"})
RESOLUTION_CODES = frozenset({"MissingTarget", "NoMetadataFound", "NoRemoteConfigured", "UnrecognizedRemoteFormat"})
REMOTE_CODES = frozenset({"Remote", "NotFound", "Forbidden", "Conflict", "Network"})
DISPATCH_CODES = frozenset({"UnknownTool"})


@dataclass(frozen=True, slots=True)
class SafeError(Exception):
    """An error safe to expose to agents.

    This must never include the API token.
    """

    code: str
    message: str
    hint: str | None = None
    status_code: int | None = None

    @property
    def category(self) -> str:
        return error_category(self.code)


def error_category(code: str) -> str:
    """Map an error code to its category name."""
    if code in VALIDATION_CODES:
        return "Validation"
    if code in RESOLUTION_CODES:
        return "Resolution"
    if code in REMOTE_CODES:
        return "Remote"
    if code in DISPATCH_CODES:
        return "Dispatch"
    if code == "Config":
        return "Config"
    return "Internal"


def missing_field(name: str) -> SafeError:
    return SafeError(code="MissingField", message=f"Missing required field: {name}")


def type_mismatch(name: str, expected: str) -> SafeError:
    return SafeError(code="TypeMismatch", message=f"Field '{name}' must be of type {expected}")


def invalid_value(name: str, allowed: list[str] | None = None, detail: str | None = None) -> SafeError:
    """Error for a value outside an enum or numeric/length bounds."""
    if allowed is not None:
        return SafeError(
            code="InvalidValue",
            message=f"Field '{name}' has an invalid value",
            hint=f"Allowed values: {', '.join(allowed)}",
        )
    message = f"Field '{name}' has an invalid value"
    if detail:
        message = f"Field '{name}' {detail}"
    return SafeError(code="InvalidValue", message=message)


def unexpected_fields(names: list[str]) -> SafeError:
    return SafeError(code="UnexpectedField", message=f"Unexpected fields: {', '.join(names)}")


def unknown_tool(name: str, available: list[str]) -> SafeError:
    return SafeError(
        code="UnknownTool",
        message=f"Unknown tool: {name}",
        hint=f"Available tools: {', '.join(available)}",
    )


def stale_concurrency_token(path: str, status_code: int | None) -> SafeError:
    """Conflict raised when a file write carries an outdated sha."""
    return SafeError(
        code="Conflict",
        message=f"File '{path}' was changed since it was read",
        hint="Call file_read again to obtain the current sha, then retry with it",
        status_code=status_code,
    )


def forge_auth_forbidden(*, status_code: int, detail: str | None = None) -> SafeError:
    """Return a safe Forbidden error for 401/403 responses.

    ``detail`` is the (already redacted) forge message, e.g. a missing token scope.
    """
    hint = "Check that the API token is valid and has access to this repository"
    if detail:
        hint = f"{hint}. Forge said: {detail}"
    return SafeError(
        code="Forbidden",
        message="The forge rejected the request as unauthorized",
        hint=hint,
        status_code=status_code,
    )
