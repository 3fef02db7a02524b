"""Parameter validation tests."""

from __future__ import annotations

import pytest
from gitea_mcp.errors import SafeError
from gitea_mcp.tools import TOOL_REGISTRY, validate_tool_arguments
from gitea_mcp.validation import validate_arguments


def _full_valid_args(tool_name: str) -> dict[str, object]:
    """Build a value for every required field of a tool."""
    samples = {"string": "x", "integer": 1, "boolean": True, "array": []}
    schema = TOOL_REGISTRY[tool_name].input_schema
    out: dict[str, object] = {}
    for name in schema["required"]:
        spec = schema["properties"][name]
        out[name] = spec["enum"][0] if "enum" in spec else samples[spec["type"]]
    return out


@pytest.mark.parametrize(
    "tool_name",
    sorted(n for n, d in TOOL_REGISTRY.items() if d.required_fields),
)
def test_missing_required_field_is_named_exactly(tool_name: str) -> None:
    descriptor = TOOL_REGISTRY[tool_name]
    full = _full_valid_args(tool_name)
    for field_name in descriptor.required_fields:
        args = {k: v for k, v in full.items() if k != field_name}
        # Noise in other fields must not change which error is reported.
        args["unexpected_noise"] = 1
        with pytest.raises(SafeError) as exc:
            validate_tool_arguments(tool_name, args)
        assert exc.value.code == "MissingField"
        assert exc.value.message == f"Missing required field: {field_name}"


def test_first_missing_field_reported_in_schema_order() -> None:
    with pytest.raises(SafeError) as exc:
        validate_tool_arguments("pr_create", {})
    assert exc.value.message.endswith(": title")


def test_state_outside_enum_is_invalid_value() -> None:
    with pytest.raises(SafeError) as exc:
        validate_tool_arguments("issue_list", {"owner": "acme", "repo": "widgets", "state": "archived"})
    assert exc.value.code == "InvalidValue"
    assert "'state'" in exc.value.message
    assert exc.value.hint == "Allowed values: open, closed, all"


def test_enum_values_are_normalized_case_insensitively() -> None:
    out = validate_tool_arguments("issue_list", {"state": " Closed "})
    assert out["state"] == "closed"
    out = validate_tool_arguments("pr_review_create", {"index": 3, "event": "approved"})
    assert out["event"] == "APPROVED"


def test_defaults_are_substituted() -> None:
    out = validate_tool_arguments("issue_list", {"owner": "acme", "repo": "widgets"})
    assert out["state"] == "open"
    assert out["page"] == 1
    assert out["limit"] == 20
    assert out["all_pages"] is False
    assert "labels" not in out


def test_validation_does_not_mutate_input() -> None:
    args = {"owner": "acme", "repo": "widgets"}
    _ = validate_tool_arguments("pr_list", args)
    assert args == {"owner": "acme", "repo": "widgets"}


@pytest.mark.parametrize(
    ("args", "code"),
    [
        ({"index": "7"}, "TypeMismatch"),
        ({"index": True}, "TypeMismatch"),
        ({"index": 0}, "InvalidValue"),
    ],
)
def test_integer_fields(args: dict[str, object], code: str) -> None:
    with pytest.raises(SafeError) as exc:
        validate_tool_arguments("issue_get", args)
    assert exc.value.code == code


def test_limit_bounds() -> None:
    with pytest.raises(SafeError) as exc:
        validate_tool_arguments("pr_list", {"limit": 51})
    assert exc.value.code == "InvalidValue"
    assert validate_tool_arguments("pr_list", {"limit": 50})["limit"] == 50


def test_array_item_types_are_checked() -> None:
    with pytest.raises(SafeError) as exc:
        validate_tool_arguments("issue_create", {"title": "t", "labels": ["bug"]})
    assert exc.value.code == "TypeMismatch"
    assert "labels" in exc.value.message


def test_unexpected_fields_are_rejected_sorted() -> None:
    with pytest.raises(SafeError) as exc:
        validate_tool_arguments("repo_get", {"zeta": 1, "alpha": 2})
    assert exc.value.code == "UnexpectedField"
    assert exc.value.message == "Unexpected fields: alpha, zeta"


def test_null_counts_as_absent() -> None:
    with pytest.raises(SafeError) as exc:
        validate_tool_arguments("issue_get", {"index": None})
    assert exc.value.code == "MissingField"
    out = validate_tool_arguments("issue_list", {"state": None})
    assert out["state"] == "open"


def test_min_length_applies_to_required_strings() -> None:
    with pytest.raises(SafeError) as exc:
        validate_tool_arguments("issue_create", {"title": "   "})
    assert exc.value.code == "InvalidValue"


def test_unknown_tool() -> None:
    with pytest.raises(SafeError) as exc:
        validate_tool_arguments("issue_explode", {})
    assert exc.value.code == "UnknownTool"


def test_validate_arguments_allows_extras_when_schema_permits() -> None:
    schema = {"type": "object", "properties": {"a": {"type": "string"}}}
    assert validate_arguments(schema, {"a": "x", "b": 2}) == {"a": "x", "b": 2}


def test_descriptor_exposes_required_fields_and_defaults() -> None:
    d = TOOL_REGISTRY["pr_merge"]
    assert d.required_fields == ("index",)
    assert d.default_values == {"merge_style": "merge", "delete_branch_after_merge": False}


def test_credential_like_field_is_rejected_without_echo() -> None:
    with pytest.raises(SafeError) as exc:
        validate_tool_arguments("repo_get", {"owner": "a", "repo": "b", "Access_Token": "xyz", "zeta": 1})
    assert exc.value.code == "UserInput"
    assert "xyz" not in exc.value.message


def test_credential_like_field_rejected_even_when_extras_allowed() -> None:
    schema = {"type": "object", "properties": {"a": {"type": "string"}}}
    with pytest.raises(SafeError) as exc:
        validate_arguments(schema, {"a": "x", "api_key": "k"})
    assert exc.value.code == "UserInput"


@pytest.mark.parametrize("secret_field", ["token", "password", "authorization"])
def test_missing_required_field_reported_before_credential_field(secret_field: str) -> None:
    with pytest.raises(SafeError) as exc:
        validate_tool_arguments("issue_get", {secret_field: "v"})
    assert exc.value.code == "MissingField"
    assert exc.value.message == "Missing required field: index"
