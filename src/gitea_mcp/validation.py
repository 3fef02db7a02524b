"""Tool argument validation.

A minimal validator for the subset of JSON Schema used by tool descriptors:
- required fields (reported in schema order)
- credential-like field names (UserInput), checked after required fields
- no extra properties when additionalProperties=false
- basic JSON types (string/integer/boolean/array/object), with array item types
- enum membership, with case-insensitive normalization of string enums
- minLength / minimum / maximum
- default substitution for absent optional fields

It does NOT implement full JSON Schema and never performs I/O.
"""

from __future__ import annotations

import copy
from typing import Any

from .errors import invalid_value, missing_field, type_mismatch, unexpected_fields
from .safety import validate_no_secrets

_TYPE_CHECKS = {
    "string": lambda v: isinstance(v, str),
    "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "boolean": lambda v: isinstance(v, bool),
    "array": lambda v: isinstance(v, list),
    "object": lambda v: isinstance(v, dict),
}


def _normalize_enum(name: str, value: Any, allowed: list[Any]) -> Any:
    if value in allowed:
        return value
    if isinstance(value, str):
        wanted = value.strip().lower()
        for option in allowed:
            if isinstance(option, str) and option.lower() == wanted:
                return option
    raise invalid_value(name, [str(a) for a in allowed])


def _check_bounds(name: str, spec: dict[str, Any], value: Any) -> None:
    min_len = spec.get("minLength")
    if isinstance(value, str) and isinstance(min_len, int) and len(value.strip()) < min_len:
        raise invalid_value(name, detail=f"must be at least {min_len} characters")

    if isinstance(value, int) and not isinstance(value, bool):
        minimum = spec.get("minimum")
        maximum = spec.get("maximum")
        if isinstance(minimum, int) and value < minimum:
            raise invalid_value(name, detail=f"must be >= {minimum}")
        if isinstance(maximum, int) and value > maximum:
            raise invalid_value(name, detail=f"must be <= {maximum}")


def validate_arguments(schema: dict[str, Any], arguments: dict[str, Any]) -> dict[str, Any]:
    """Validate ``arguments`` against ``schema`` and return a normalized copy.

    Raises:
        SafeError: MissingField, UserInput (credential-like field), UnexpectedField,
            TypeMismatch or InvalidValue.
    """
    props: dict[str, Any] = schema.get("properties", {})
    required: list[str] = schema.get("required", [])

    # JSON null is treated as "not provided".
    provided = {k: v for k, v in arguments.items() if v is not None}

    for k in required:
        if k not in provided:
            raise missing_field(k)

    # Credential-like names take precedence over UnexpectedField; values are never echoed.
    undeclared = {k: v for k, v in provided.items() if k not in props}
    validate_no_secrets(undeclared)

    if schema.get("additionalProperties", True) is False:
        extras = sorted(undeclared)
        if extras:
            raise unexpected_fields(extras)

    out: dict[str, Any] = {}
    for k, spec in props.items():
        if k not in provided:
            if "default" in spec:
                out[k] = copy.deepcopy(spec["default"])
            continue

        v = provided[k]
        expected = spec.get("type")
        check = _TYPE_CHECKS.get(expected)
        if check is not None and not check(v):
            raise type_mismatch(k, expected)

        if expected == "array":
            item_type = spec.get("items", {}).get("type")
            item_check = _TYPE_CHECKS.get(item_type)
            if item_check is not None and not all(item_check(item) for item in v):
                raise type_mismatch(k, f"array of {item_type}")
            v = list(v)

        if "enum" in spec:
            v = _normalize_enum(k, v, spec["enum"])

        _check_bounds(k, spec, v)
        out[k] = v

    # Pass through undeclared fields only when the schema allows them.
    out.update(undeclared)

    return out
