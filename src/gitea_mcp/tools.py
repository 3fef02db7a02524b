"""Tool registry and dispatch layer.

This module:
- builds the read-only registry of tool descriptors from the declared metadata
- builds a per-server runtime from host-provided config
- creates a correlation_id per invocation
- runs the dispatch pipeline: lookup, validation (credential-like field names included),
  repository resolution, handler, response mapping and one audit event
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from . import handlers
from .audit import AuditLogger, build_event, new_correlation_id
from .config import ForgeConfig, load_config_from_env
from .errors import SafeError, unknown_tool
from .forge_client import ForgeClient
from .repo_resolver import RepositoryRef, resolve_repository
from .response import internal_error, safe_error_to_result, success_result
from .schemas import REPO_FREE_TOOLS, TOOL_METADATA
from .validation import validate_arguments

logger = logging.getLogger(__name__)

# (runtime, resolved repository or None, validated arguments) -> result dict
ToolHandler = Callable[..., Awaitable[dict[str, Any]]]

_TARGET_FIELDS = ("owner", "repo", "directory")
_DENIED_CATEGORIES = frozenset({"Validation", "Resolution", "Dispatch", "Config"})


@dataclass(frozen=True, slots=True)
class ToolDescriptor:
    """Static description of one tool."""

    name: str
    description: str
    input_schema: dict[str, Any]
    handler: ToolHandler = field(repr=False)
    repo_scoped: bool = True

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(self.input_schema.get("required", ()))

    @property
    def default_values(self) -> dict[str, Any]:
        props: dict[str, Any] = self.input_schema.get("properties", {})
        return {k: spec["default"] for k, spec in props.items() if "default" in spec}


def _build_registry() -> Mapping[str, ToolDescriptor]:
    registry: dict[str, ToolDescriptor] = {}
    for name, meta in TOOL_METADATA.items():
        registry[name] = ToolDescriptor(
            name=name,
            description=meta["description"],
            input_schema=meta["inputSchema"],
            handler=getattr(handlers, name),
            repo_scoped=name not in REPO_FREE_TOOLS,
        )
    return MappingProxyType(registry)


TOOL_REGISTRY: Mapping[str, ToolDescriptor] = _build_registry()


@dataclass(frozen=True, slots=True)
class Runtime:
    """Per-server runtime dependencies shared across tool calls."""

    config: ForgeConfig
    audit: AuditLogger
    forge: ForgeClient


_RUNTIME: Runtime | None = None


def initialize_runtime_from_env() -> Runtime:
    """Initialize and cache runtime from environment.

    Called at server startup (fail-fast), and can also be used lazily.
    """
    global _RUNTIME  # pylint: disable=global-statement
    if _RUNTIME is not None:
        return _RUNTIME

    config = load_config_from_env()
    audit = AuditLogger(
        sink_path=config.audit_log_path,
        max_bytes=config.audit_max_bytes,
        max_backups=config.audit_max_backups,
    )
    forge = ForgeClient(token=config.token, base_url=config.base_url, limits=config.limits)

    _RUNTIME = Runtime(config=config, audit=audit, forge=forge)
    return _RUNTIME


def validate_tool_arguments(tool_name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Validate arguments for a registered tool and return the normalized copy."""
    descriptor = TOOL_REGISTRY.get(tool_name)
    if descriptor is None:
        raise unknown_tool(tool_name, sorted(TOOL_REGISTRY))
    return validate_arguments(descriptor.input_schema, arguments)


def _target_repo_from_args(arguments: dict[str, Any]) -> str:
    owner = arguments.get("owner")
    repo = arguments.get("repo")
    if isinstance(owner, str) and isinstance(repo, str) and owner and repo:
        return f"{owner}/{repo}"
    return "<unresolved>"


async def dispatch_tool(name: str, arguments: dict[str, Any], runtime: Runtime | None = None) -> dict[str, Any]:
    """Dispatch a tool call.

    Always returns an envelope that includes correlation_id. Each stage short-circuits on
    failure: a validation or resolution error never reaches the forge.
    """
    correlation_id = new_correlation_id()
    if not isinstance(arguments, dict):
        arguments = {}
    target_repo = _target_repo_from_args(arguments)
    start: float | None = None

    try:
        if runtime is None:
            runtime = initialize_runtime_from_env()
        start = runtime.audit.measure_start()
        descriptor = TOOL_REGISTRY.get(name)
        if descriptor is None:
            raise unknown_tool(name, sorted(TOOL_REGISTRY))

        validated = validate_arguments(descriptor.input_schema, arguments)

        repo: RepositoryRef | None = None
        if descriptor.repo_scoped:
            repo = resolve_repository(
                validated.get("owner"),
                validated.get("repo"),
                validated.get("directory"),
                default_directory=runtime.config.default_directory,
            )
            target_repo = repo.full_name
        else:
            target_repo = "-"

        handler_args = {k: v for k, v in validated.items() if k not in _TARGET_FIELDS}
        result = await descriptor.handler(runtime, repo, handler_args)

        runtime.audit.write_event(
            build_event(
                correlation_id=correlation_id,
                operation=name,
                target_repo=target_repo,
                outcome="succeeded",
                duration_ms=runtime.audit.measure_duration_ms(start),
            )
        )
        return success_result(result, correlation_id)

    except SafeError as err:
        outcome = "denied" if err.category in _DENIED_CATEGORIES or err.code == "Forbidden" else "failed"
        event = build_event(
            correlation_id=correlation_id,
            operation=name,
            target_repo=target_repo,
            outcome=outcome,
            reason=err.message,
            code=err.code,
            status_code=err.status_code,
            duration_ms=runtime.audit.measure_duration_ms(start) if runtime is not None and start is not None else None,
        )
        if runtime is not None:
            runtime.audit.write_event(event)
        else:
            # Runtime could not be built (Config); still emit the event to stderr.
            AuditLogger(sink_path=None).write_event(event)
        return safe_error_to_result(err, correlation_id)

    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Tool %s raised an unexpected error (correlation_id=%s)", name, correlation_id)
        event = build_event(
            correlation_id=correlation_id,
            operation=name,
            target_repo=target_repo,
            outcome="failed",
            reason="Internal error",
            code="Internal",
            duration_ms=runtime.audit.measure_duration_ms(start) if runtime is not None and start is not None else None,
        )
        (runtime.audit if runtime is not None else AuditLogger(sink_path=None)).write_event(event)
        return internal_error("Internal error", correlation_id)
