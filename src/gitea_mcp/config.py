"""Configuration loading for gitea-mcp.

Configuration is supplied by the host environment (e.g., MCP client config), not by the agent.
The API token is a secret and must never be emitted to agents, logs, or audit reasons.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import SafeError


@dataclass(frozen=True, slots=True)
class LimitsConfig:
    """Non-functional safety limits."""

    # Network
    total_timeout_s: float = 60.0
    connect_timeout_s: float = 5.0
    read_timeout_s: float = 30.0

    # Pagination
    default_page_size: int = 20
    max_page_size: int = 50
    max_pages: int = 100

    # Payload limits
    file_max_bytes: int = 1024 * 1024
    error_body_max_chars: int = 500


@dataclass(frozen=True, slots=True)
class ForgeConfig:
    """Forge endpoint, credential and host-side settings."""

    base_url: str
    token: str
    default_directory: Path | None
    audit_log_path: Path | None
    audit_max_bytes: int
    audit_max_backups: int
    limits: LimitsConfig

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/api/v1"


def _first_env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip():
            return value.strip()
    return None


def _absolute_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if not raw:
        return None
    p = Path(raw)
    if not p.is_absolute():
        raise SafeError(code="Config", message=f"{name} must be an absolute path when set")
    return p


def load_config_from_env() -> ForgeConfig:
    """Load and validate configuration from environment variables.

    Raises:
        SafeError: If configuration is missing/invalid.
    """
    base_url = _first_env("GITEA_URL", "FORGEJO_REMOTE_URL")
    token = _first_env("GITEA_TOKEN", "FORGEJO_AUTH_TOKEN")

    if not base_url or not token:
        raise SafeError(
            code="Config",
            message="Missing required configuration (GITEA_URL or FORGEJO_REMOTE_URL, GITEA_TOKEN or FORGEJO_AUTH_TOKEN)",
        )

    base_url = base_url.rstrip("/")
    if not base_url.startswith(("https://", "http://")):
        raise SafeError(code="Config", message="GITEA_URL must start with http:// or https://")

    default_directory = _absolute_path("GITEA_DEFAULT_DIRECTORY")
    audit_path = _absolute_path("GITEA_MCP_AUDIT_LOG_PATH")

    limits = LimitsConfig()
    timeout_raw = os.getenv("GITEA_MCP_TIMEOUT_S")
    if timeout_raw:
        try:
            timeout_s = float(timeout_raw)
        except ValueError as exc:
            raise SafeError(code="Config", message="GITEA_MCP_TIMEOUT_S must be a number") from exc
        if timeout_s <= 0:
            raise SafeError(code="Config", message="GITEA_MCP_TIMEOUT_S must be positive")
        limits = LimitsConfig(
            total_timeout_s=timeout_s,
            connect_timeout_s=min(limits.connect_timeout_s, timeout_s),
            read_timeout_s=min(limits.read_timeout_s, timeout_s),
        )

    return ForgeConfig(
        base_url=base_url,
        token=token,
        default_directory=default_directory,
        audit_log_path=audit_path,
        audit_max_bytes=5 * 1024 * 1024,
        audit_max_backups=2,
        limits=limits,
    )
