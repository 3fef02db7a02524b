"""Foundational tests: configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from gitea_mcp.config import load_config_from_env
from gitea_mcp.errors import SafeError

_ALL_VARS = (
    "GITEA_URL",
    "FORGEJO_REMOTE_URL",
    "GITEA_TOKEN",
    "FORGEJO_AUTH_TOKEN",
    "GITEA_DEFAULT_DIRECTORY",
    "GITEA_MCP_AUDIT_LOG_PATH",
    "GITEA_MCP_TIMEOUT_S",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ALL_VARS:
        monkeypatch.delenv(name, raising=False)


def test_load_config_requires_url_and_token() -> None:
    with pytest.raises(SafeError) as exc:
        _ = load_config_from_env()

    assert exc.value.code == "Config"
    assert "Missing required configuration" in exc.value.message


def test_load_config_strips_trailing_slash(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITEA_URL", "https://git.example.com/")
    monkeypatch.setenv("GITEA_TOKEN", "tok")

    cfg = load_config_from_env()
    assert cfg.base_url == "https://git.example.com"
    assert cfg.api_url == "https://git.example.com/api/v1"
    assert cfg.token == "tok"
    assert cfg.default_directory is None
    assert cfg.audit_log_path is None


def test_load_config_accepts_forgejo_fallback_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FORGEJO_REMOTE_URL", "https://forgejo.example.org")
    monkeypatch.setenv("FORGEJO_AUTH_TOKEN", "ftok")

    cfg = load_config_from_env()
    assert cfg.base_url == "https://forgejo.example.org"
    assert cfg.token == "ftok"


def test_gitea_names_take_precedence_over_forgejo_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITEA_URL", "https://gitea.example.com")
    monkeypatch.setenv("FORGEJO_REMOTE_URL", "https://forgejo.example.org")
    monkeypatch.setenv("GITEA_TOKEN", "gtok")
    monkeypatch.setenv("FORGEJO_AUTH_TOKEN", "ftok")

    cfg = load_config_from_env()
    assert cfg.base_url == "https://gitea.example.com"
    assert cfg.token == "gtok"


def test_load_config_rejects_non_http_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITEA_URL", "git.example.com")
    monkeypatch.setenv("GITEA_TOKEN", "tok")

    with pytest.raises(SafeError) as exc:
        _ = load_config_from_env()

    assert "GITEA_URL" in exc.value.message


def test_config_errors_never_echo_the_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITEA_URL", "ftp://nope")
    monkeypatch.setenv("GITEA_TOKEN", "super-secret-value")

    with pytest.raises(SafeError) as exc:
        _ = load_config_from_env()

    assert "super-secret-value" not in exc.value.message


@pytest.mark.parametrize("name", ["GITEA_DEFAULT_DIRECTORY", "GITEA_MCP_AUDIT_LOG_PATH"])
def test_load_config_rejects_relative_paths(monkeypatch: pytest.MonkeyPatch, name: str) -> None:
    monkeypatch.setenv("GITEA_URL", "https://git.example.com")
    monkeypatch.setenv("GITEA_TOKEN", "tok")
    monkeypatch.setenv(name, "relative/dir")

    with pytest.raises(SafeError) as exc:
        _ = load_config_from_env()

    assert name in exc.value.message


def test_load_config_accepts_absolute_paths(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    audit = tmp_path / "audit.jsonl"
    monkeypatch.setenv("GITEA_URL", "https://git.example.com")
    monkeypatch.setenv("GITEA_TOKEN", "tok")
    monkeypatch.setenv("GITEA_DEFAULT_DIRECTORY", str(tmp_path))
    monkeypatch.setenv("GITEA_MCP_AUDIT_LOG_PATH", str(audit))

    cfg = load_config_from_env()
    assert cfg.default_directory == tmp_path
    assert cfg.audit_log_path == audit


def test_load_config_parses_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITEA_URL", "https://git.example.com")
    monkeypatch.setenv("GITEA_TOKEN", "tok")
    monkeypatch.setenv("GITEA_MCP_TIMEOUT_S", "12.5")

    cfg = load_config_from_env()
    assert cfg.limits.total_timeout_s == 12.5
    assert cfg.limits.read_timeout_s == 12.5


@pytest.mark.parametrize("value", ["abc", "0", "-3"])
def test_load_config_rejects_bad_timeout(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("GITEA_URL", "https://git.example.com")
    monkeypatch.setenv("GITEA_TOKEN", "tok")
    monkeypatch.setenv("GITEA_MCP_TIMEOUT_S", value)

    with pytest.raises(SafeError) as exc:
        _ = load_config_from_env()

    assert "GITEA_MCP_TIMEOUT_S" in exc.value.message


def test_short_timeout_clamps_connect_and_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITEA_URL", "https://git.example.com")
    monkeypatch.setenv("GITEA_TOKEN", "tok")
    monkeypatch.setenv("GITEA_MCP_TIMEOUT_S", "2")

    limits = load_config_from_env().limits
    assert limits.total_timeout_s == 2.0
    assert limits.connect_timeout_s == 2.0
    assert limits.read_timeout_s == 2.0
