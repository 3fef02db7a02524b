"""Repository resolution.

Turns the optional ``owner``/``repo``/``directory`` tool arguments into exactly one
``RepositoryRef`` using a fixed precedence:

1. explicit owner and repo (both non-empty) are used verbatim, with no filesystem access
2. otherwise the git metadata of ``directory`` (or the configured default directory)
3. otherwise resolution fails with ``MissingTarget``

Only the git config file is read; nothing is written.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote, urlsplit

from .errors import SafeError, invalid_value

logger = logging.getLogger(__name__)

_SECTION_RE = re.compile(r'^\[\s*([A-Za-z0-9.-]+)(?:\s+"((?:[^"\\]|\\.)*)")?\s*\]$')
_SCP_RE = re.compile(r"^(?:[^@/\s]+@)?([^:/\s]+):(.+)$")
_USERINFO_RE = re.compile(r"^(?P<scheme>[A-Za-z][A-Za-z0-9+.-]*://)?[^/\s]*@")


@dataclass(frozen=True, slots=True)
class RepositoryRef:
    """Owner and repository name of the target repository."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def api_path(self) -> str:
        return f"/repos/{quote(self.owner, safe='')}/{quote(self.name, safe='')}"


def _display_url(url: str) -> str:
    """Drop any userinfo (user, password or token) before a URL is shown to agents."""
    return _USERINFO_RE.sub(lambda m: m.group("scheme") or "", url, count=1)


def _unrecognized(url: str) -> SafeError:
    return SafeError(
        code="UnrecognizedRemoteFormat",
        message="Remote URL does not look like a repository address",
        hint=f"Expected https://host/owner/repo.git or git@host:owner/repo.git, got '{_display_url(url)}'",
    )


def _owner_and_name(path: str, url: str) -> RepositoryRef:
    trimmed = path.strip().strip("/")
    # '.git' and '/' may be stacked in either order, e.g. 'repo.git/'
    while trimmed.endswith(".git") or trimmed.endswith("/"):
        trimmed = trimmed.removesuffix(".git").rstrip("/")
    segments = [s for s in trimmed.split("/") if s]
    if len(segments) < 2:
        raise _unrecognized(url)
    return RepositoryRef(owner=segments[0], name=segments[1])


def parse_remote_url(url: str) -> RepositoryRef:
    """Extract owner/name from a git remote URL.

    Accepts the scheme form (``https://``, ``http://``, ``ssh://``, ``git://``) and the
    SCP-like SSH form ``[user@]host:owner/repo``. Trailing ``.git`` and ``/`` are ignored.
    """
    raw = (url or "").strip()
    if not raw:
        raise _unrecognized(raw)

    if "://" in raw:
        parts = urlsplit(raw)
        if parts.scheme not in ("http", "https", "ssh", "git", "git+ssh", "ssh+git") or not parts.netloc:
            raise _unrecognized(raw)
        return _owner_and_name(parts.path, raw)

    m = _SCP_RE.match(raw)
    if m is None:
        raise _unrecognized(raw)
    return _owner_and_name(m.group(2), raw)


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def parse_git_config_remotes(text: str) -> list[tuple[str, str]]:
    """Return ``(remote_name, url)`` pairs in file order.

    Only the first ``url`` of each remote is kept.
    """
    remotes: list[tuple[str, str]] = []
    seen: set[str] = set()
    current: str | None = None

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(("#", ";")):
            continue
        if line.startswith("["):
            m = _SECTION_RE.match(line)
            if m and m.group(1).lower() == "remote" and m.group(2) is not None:
                current = m.group(2)
            else:
                current = None
            continue
        if current is None or current in seen:
            continue
        key, sep, value = line.partition("=")
        if not sep or key.strip().lower() != "url":
            continue
        url = _unquote(value)
        if url:
            remotes.append((current, url))
            seen.add(current)

    return remotes


def _git_config_path(directory: Path) -> Path | None:
    dot_git = directory / ".git"
    if dot_git.is_dir():
        config = dot_git / "config"
        return config if config.is_file() else None

    if dot_git.is_file():
        # Worktrees and submodules: '.git' holds 'gitdir: <path>'
        try:
            content = dot_git.read_text(encoding="utf-8")
        except OSError:
            return None
        for line in content.splitlines():
            if line.startswith("gitdir:"):
                gitdir = Path(line.removeprefix("gitdir:").strip())
                if not gitdir.is_absolute():
                    gitdir = directory / gitdir
                commondir = gitdir / "commondir"
                if commondir.is_file():
                    try:
                        common = Path(commondir.read_text(encoding="utf-8").strip())
                    except OSError:
                        return None
                    gitdir = common if common.is_absolute() else gitdir / common
                config = gitdir / "config"
                return config if config.is_file() else None
    return None


def resolve_from_directory(directory: str | Path) -> RepositoryRef:
    """Resolve the repository from the git metadata of a local checkout."""
    root = Path(directory).expanduser()
    config_path = _git_config_path(root)
    if config_path is None:
        raise SafeError(
            code="NoMetadataFound",
            message="No git metadata found in the given directory",
            hint="Pass owner and repo explicitly, or point directory at a git checkout",
        )
    try:
        text = config_path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise SafeError(code="NoMetadataFound", message="Git metadata could not be read") from exc

    remotes = parse_git_config_remotes(text)
    if not remotes:
        raise SafeError(
            code="NoRemoteConfigured",
            message="The git checkout has no remote URL configured",
            hint="Add a remote (git remote add origin <url>) or pass owner and repo explicitly",
        )

    url = next((u for name, u in remotes if name == "origin"), remotes[0][1])
    return parse_remote_url(url)


def resolve_repository(
    owner: str | None,
    repo: str | None,
    directory: str | None,
    *,
    default_directory: Path | None = None,
) -> RepositoryRef:
    """Resolve the target repository of a tool call."""
    if owner and repo:
        for field_name, value in (("owner", owner), ("repo", repo)):
            if "/" in value or value.strip() in (".", ".."):
                raise invalid_value(field_name, detail="must be a single name, not a path")
        return RepositoryRef(owner=owner, name=repo)

    target = directory or default_directory
    if target:
        ref = resolve_from_directory(target)
        logger.debug("Resolved %s from git metadata", ref.full_name)
        return ref

    raise SafeError(
        code="MissingTarget",
        message="No target repository given",
        hint="Provide owner and repo, or a directory containing a git checkout",
    )
