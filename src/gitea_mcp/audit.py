"""Structured audit logging.

Exactly one event is written per tool invocation, as a single JSON line on stderr and,
when configured, appended to a size-rotated JSONL file. Events never contain the API token
or tool argument values.
"""

from __future__ import annotations

import json
import sys
import time
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path

OUTCOMES = ("succeeded", "denied", "failed")


def new_correlation_id() -> str:
    """Generate a random correlation id for traceability."""
    return uuid.uuid4().hex


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """One tool invocation as recorded in the audit trail."""

    timestamp: str
    correlation_id: str
    operation: str
    target_repo: str
    outcome: str
    reason: str | None = None
    code: str | None = None
    status_code: int | None = None
    duration_ms: int | None = None

    def to_payload(self) -> dict[str, object]:
        # Optional fields are omitted rather than emitted as null.
        return {k: v for k, v in asdict(self).items() if v is not None}

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), sort_keys=True, separators=(",", ":"))


class JsonlFileSink:
    """Append-only JSONL file with numbered backups (``audit.jsonl.1``, ``.2``, ...)."""

    def __init__(self, path: Path, *, max_bytes: int, max_backups: int) -> None:
        self.path = path
        self.max_bytes = max_bytes
        self.max_backups = max_backups

    def _backup(self, n: int) -> Path:
        return self.path.with_name(f"{self.path.name}.{n}")

    def _rotate(self) -> None:
        if self.max_backups <= 0:
            self.path.write_text("", encoding="utf-8")
            return
        self._backup(self.max_backups).unlink(missing_ok=True)
        for n in range(self.max_backups - 1, 0, -1):
            older = self._backup(n)
            if older.exists():
                older.replace(self._backup(n + 1))
        self.path.replace(self._backup(1))

    def append(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists() and self.path.stat().st_size >= self.max_bytes:
            self._rotate()
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")


class AuditLogger:
    """Writes audit events to stderr and, optionally, to a rotated JSONL file."""

    def __init__(
        self,
        *,
        sink_path: Path | None,
        max_bytes: int = 5 * 1024 * 1024,
        max_backups: int = 2,
    ) -> None:
        self._sink = (
            JsonlFileSink(sink_path, max_bytes=max_bytes, max_backups=max_backups) if sink_path is not None else None
        )

    def write_event(self, event: AuditEvent) -> None:
        """Emit one event. File sink I/O errors never break tool execution."""
        line = event.to_json()
        print(line, file=sys.stderr)
        if self._sink is None:
            return
        try:
            self._sink.append(line)
        except OSError:  # pragma: no cover
            return

    def measure_start(self) -> float:
        return time.monotonic()

    def measure_duration_ms(self, start: float) -> int:
        return int((time.monotonic() - start) * 1000)


def build_event(
    *,
    correlation_id: str,
    operation: str,
    target_repo: str,
    outcome: str,
    reason: str | None = None,
    code: str | None = None,
    status_code: int | None = None,
    duration_ms: int | None = None,
) -> AuditEvent:
    """Construct an audit event stamped with the current UTC time."""
    if outcome not in OUTCOMES:
        raise ValueError(f"unknown audit outcome: {outcome}")
    return AuditEvent(
        timestamp=_utc_timestamp(),
        correlation_id=correlation_id,
        operation=operation,
        target_repo=target_repo,
        outcome=outcome,
        reason=reason,
        code=code,
        status_code=status_code,
        duration_ms=duration_ms,
    )
