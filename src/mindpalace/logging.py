"""JSONL event log for observability."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class LogEntry:
    """One line of the event log.

    Workflow details (method, entry id, point index, timings, errors and
    anything else the caller passes) live in ``fields`` and are written
    at the top level of the JSON object.
    """

    event: str
    timestamp: str = field(default_factory=_utc_now)
    session_id: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Flatten into one JSON object, leaving out unset values."""
        record = {
            "timestamp": self.timestamp,
            "event": self.event,
            "session_id": self.session_id,
            **self.fields,
        }
        return {k: v for k, v in record.items() if v is not None}


class EventLog:
    """Appends workflow events to a size-capped JSONL file."""

    def __init__(
        self,
        log_dir: str | Path | None = None,
        filename: str = "events.jsonl",
        max_size_mb: float = 10.0,
    ) -> None:
        if log_dir is None:
            log_dir = Path.home() / ".mindpalace" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_path = self.log_dir / filename
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self._session_id: str | None = None

    def set_session_id(self, session_id: str | None) -> None:
        """Set the session id attached to all subsequent events."""
        self._session_id = session_id

    def _rotate(self) -> None:
        """Move a full log file aside under a timestamped name."""
        try:
            size = self.log_path.stat().st_size
        except FileNotFoundError:
            return
        if size < self.max_size_bytes:
            return
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        self.log_path.rename(self.log_path.with_name(f"{self.log_path.stem}_{stamp}.jsonl"))

    def log(self, event: str, *, session_id: str | None = None, **fields: Any) -> None:
        """Record an event; ``None`` values are dropped."""
        entry = LogEntry(event=event, session_id=session_id or self._session_id, fields=fields)
        self._rotate()
        line = json.dumps(entry.to_dict(), ensure_ascii=False)
        with self.log_path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")

    def log_generation(
        self,
        method: str,
        *,
        success: bool,
        duration_ms: float | None = None,
        entry_id: str | None = None,
        points: int | None = None,
        error: str | None = None,
    ) -> None:
        """Log the outcome of a generation."""
        self.log(
            "generation_complete" if success else "generation_failed",
            method=method,
            duration_ms=duration_ms,
            entry_id=entry_id,
            points=points,
            error=None if success else error,
        )

    def log_illustration(
        self,
        point_index: int,
        *,
        success: bool,
        duration_ms: float | None = None,
        error: str | None = None,
    ) -> None:
        """Log the outcome of one illustration request."""
        self.log(
            "illustration_complete" if success else "illustration_failed",
            point_index=point_index,
            duration_ms=duration_ms,
            error=None if success else error,
        )


_event_log: EventLog | None = None


def get_event_log() -> EventLog:
    """Return the process-wide event log, creating it on first use."""
    global _event_log
    if _event_log is None:
        _event_log = EventLog()
    return _event_log


def configure_event_log(log_dir: str | Path | None = None, max_size_mb: float = 10.0) -> EventLog:
    """Replace the process-wide event log."""
    global _event_log
    _event_log = EventLog(log_dir=log_dir, max_size_mb=max_size_mb)
    return _event_log
