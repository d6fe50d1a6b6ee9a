"""
Structured JSON logger — append-only, one object per line (.jsonl).

Usage:
    from modules.observability.logger import StructuredLogger

    events = StructuredLogger()
    with events.timed("sess_abc123", "ItineraryScheduler.generate"):
        ...
    events.log("sess_abc123", "ITINERARY_GENERATED", {"days": 5})

Logs are written to  <LOGS_DIR>/<session_id>.jsonl  (config.LOGS_DIR).
Set STRUCTURED_LOGGING=false to turn the file output off entirely.
"""

from __future__ import annotations

import json
import os
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

import config

# Event types written by the scheduler and the API layer
PERFORMANCE = "PERFORMANCE"
ITINERARY_GENERATED = "ITINERARY_GENERATED"
GENERATION_FAILED = "GENERATION_FAILED"


class StructuredLogger:
    """Thread-safe, append-only JSONL logger keyed by session id."""

    def __init__(self, logs_dir: Path | str | None = None, enabled: bool | None = None) -> None:
        self._logs_dir = Path(logs_dir) if logs_dir else config.LOGS_DIR
        self._enabled = config.STRUCTURED_LOGGING if enabled is None else enabled
        self._lock = threading.Lock()
        self._handles: dict[str, object] = {}  # session_id -> file handle

    # ── public API ────────────────────────────────────────────────────────

    def log(self, session_id: str, event_type: str, payload: dict) -> None:
        """Append one structured JSON record to ``<session_id>.jsonl``."""
        if not self._enabled:
            return
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session_id": session_id,
            "event_type": event_type,
            "payload": payload,
        }
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"

        with self._lock:
            fh = self._handles.get(session_id)
            if fh is None:
                fh = self._open(session_id)
            fh.write(line)  # type: ignore[union-attr]
            fh.flush()  # type: ignore[union-attr]

    @contextmanager
    def timed(self, session_id: str, component: str) -> Iterator[None]:
        """Emit a PERFORMANCE record with the wall time of the wrapped block."""
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self.log(session_id, PERFORMANCE, {
                "component": component,
                "duration_ms": round((time.perf_counter() - t0) * 1000, 2),
            })

    def close(self, session_id: str | None = None) -> None:
        """Close one or all open file handles."""
        with self._lock:
            if session_id:
                fh = self._handles.pop(session_id, None)
                if fh:
                    fh.close()  # type: ignore[union-attr]
            else:
                for fh in self._handles.values():
                    fh.close()  # type: ignore[union-attr]
                self._handles.clear()

    # ── internals ─────────────────────────────────────────────────────────

    def _open(self, session_id: str):  # noqa: ANN202
        os.makedirs(self._logs_dir, exist_ok=True)
        path = self._logs_dir / f"{session_id}.jsonl"
        fh = open(path, "a", encoding="utf-8")  # noqa: SIM115
        self._handles[session_id] = fh
        return fh
