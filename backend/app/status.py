from __future__ import annotations

from dataclasses import asdict, dataclass, field
from threading import Lock
from time import time
from typing import Any, Dict, List, Mapping, Optional

# Counters a scan reports through its progress events and final summary.
SCAN_COUNTERS = ("message_ids_seen", "processed", "skipped", "subscriptions_found", "price_changes")

# Rolling window size for the change and error feeds.
RECENT_LIMIT = 50


@dataclass
class RunStatus:
    state: str = "idle"
    step: str = "idle"
    detail: Optional[str] = None
    message_ids_seen: int = 0
    processed: int = 0
    skipped: int = 0
    subscriptions_found: int = 0
    price_changes: int = 0
    summary: Optional[Dict[str, Any]] = None
    # Price changes detected by the current/last scan, newest first.
    recent_changes: List[Dict[str, Any]] = field(default_factory=list)
    recent_errors: List[Dict[str, Any]] = field(default_factory=list)
    updated_at: float = field(default_factory=time)


class RunStatusStore:
    """Thread-safe status of the background scan, polled by the UI."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._status = RunStatus()

    def start(self) -> None:
        with self._lock:
            self._status = RunStatus(state="running", step="starting", detail="Starting scan")

    def record_progress(self, step: str, event: Mapping[str, Any]) -> None:
        """Apply one run_scan progress event."""
        with self._lock:
            status = self._status
            status.state = "running"
            status.step = step
            status.detail = event.get("detail")
            self._apply_counts(event.get("counts") or {})
            change = event.get("change")
            if change:
                status.recent_changes = ([change] + status.recent_changes)[:RECENT_LIMIT]
            error = event.get("error")
            if error:
                status.recent_errors = ([error] + status.recent_errors)[:RECENT_LIMIT]
            status.updated_at = time()

    def finish(self, summary: Dict[str, Any]) -> None:
        with self._lock:
            status = self._status
            status.state = "done"
            status.step = "done"
            status.detail = "Scan completed"
            status.summary = summary
            self._apply_counts(
                {
                    "message_ids_seen": summary.get("message_ids_seen"),
                    "processed": summary.get("processed"),
                    "skipped": summary.get("skipped"),
                    "subscriptions_found": len(summary.get("subscriptions") or []),
                    "price_changes": len(summary.get("price_changes") or []),
                }
            )
            status.updated_at = time()

    def fail(self, detail: str) -> None:
        with self._lock:
            self._status.state = "error"
            self._status.step = "error"
            self._status.detail = detail
            self._status.updated_at = time()

    def snapshot(self) -> Dict[str, Any]:
        # asdict deep-copies, so callers cannot mutate the live status.
        with self._lock:
            return asdict(self._status)

    def _apply_counts(self, counts: Mapping[str, Any]) -> None:
        for key in SCAN_COUNTERS:
            value = counts.get(key)
            if value is not None:
                setattr(self._status, key, int(value))


run_status_store = RunStatusStore()
