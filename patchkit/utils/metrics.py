"""
Metrics collection and emission for observability.

This module provides metrics tracking for:
- Patch run duration
- Parsed and skipped diff segments
- Per-status file outcome counts
- Per-file application latency
"""

import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from patchkit.utils.logging import get_logger

logger = get_logger(__name__)


class PatchMetricsCollector:
    """
    Collects metrics during one parse-and-apply run of a patch.

    Tracks:
    - Run start/end time
    - Segments parsed and segments skipped
    - Hunks applied
    - File outcomes by status and per-file latency
    """

    def __init__(self, patch_id: str):
        self.patch_id = patch_id

        # Timing metrics
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.duration_ms: Optional[int] = None

        # Parse metrics
        self.segments_parsed: int = 0
        self.segments_skipped: int = 0

        # Apply metrics
        self.hunks_applied: int = 0
        self.outcomes: Dict[str, int] = {}
        self.file_latencies: List[float] = []

        self.status: str = "running"
        self.error_message: Optional[str] = None

        # Files are applied on worker threads
        self._lock = threading.Lock()

    def start(self) -> None:
        """Mark run start."""
        self.start_time = datetime.now(timezone.utc)
        self.status = "running"
        logger.info(
            f"Metrics collection started for patch {self.patch_id}",
            extra={"patch_id": self.patch_id}
        )

    def complete(self, status: str = "completed", error_message: Optional[str] = None) -> None:
        """
        Mark run completion.

        Args:
            status: Final status ('completed', 'partial', 'failed')
            error_message: Error message if failed
        """
        self.end_time = datetime.now(timezone.utc)
        self.status = status
        self.error_message = error_message

        if self.start_time:
            duration = (self.end_time - self.start_time).total_seconds()
            self.duration_ms = int(duration * 1000)

        logger.info(
            f"Metrics collection completed for patch {self.patch_id}",
            extra={
                "patch_id": self.patch_id,
                "status": self.status,
                "duration_ms": self.duration_ms,
                "segments_parsed": self.segments_parsed,
                "segments_skipped": self.segments_skipped,
                "outcomes": dict(self.outcomes),
            }
        )

    def record_segments(self, parsed: int, skipped: int) -> None:
        self.segments_parsed = parsed
        self.segments_skipped = skipped

    def record_hunks(self, count: int) -> None:
        with self._lock:
            self.hunks_applied += count

    def record_outcome(self, status: str, duration_ms: Optional[float] = None) -> None:
        """
        Record one file outcome and, when known, how long it took.

        Args:
            status: Outcome status ('applied', 'skipped', 'deleted', 'failed')
            duration_ms: Application duration in milliseconds
        """
        with self._lock:
            self.outcomes[status] = self.outcomes.get(status, 0) + 1
            if duration_ms is not None:
                self.file_latencies.append(duration_ms)

    def get_metrics_summary(self) -> Dict[str, Any]:
        """
        Get summary of collected metrics.

        Returns:
            Dictionary of metrics
        """
        summary: Dict[str, Any] = {
            "patch_id": self.patch_id,
            "status": self.status,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_ms": self.duration_ms,
            "segments_parsed": self.segments_parsed,
            "segments_skipped": self.segments_skipped,
            "hunks_applied": self.hunks_applied,
            "outcomes": dict(self.outcomes),
        }

        if self.file_latencies:
            summary["file_latency"] = {
                "count": len(self.file_latencies),
                "min_ms": round(min(self.file_latencies), 2),
                "max_ms": round(max(self.file_latencies), 2),
                "avg_ms": round(sum(self.file_latencies) / len(self.file_latencies), 2),
            }

        if self.error_message:
            summary["error_message"] = self.error_message

        return summary


@contextmanager
def track_duration() -> Iterator[Dict[str, float]]:
    """
    Context manager that measures the wrapped block.

    Usage:
        with track_duration() as timing:
            new_content = applier.apply(original, change)
        metrics.record_outcome("applied", timing["duration_ms"])
    """
    timing: Dict[str, float] = {}
    start_time = time.perf_counter()
    try:
        yield timing
    finally:
        timing["duration_ms"] = (time.perf_counter() - start_time) * 1000


def emit_metric(metric_name: str, value: float, **tags: Any) -> None:
    """
    Emit a metric as a structured log line.

    Args:
        metric_name: Metric name
        value: Metric value
        **tags: Metric tags/labels
    """
    logger.info(
        f"Metric: {metric_name}",
        extra={
            "metric_name": metric_name,
            "metric_value": value,
            "metric_tags": tags,
        }
    )
