"""
Unit tests for metrics collection utilities.
"""

import time
from datetime import datetime

import pytest

from patchkit.utils.metrics import PatchMetricsCollector, emit_metric, track_duration


def test_metrics_collector_initialization():
    """Test metrics collector initialization."""
    collector = PatchMetricsCollector(patch_id="p-1")

    assert collector.patch_id == "p-1"
    assert collector.status == "running"
    assert collector.segments_parsed == 0
    assert collector.hunks_applied == 0
    assert collector.outcomes == {}


def test_metrics_collector_start():
    """Test starting metrics collection."""
    collector = PatchMetricsCollector("p-1")

    collector.start()

    assert collector.start_time is not None
    assert isinstance(collector.start_time, datetime)
    assert collector.status == "running"


def test_metrics_collector_complete():
    """Test completing metrics collection."""
    collector = PatchMetricsCollector("p-1")

    collector.start()
    collector.complete(status="completed")

    assert collector.end_time is not None
    assert collector.status == "completed"
    assert collector.duration_ms is not None
    assert collector.duration_ms >= 0


def test_metrics_collector_complete_with_error():
    """Test completing metrics collection with error."""
    collector = PatchMetricsCollector("p-1")

    collector.start()
    collector.complete(status="failed", error_message="Test error")

    assert collector.status == "failed"
    assert collector.error_message == "Test error"
    assert collector.get_metrics_summary()["error_message"] == "Test error"


def test_metrics_collector_record_outcomes():
    """Test recording file outcomes and latencies."""
    collector = PatchMetricsCollector("p-1")

    collector.record_outcome("applied", 1.5)
    collector.record_outcome("applied", 2.5)
    collector.record_outcome("skipped")

    assert collector.outcomes == {"applied": 2, "skipped": 1}
    assert collector.file_latencies == [1.5, 2.5]


def test_metrics_collector_get_summary():
    """Test getting metrics summary."""
    collector = PatchMetricsCollector("p-1")

    collector.start()
    collector.record_segments(parsed=3, skipped=1)
    collector.record_hunks(2)
    collector.record_hunks(1)
    collector.record_outcome("applied", 10.0)
    collector.record_outcome("failed", 20.0)
    collector.complete(status="partial")

    summary = collector.get_metrics_summary()

    assert summary["patch_id"] == "p-1"
    assert summary["status"] == "partial"
    assert summary["segments_parsed"] == 3
    assert summary["segments_skipped"] == 1
    assert summary["hunks_applied"] == 3
    assert summary["outcomes"] == {"applied": 1, "failed": 1}
    assert summary["file_latency"] == {"count": 2, "min_ms": 10.0, "max_ms": 20.0, "avg_ms": 15.0}
    assert summary["start_time"] is not None
    assert summary["end_time"] is not None
    assert "error_message" not in summary


def test_summary_without_latencies():
    """Test that latency stats are omitted when nothing was timed."""
    summary = PatchMetricsCollector("p-1").get_metrics_summary()

    assert "file_latency" not in summary
    assert summary["start_time"] is None


def test_track_duration():
    """Test timing a block."""
    with track_duration() as timing:
        time.sleep(0.01)

    assert timing["duration_ms"] >= 10


def test_track_duration_records_on_error():
    """Test that the duration is recorded even if the block raises."""
    with pytest.raises(ValueError):
        with track_duration() as timing:
            raise ValueError("boom")

    assert "duration_ms" in timing


def test_emit_metric():
    """Test metric emission."""
    # Should not raise
    emit_metric("patch.files_failed", 0, patch_id="p-1")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
