"""
Utility modules for patchkit.
"""

from patchkit.utils.logging import (
    get_logger,
    setup_logging,
    LogContext,
    log_segment_skipped,
    log_phase_transition,
    log_file_outcome,
    log_error_with_context,
)
from patchkit.utils.metrics import (
    PatchMetricsCollector,
    track_duration,
    emit_metric,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
    "log_segment_skipped",
    "log_phase_transition",
    "log_file_outcome",
    "log_error_with_context",
    "PatchMetricsCollector",
    "track_duration",
    "emit_metric",
]
