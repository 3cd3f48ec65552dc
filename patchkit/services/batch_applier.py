"""
Batch Applier component.

Applies every FileChange of a parsed patch and reports one independent
outcome per file. Files are applied in parallel on a thread pool; each
worker only touches its own (original, change) pair, so no coordination
is needed. Hunks inside a file are still applied sequentially by the
Hunk Applier.
"""

import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import List, Mapping, Optional, Sequence

from patchkit.config import settings
from patchkit.models.file_change import FileChange, FileKind
from patchkit.models.patch_result import ApplyStatus, BatchResult, FileOutcome, ParseDiagnostic
from patchkit.services.hunk_applier import HunkApplier, HunkApplyError
from patchkit.services.patch_parser import PatchParser
from patchkit.utils.logging import (
    get_logger,
    log_error_with_context,
    log_file_outcome,
    log_phase_transition,
)
from patchkit.utils.metrics import PatchMetricsCollector, emit_metric, track_duration


logger = get_logger(__name__)


class BatchApplier:
    """
    Applies all file changes of a patch with per-file outcomes.

    Outcome rules:
    - binary and directory entries are SKIPPED with a reason
    - deletions are reported as DELETED for the caller to carry out
    - a missing original for a file that is not new is FAILED
    - any application error is FAILED for that file only
    """

    def __init__(
        self,
        applier: Optional[HunkApplier] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize the batch applier.

        Args:
            applier: Hunk applier to use (defaults to one built from settings)
            max_workers: Thread pool size (defaults to ``settings.max_workers``)
        """
        self.applier = applier or HunkApplier()
        self.max_workers = max_workers or settings.max_workers

    def apply_all(
        self,
        changes: Sequence[FileChange],
        originals: Mapping[str, str],
        patch_id: Optional[str] = None,
        diagnostics: Sequence[ParseDiagnostic] = (),
    ) -> BatchResult:
        """
        Apply every change and collect outcomes in input order.

        Args:
            changes: Parsed records
            originals: Current text of each target path; new files may be absent
            patch_id: Identifier used in logs and metrics
            diagnostics: Segments the parser dropped, passed through to the result

        Returns:
            BatchResult with one FileOutcome per change
        """
        patch_id = patch_id or str(uuid.uuid4())
        metrics = PatchMetricsCollector(patch_id)
        metrics.start()
        metrics.record_segments(len(changes), len(diagnostics))
        log_phase_transition(logger, patch_id, "apply", "started")

        outcomes = self._run(changes, originals, patch_id, metrics)

        failed = sum(1 for outcome in outcomes if outcome.status == ApplyStatus.FAILED)
        metrics.complete(status="partial" if failed else "completed")
        log_phase_transition(logger, patch_id, "apply", "completed")
        emit_metric("patch.files_failed", failed, patch_id=patch_id)

        return BatchResult(
            outcomes=outcomes,
            diagnostics=list(diagnostics),
            metrics=metrics.get_metrics_summary(),
        )

    def apply_patch_text(
        self,
        diff_text: str,
        originals: Mapping[str, str],
        parser: Optional[PatchParser] = None,
        patch_id: Optional[str] = None,
    ) -> BatchResult:
        """
        Parse a diff and apply it, carrying parse diagnostics into the result.

        Raises:
            PatchParseError: If the parser is strict and a segment is malformed
        """
        patch_id = patch_id or str(uuid.uuid4())
        parser = parser or PatchParser()

        log_phase_transition(logger, patch_id, "parse", "started")
        parsed = parser.parse(diff_text)
        log_phase_transition(logger, patch_id, "parse", "completed")

        return self.apply_all(
            parsed.changes, originals, patch_id=patch_id, diagnostics=parsed.diagnostics
        )

    def _run(
        self,
        changes: Sequence[FileChange],
        originals: Mapping[str, str],
        patch_id: str,
        metrics: PatchMetricsCollector,
    ) -> List[FileOutcome]:
        if not changes:
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._apply_one, change, originals, patch_id, metrics)
                for change in changes
            ]
            return [future.result() for future in futures]

    def _apply_one(
        self,
        change: FileChange,
        originals: Mapping[str, str],
        patch_id: str,
        metrics: PatchMetricsCollector,
    ) -> FileOutcome:
        if change.kind != FileKind.REGULAR:
            outcome = FileOutcome(
                path=change.path,
                status=ApplyStatus.SKIPPED,
                reason=f"{change.kind.value} entries are not supported",
            )
        elif change.is_deleted:
            outcome = FileOutcome(path=change.path, status=ApplyStatus.DELETED)
        elif change.path not in originals and not change.is_new:
            outcome = FileOutcome(
                path=change.path,
                status=ApplyStatus.FAILED,
                reason="original content not provided",
            )
        else:
            return self._apply_regular(change, originals.get(change.path, ""), patch_id, metrics)

        metrics.record_outcome(outcome.status.value)
        log_file_outcome(logger, outcome.path, outcome.status.value, outcome.reason)
        return outcome

    def _apply_regular(
        self,
        change: FileChange,
        original: str,
        patch_id: str,
        metrics: PatchMetricsCollector,
    ) -> FileOutcome:
        with track_duration() as timing:
            try:
                content = self.applier.apply(original, change)
                outcome = FileOutcome(path=change.path, status=ApplyStatus.APPLIED, content=content)
            except HunkApplyError as e:
                outcome = FileOutcome(path=change.path, status=ApplyStatus.FAILED, reason=e.message)
            except Exception as e:
                log_error_with_context(
                    logger, f"Unexpected error applying {change.path}", e,
                    patch_id=patch_id, file_path=change.path,
                )
                outcome = FileOutcome(path=change.path, status=ApplyStatus.FAILED, reason=str(e))

        if outcome.status == ApplyStatus.APPLIED:
            metrics.record_hunks(len(change.hunks))
        metrics.record_outcome(outcome.status.value, timing["duration_ms"])
        log_file_outcome(logger, outcome.path, outcome.status.value, outcome.reason)
        return outcome


def get_batch_applier() -> BatchApplier:
    """
    Get a batch applier configured from settings.

    Returns:
        BatchApplier instance
    """
    return BatchApplier()
