"""Parse and apply result data models."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from .file_change import FileChange


class ParseDiagnostic(BaseModel):
    """A file segment the parser dropped, and why."""

    segment_index: int
    reason: str
    snippet: str


class ParseResult(BaseModel):
    """Records parsed from a diff plus diagnostics for dropped segments."""

    changes: List[FileChange] = []
    diagnostics: List[ParseDiagnostic] = []


class FileStat(BaseModel):
    """Per-file added/removed line counts, numstat style."""

    path: str
    kind: str
    additions: int
    deletions: int
    is_new: bool = False
    is_deleted: bool = False


class ApplyStatus(str, Enum):
    """Outcome of applying one file's change."""

    APPLIED = "applied"
    SKIPPED = "skipped"
    DELETED = "deleted"
    FAILED = "failed"


class FileOutcome(BaseModel):
    """Result of applying one FileChange within a batch."""

    path: str
    status: ApplyStatus
    content: Optional[str] = None
    reason: Optional[str] = None


class BatchResult(BaseModel):
    """Independent outcomes for every file of a patch."""

    outcomes: List[FileOutcome] = []
    diagnostics: List[ParseDiagnostic] = []
    metrics: Dict[str, Any] = {}

    def by_status(self, status: ApplyStatus) -> List[FileOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == status]

    @property
    def ok(self) -> bool:
        return not self.by_status(ApplyStatus.FAILED)
