"""Data models for the patchkit diff engine."""

from .api_response import (
    ApplyRequest,
    ParseRequest,
    ParseResponse,
    RenderRequest,
    RenderResponse,
)
from .file_change import FileChange, FileKind, Hunk, HunkLine, LineTag
from .patch_result import (
    ApplyStatus,
    BatchResult,
    FileOutcome,
    FileStat,
    ParseDiagnostic,
    ParseResult,
)

__all__ = [
    # File change models
    "LineTag",
    "HunkLine",
    "Hunk",
    "FileKind",
    "FileChange",
    # Result models
    "ParseDiagnostic",
    "ParseResult",
    "FileStat",
    "ApplyStatus",
    "FileOutcome",
    "BatchResult",
    # API models
    "ParseRequest",
    "ParseResponse",
    "ApplyRequest",
    "RenderRequest",
    "RenderResponse",
]
