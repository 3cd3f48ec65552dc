"""API request and response data models."""

from typing import Dict, List, Optional

from pydantic import BaseModel

from .file_change import FileChange
from .patch_result import FileStat, ParseDiagnostic


class ParseRequest(BaseModel):
    """Raw diff text to parse."""

    diff_text: str
    strict: Optional[bool] = None


class ParseResponse(BaseModel):
    """Parsed records, dropped-segment diagnostics and numstat rows."""

    changes: List[FileChange]
    diagnostics: List[ParseDiagnostic] = []
    stats: List[FileStat] = []


class ApplyRequest(BaseModel):
    """Raw diff text plus the current content of every target path."""

    diff_text: str
    originals: Dict[str, str] = {}
    strict_parsing: Optional[bool] = None
    strict_offsets: Optional[bool] = None


class RenderRequest(BaseModel):
    """Records to render back into unified diff text."""

    changes: List[FileChange]


class RenderResponse(BaseModel):
    """Rendered unified diff text."""

    diff_text: str
