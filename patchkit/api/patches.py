"""
Patch parsing and application REST API endpoints.

The host supplies raw diff text and file contents and receives structured
records or new contents back; nothing here touches storage.
"""

import asyncio
import logging

from fastapi import APIRouter, HTTPException

from patchkit.models.api_response import (
    ApplyRequest,
    ParseRequest,
    ParseResponse,
    RenderRequest,
    RenderResponse,
)
from patchkit.models.patch_result import BatchResult, FileStat
from patchkit.services.batch_applier import BatchApplier
from patchkit.services.hunk_applier import HunkApplier
from patchkit.services.patch_parser import PatchParseError, PatchParser
from patchkit.services.patch_renderer import render_patch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/patches", tags=["patches"])


async def _run_in_executor(func, *args, **kwargs):
    """Run a synchronous engine call in the default thread pool."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, lambda: func(*args, **kwargs))


@router.post("/parse", response_model=ParseResponse)
async def parse_patch_text(request: ParseRequest) -> ParseResponse:
    """
    Parse a multi-file diff.

    Raises:
        HTTPException: 400 if strict parsing rejects a segment
    """
    try:
        result = await _run_in_executor(PatchParser(strict=request.strict).parse, request.diff_text)
    except PatchParseError as e:
        logger.warning(f"Rejected patch at segment {e.segment_index}: {e.message}")
        raise HTTPException(
            status_code=400,
            detail={"message": e.message, "segment_index": e.segment_index, "snippet": e.snippet},
        )

    stats = [
        FileStat(
            path=change.path,
            kind=change.kind.value,
            additions=change.additions,
            deletions=change.deletions,
            is_new=change.is_new,
            is_deleted=change.is_deleted,
        )
        for change in result.changes
    ]
    logger.info(f"Parsed {len(result.changes)} file change(s)")
    return ParseResponse(changes=result.changes, diagnostics=result.diagnostics, stats=stats)


@router.post("/apply", response_model=BatchResult)
async def apply_patch_text(request: ApplyRequest) -> BatchResult:
    """
    Parse a diff and apply it to the supplied originals.

    Each file gets its own outcome; one failing file does not fail the request.

    Raises:
        HTTPException: 400 if strict parsing rejects a segment
    """
    applier = BatchApplier(applier=HunkApplier(strict_offsets=request.strict_offsets))
    try:
        return await _run_in_executor(
            applier.apply_patch_text,
            request.diff_text,
            request.originals,
            parser=PatchParser(strict=request.strict_parsing),
        )
    except PatchParseError as e:
        logger.warning(f"Rejected patch at segment {e.segment_index}: {e.message}")
        raise HTTPException(
            status_code=400,
            detail={"message": e.message, "segment_index": e.segment_index, "snippet": e.snippet},
        )


@router.post("/render", response_model=RenderResponse)
async def render_changes(request: RenderRequest) -> RenderResponse:
    """Render records back into unified diff text."""
    return RenderResponse(diff_text=render_patch(request.changes))
