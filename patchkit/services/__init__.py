"""Diff engine services package."""

from patchkit.services.patch_parser import (
    PatchParser,
    PatchParseError,
    parse,
    parse_patch,
)
from patchkit.services.hunk_applier import (
    HunkApplier,
    HunkApplyError,
    UnsupportedKindError,
    DeletedFileError,
    OffsetOutOfRangeError,
    apply,
)
from patchkit.services.patch_renderer import (
    render_file_change,
    render_patch,
)
from patchkit.services.batch_applier import (
    BatchApplier,
    get_batch_applier,
)

__all__ = [
    'PatchParser',
    'PatchParseError',
    'parse',
    'parse_patch',
    'HunkApplier',
    'HunkApplyError',
    'UnsupportedKindError',
    'DeletedFileError',
    'OffsetOutOfRangeError',
    'apply',
    'render_file_change',
    'render_patch',
    'BatchApplier',
    'get_batch_applier',
]
