"""
Hunk Applier component.

Applies one file's parsed change to that file's current text, in memory.
Hunks are applied from the bottom of the file upward so that every hunk's
``old_start``, which is recorded against the unmodified original, is still
valid when its turn comes.
"""

from typing import List, Optional

from patchkit.config import settings
from patchkit.models.file_change import FileChange, FileKind, Hunk, LineTag
from patchkit.utils.logging import get_logger


logger = get_logger(__name__, phase="apply")


class HunkApplyError(Exception):
    """Base exception for Hunk Applier errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.message = message
        self.path = path
        super().__init__(self.message)


class UnsupportedKindError(HunkApplyError):
    """The change is a binary or directory entry, which carries no line edits."""
    pass


class DeletedFileError(HunkApplyError):
    """The change deletes its file; deletion belongs to the storage layer."""
    pass


class OffsetOutOfRangeError(HunkApplyError):
    """A hunk's old range reaches past the end of the original text."""

    def __init__(self, message: str, path: Optional[str] = None, hunk: Optional[Hunk] = None):
        super().__init__(message, path)
        self.hunk = hunk


def replacement_lines(hunk: Hunk) -> List[str]:
    """
    Lines a hunk leaves in place of its old range.

    Added and context lines contribute their text in body order; removed
    lines and no-newline markers contribute nothing. Context text comes
    from the hunk body, never from the original file.
    """
    return [
        line.text
        for line in hunk.body
        if line.tag in (LineTag.ADDED, LineTag.CONTEXT)
    ]


def count_lines(text: str) -> int:
    """Number of lines in text, not counting an empty remainder after a final newline."""
    if not text:
        return 0
    return text.count("\n") + (0 if text.endswith("\n") else 1)


class HunkApplier:
    """
    Applies FileChange hunks to original file content.

    Offset policy: with ``strict_offsets`` (the default) a hunk whose old
    range extends past the original raises OffsetOutOfRangeError. Without
    it the splice is best-effort and silently truncated, as legacy patch
    tools did; a warning is logged.
    """

    def __init__(self, strict_offsets: Optional[bool] = None):
        self.strict_offsets = settings.strict_offsets if strict_offsets is None else strict_offsets

    def apply(self, original: str, change: FileChange) -> str:
        """
        Produce the post-patch text of one file.

        Args:
            original: Current file text ("" for a new file)
            change: Parsed change for that file

        Returns:
            New file text

        Raises:
            UnsupportedKindError: If the change is a binary or directory entry
            DeletedFileError: If the change deletes the file
            OffsetOutOfRangeError: In strict mode, if a hunk is out of range
        """
        if change.kind != FileKind.REGULAR:
            raise UnsupportedKindError(
                f"cannot apply line edits to {change.kind.value} entry {change.path}",
                path=change.path,
            )
        if change.is_deleted:
            raise DeletedFileError(
                f"{change.path} is deleted by the patch; remove it instead of applying hunks",
                path=change.path,
            )

        lines = original.split("\n")
        line_count = count_lines(original)

        for hunk in sorted(change.hunks, key=lambda h: h.old_start, reverse=True):
            # A pure insertion's old_start names the line it follows
            start = hunk.old_start if hunk.old_count == 0 else hunk.old_start - 1
            end = start + hunk.old_count

            if start < 0 or end > line_count:
                message = (
                    f"hunk at old line {hunk.old_start} spanning {hunk.old_count} line(s) "
                    f"is outside {change.path} ({line_count} line(s))"
                )
                if self.strict_offsets:
                    raise OffsetOutOfRangeError(message, path=change.path, hunk=hunk)
                logger.warning(f"{message}; applying truncated splice", extra={"file_path": change.path})
                start = max(start, 0)
                end = max(end, start)

            lines[start:end] = replacement_lines(hunk)

        logger.debug(
            f"Applied {len(change.hunks)} hunk(s) to {change.path}",
            extra={"file_path": change.path}
        )
        return "\n".join(lines)


def apply(original: str, change: FileChange, strict_offsets: Optional[bool] = None) -> str:
    """Apply one file's change to its original text."""
    return HunkApplier(strict_offsets=strict_offsets).apply(original, change)
