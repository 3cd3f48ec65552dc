"""
Patch Renderer component.

Writes FileChange records back out as git-style unified diff text. Parsing
the rendered text yields records equal to the ones rendered.
"""

from typing import Iterable, List

from patchkit.models.file_change import FileChange, FileKind, Hunk
from patchkit.utils.paths import needs_quoting, quote_path

DEFAULT_FILE_MODE = "100644"
DEV_NULL = "/dev/null"


def format_range(start: int, count: int) -> str:
    """Hunk header range; git omits the count when it is 1."""
    return str(start) if count == 1 else f"{start},{count}"


def format_hunk_header(hunk: Hunk) -> str:
    return (
        f"@@ -{format_range(hunk.old_start, hunk.old_count)} "
        f"+{format_range(hunk.new_start, hunk.new_count)} @@"
    )


def _side(prefix: str, path: str) -> str:
    full = f"{prefix}/{path}"
    return quote_path(full) if needs_quoting(full) else full


def render_file_change(change: FileChange) -> str:
    """
    Render one record as a ``diff --git`` section.

    Every line, including the last, ends with a newline.
    """
    old_path = change.old_path if change.old_path is not None else change.path
    old_side = _side("a", old_path)
    new_side = _side("b", change.path)

    lines: List[str] = [f"diff --git {old_side} {new_side}"]

    if change.is_new:
        lines.append(f"new file mode {change.new_mode or DEFAULT_FILE_MODE}")
    elif change.is_deleted:
        lines.append(f"deleted file mode {change.old_mode or DEFAULT_FILE_MODE}")
    else:
        if change.old_mode is not None:
            lines.append(f"old mode {change.old_mode}")
        if change.new_mode is not None:
            lines.append(f"new mode {change.new_mode}")

    if change.kind == FileKind.BINARY:
        from_side = DEV_NULL if change.is_new else old_side
        to_side = DEV_NULL if change.is_deleted else new_side
        lines.append(f"Binary files {from_side} and {to_side} differ")
    elif change.hunks:
        lines.append(f"--- {DEV_NULL if change.is_new else old_side}")
        lines.append(f"+++ {DEV_NULL if change.is_deleted else new_side}")
        for hunk in change.hunks:
            lines.append(format_hunk_header(hunk))
            lines.extend(line.raw for line in hunk.body)

    return "\n".join(lines) + "\n"


def render_patch(changes: Iterable[FileChange]) -> str:
    """Render records as one multi-file diff."""
    return "".join(render_file_change(change) for change in changes)
