"""
Patch Parser component.

Turns the text of a multi-file git-style unified diff into an ordered list
of FileChange records, one per ``diff --git`` section:
- Extract the pre/post-change paths (canonical or quoted header form)
- Classify the entry as regular, binary or directory from its header block
- Build each hunk's tagged body with a two-state machine
- Drop malformed segments with a diagnostic (lenient) or raise (strict)
"""

import re
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import ValidationError

from patchkit.config import settings
from patchkit.models.file_change import FileChange, FileKind, Hunk, HunkLine, LineTag
from patchkit.models.patch_result import ParseDiagnostic, ParseResult
from patchkit.utils.logging import get_logger, log_segment_skipped
from patchkit.utils.paths import unquote_path


logger = get_logger(__name__, phase="parse")

SEGMENT_MARKER = re.compile(r"^diff --git ", re.MULTILINE)
CANONICAL_PATHS = re.compile(r"a/(.*) b/(.*)")
QUOTED_PATHS = re.compile(r'"((?:[^"\\]|\\.)*)" "((?:[^"\\]|\\.)*)"')
HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
MODE_LINE = re.compile(r"^(old mode|new mode|new file mode|deleted file mode) ([0-7]+)")
TREE_MODES = ("040000", "160000")  # directory, submodule
SNIPPET_LENGTH = 120
SIGNATURE_SEPARATOR = "-- "  # git format-patch mail signature

_BODY_TAGS = {
    "+": LineTag.ADDED,
    "-": LineTag.REMOVED,
    " ": LineTag.CONTEXT,
    "\\": LineTag.NO_NEWLINE,
}


class PatchParseError(Exception):
    """
    Raised when a diff segment cannot be parsed.

    Attributes:
        message -- explanation of the error
        segment_index -- zero-based index of the file segment, when known
        snippet -- start of the offending segment
    """

    def __init__(self, message: str, segment_index: Optional[int] = None, snippet: str = ""):
        self.message = message
        self.segment_index = segment_index
        self.snippet = snippet
        super().__init__(self.message)


class ParseState(str, Enum):
    """Parser state while walking one segment's lines."""

    SCANNING_HEADER = "scanning_header"
    IN_HUNK = "in_hunk"


class _HunkBuilder:
    """Accumulates the tagged body of the hunk currently open."""

    def __init__(self, old_start: int, old_count: int, new_start: int, new_count: int):
        self.old_start = old_start
        self.old_count = old_count
        self.new_start = new_start
        self.new_count = new_count
        self.body: List[HunkLine] = []
        self.old_remaining = old_count
        self.new_remaining = new_count

    @property
    def complete(self) -> bool:
        return self.old_remaining <= 0 and self.new_remaining <= 0

    def add(self, tag: LineTag, text: str) -> None:
        self.body.append(HunkLine(tag=tag, text=text))
        if tag in (LineTag.REMOVED, LineTag.CONTEXT):
            self.old_remaining -= 1
        if tag in (LineTag.ADDED, LineTag.CONTEXT):
            self.new_remaining -= 1

    def build(self) -> Hunk:
        try:
            return Hunk(
                old_start=self.old_start,
                old_count=self.old_count,
                new_start=self.new_start,
                new_count=self.new_count,
                body=self.body,
            )
        except ValidationError as e:
            raise PatchParseError(_validation_message(e)) from e


def _validation_message(error: ValidationError) -> str:
    errors = error.errors()
    if not errors:
        return str(error)
    return errors[0]["msg"].removeprefix("Value error, ")


def parse_hunk_header(line: str) -> Optional[Tuple[int, int, int, int]]:
    """
    Parse ``@@ -old_start[,old_count] +new_start[,new_count] @@``.

    A missing count means a one-line span. Returns None when the line is
    not a well-formed hunk header.
    """
    match = HUNK_HEADER.match(line)
    if not match:
        return None
    old_start, old_count, new_start, new_count = match.groups()
    return (
        int(old_start),
        int(old_count) if old_count is not None else 1,
        int(new_start),
        int(new_count) if new_count is not None else 1,
    )


def extract_paths(path_line: str) -> Optional[Tuple[str, str]]:
    """
    Extract (old_path, new_path) from the text following ``diff --git``.

    Recognizes ``a/<path> b/<path>`` and the quoted ``"a/<path>" "b/<path>"``
    form git uses for paths with special characters.
    """
    # A quoted header can itself contain " b/" inside a path
    quoted_first = path_line.startswith('"')

    if not quoted_first:
        match = CANONICAL_PATHS.search(path_line)
        if match:
            return match.group(1), match.group(2)

    match = QUOTED_PATHS.search(path_line)
    if match:
        old_path, new_path = (unquote_path(group) for group in match.groups())
        return old_path.removeprefix("a/"), new_path.removeprefix("b/")

    if quoted_first:
        match = CANONICAL_PATHS.search(path_line)
        if match:
            return match.group(1), match.group(2)

    return None


class PatchParser:
    """
    Parses multi-file unified diffs into FileChange records.

    Parsing is lenient by default: a segment whose path header cannot be
    read, or whose hunks are malformed, is dropped and reported in
    ``ParseResult.diagnostics`` while the remaining segments are parsed.
    With ``strict=True`` the first such segment raises PatchParseError.
    """

    def __init__(self, strict: Optional[bool] = None, header_scan_lines: Optional[int] = None):
        """
        Initialize the parser.

        Args:
            strict: Raise on malformed segments instead of dropping them
                (defaults to ``settings.strict_parsing``)
            header_scan_lines: Size of the header block scanned for
                classification markers (defaults to ``settings.header_scan_lines``)
        """
        self.strict = settings.strict_parsing if strict is None else strict
        self.header_scan_lines = (
            settings.header_scan_lines if header_scan_lines is None else header_scan_lines
        )

    def parse(self, diff_text: str) -> ParseResult:
        """
        Parse a multi-file diff.

        Args:
            diff_text: Full text of a ``.patch`` / ``.diff`` file

        Returns:
            ParseResult with the records in source order and a diagnostic
            for every dropped segment

        Raises:
            PatchParseError: In strict mode, for the first malformed segment
        """
        result = ParseResult()
        # Text before the first marker (commit message, email headers) is not a file
        segments = SEGMENT_MARKER.split(diff_text)[1:]

        for index, segment in enumerate(segments):
            snippet = ("diff --git " + segment.split("\n", 1)[0].rstrip("\r"))[:SNIPPET_LENGTH]
            try:
                change = self.parse_segment(segment)
            except PatchParseError as e:
                e.segment_index = index
                e.snippet = snippet
                if self.strict:
                    raise
                log_segment_skipped(logger, index, e.message, snippet)
                result.diagnostics.append(
                    ParseDiagnostic(segment_index=index, reason=e.message, snippet=snippet)
                )
                continue

            logger.debug(
                f"Parsed {change.kind.value} entry {change.path} with {len(change.hunks)} hunk(s)",
                extra={"file_path": change.path, "segment_index": index}
            )
            result.changes.append(change)

        logger.info(
            f"Parsed {len(result.changes)} file change(s), skipped {len(result.diagnostics)} segment(s)"
        )
        return result

    def parse_segment(self, segment: str) -> FileChange:
        """
        Parse the text of one file segment (without its ``diff --git `` marker).

        Raises:
            PatchParseError: If the segment has no recognizable path header or
                its hunks are malformed
        """
        lines = segment.split("\n")
        if lines and lines[-1] == "":
            lines.pop()

        paths = extract_paths(lines[0].rstrip("\r")) if lines else None
        if paths is None:
            raise PatchParseError("no recognizable path header")
        old_path, path = paths

        kind = FileKind.REGULAR
        is_new = False
        is_deleted = False
        old_mode: Optional[str] = None
        new_mode: Optional[str] = None

        for line in lines[1:self.header_scan_lines]:
            if line.startswith("@@"):
                break
            if "new file mode" in line:
                is_new = True
            if "deleted file mode" in line:
                is_deleted = True
            if "Binary files" in line or line.startswith("GIT binary patch"):
                kind = FileKind.BINARY
                break
            mode_match = MODE_LINE.match(line)
            if mode_match:
                marker, mode = mode_match.groups()
                if marker in ("old mode", "deleted file mode"):
                    old_mode = mode
                else:
                    new_mode = mode
                if mode in TREE_MODES:
                    kind = FileKind.DIRECTORY
                    break

        hunks: List[Hunk] = []
        if kind == FileKind.REGULAR:
            hunks = self._parse_hunks(lines[1:])

        try:
            return FileChange(
                path=path,
                old_path=old_path,
                kind=kind,
                is_new=is_new,
                is_deleted=is_deleted,
                old_mode=old_mode,
                new_mode=new_mode,
                hunks=hunks,
            )
        except ValidationError as e:
            raise PatchParseError(_validation_message(e)) from e

    def _parse_hunks(self, lines: List[str]) -> List[Hunk]:
        """
        Walk a regular file's lines with a SCANNING_HEADER / IN_HUNK machine.

        A hunk stays open until the next hunk header, or until its line
        counts are satisfied and a line other than a no-newline marker
        follows. Lines before the first hunk (``index``, ``---``, ``+++``)
        are ignored. After a closed hunk only blank lines or a ``-- ``
        signature with its trailer may follow; any other tagged body line
        means the hunk body is longer than its header counts.
        """
        hunks: List[Hunk] = []
        state = ParseState.SCANNING_HEADER
        current: Optional[_HunkBuilder] = None
        in_signature = False

        for line in lines:
            if in_signature:
                continue

            if state == ParseState.IN_HUNK and current.complete and not line.startswith(("@@", "\\")):
                hunks.append(current.build())
                current = None
                state = ParseState.SCANNING_HEADER

            if line.startswith("@@"):
                header = parse_hunk_header(line)
                if header is not None:
                    if state == ParseState.IN_HUNK:
                        hunks.append(current.build())
                    current = _HunkBuilder(*header)
                    state = ParseState.IN_HUNK
                    continue
                if self.strict:
                    raise PatchParseError(f"malformed hunk header: {line[:SNIPPET_LENGTH]}")
                if state == ParseState.IN_HUNK and not current.complete:
                    current.add(LineTag.CONTEXT, line[1:])
                else:
                    logger.debug(f"Ignoring malformed hunk header outside a hunk: {line!r}")
                continue

            if state == ParseState.SCANNING_HEADER:
                if hunks:
                    if line == SIGNATURE_SEPARATOR:
                        in_signature = True
                    elif line[:1] in ("+", "-", " "):
                        raise PatchParseError(
                            f"hunk body longer than header counts: {line[:SNIPPET_LENGTH]}"
                        )
                continue

            if line.startswith("\\"):
                current.add(LineTag.NO_NEWLINE, line[1:])
                continue

            if line == "":
                # Blank context line whose leading space was stripped
                current.add(LineTag.CONTEXT, "")
                continue

            tag = _BODY_TAGS.get(line[0])
            if tag is None:
                if self.strict:
                    raise PatchParseError(f"untagged line in hunk body: {line[:SNIPPET_LENGTH]}")
                tag = LineTag.CONTEXT
            current.add(tag, line[1:])

        if state == ParseState.IN_HUNK:
            hunks.append(current.build())

        return hunks


def parse_patch(diff_text: str, strict: Optional[bool] = None) -> ParseResult:
    """Parse a multi-file diff into records plus dropped-segment diagnostics."""
    return PatchParser(strict=strict).parse(diff_text)


def parse(diff_text: str) -> List[FileChange]:
    """Parse a multi-file diff leniently and return only the records."""
    return PatchParser(strict=False).parse(diff_text).changes
