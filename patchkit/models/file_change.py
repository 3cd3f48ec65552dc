"""File change data models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class LineTag(str, Enum):
    """Tag of a single line inside a hunk body."""

    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"
    NO_NEWLINE = "no_newline"  # "\ No newline at end of file"


TAG_PREFIXES = {
    LineTag.ADDED: "+",
    LineTag.REMOVED: "-",
    LineTag.CONTEXT: " ",
    LineTag.NO_NEWLINE: "\\",
}


class FileKind(str, Enum):
    """Structural kind of a file entry in a diff."""

    REGULAR = "regular"
    DIRECTORY = "directory"
    BINARY = "binary"


class HunkLine(BaseModel):
    """One tagged line of a hunk body, stored without its tag character."""

    model_config = ConfigDict(frozen=True)

    tag: LineTag
    text: str

    @property
    def raw(self) -> str:
        """Line as it appears in a unified diff."""
        return TAG_PREFIXES[self.tag] + self.text


class Hunk(BaseModel):
    """
    One contiguous edit region of a file diff.

    Line accounting is checked on construction: removed + context lines
    must equal ``old_count`` and added + context lines must equal
    ``new_count``. ``no_newline`` marker lines are not counted.
    """

    model_config = ConfigDict(frozen=True)

    old_start: int
    old_count: int = 1
    new_start: int
    new_count: int = 1
    body: List[HunkLine] = []

    @model_validator(mode="after")
    def _check_line_accounting(self) -> "Hunk":
        old_seen = sum(1 for line in self.body if line.tag in (LineTag.REMOVED, LineTag.CONTEXT))
        new_seen = sum(1 for line in self.body if line.tag in (LineTag.ADDED, LineTag.CONTEXT))
        if old_seen != self.old_count or new_seen != self.new_count:
            raise ValueError(
                f"hunk @@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@ "
                f"body has {old_seen} old and {new_seen} new lines"
            )
        return self

    @property
    def additions(self) -> int:
        return sum(1 for line in self.body if line.tag == LineTag.ADDED)

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.body if line.tag == LineTag.REMOVED)


class FileChange(BaseModel):
    """One file's entry in a multi-file diff."""

    model_config = ConfigDict(frozen=True)

    path: str
    old_path: Optional[str] = None
    kind: FileKind = FileKind.REGULAR
    is_new: bool = False
    is_deleted: bool = False
    old_mode: Optional[str] = None
    new_mode: Optional[str] = None
    hunks: List[Hunk] = []

    @model_validator(mode="after")
    def _check_kind_and_flags(self) -> "FileChange":
        if self.kind != FileKind.REGULAR and self.hunks:
            raise ValueError(f"{self.kind.value} entry {self.path} cannot carry hunks")
        if self.is_new and self.is_deleted:
            raise ValueError(f"{self.path} cannot be both new and deleted")
        return self

    @property
    def additions(self) -> int:
        return sum(hunk.additions for hunk in self.hunks)

    @property
    def deletions(self) -> int:
        return sum(hunk.deletions for hunk in self.hunks)
