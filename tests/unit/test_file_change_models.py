"""
Unit tests for file change data models.
"""

import pytest
from pydantic import ValidationError

from patchkit.models import FileChange, FileKind, Hunk, HunkLine, LineTag


def line(tag, text):
    return HunkLine(tag=tag, text=text)


def test_hunk_counts_must_balance():
    """Test that a hunk body must match its header counts."""
    with pytest.raises(ValidationError, match="body has 1 old and 1 new lines"):
        Hunk(old_start=1, old_count=2, new_start=1, new_count=2, body=[line(LineTag.CONTEXT, "a")])


def test_hunk_default_counts_are_one():
    """Test that omitted counts default to a one-line span."""
    hunk = Hunk(old_start=3, new_start=3, body=[line(LineTag.REMOVED, "x"), line(LineTag.ADDED, "y")])

    assert hunk.old_count == 1
    assert hunk.new_count == 1


def test_no_newline_marker_is_not_counted():
    """Test that the no-newline marker does not count toward either side."""
    hunk = Hunk(
        old_start=1,
        new_start=1,
        body=[line(LineTag.CONTEXT, "a"), line(LineTag.NO_NEWLINE, " No newline at end of file")],
    )

    assert hunk.old_count == 1


def test_hunk_line_raw():
    """Test re-creating the tagged diff line."""
    assert line(LineTag.ADDED, "x").raw == "+x"
    assert line(LineTag.REMOVED, "x").raw == "-x"
    assert line(LineTag.CONTEXT, "").raw == " "
    assert line(LineTag.NO_NEWLINE, " No newline at end of file").raw == "\\ No newline at end of file"


@pytest.mark.parametrize("kind", [FileKind.BINARY, FileKind.DIRECTORY])
def test_non_regular_kinds_cannot_carry_hunks(kind):
    """Test that binary and directory entries never carry hunks."""
    hunk = Hunk(old_start=1, new_start=1, body=[line(LineTag.REMOVED, "a"), line(LineTag.ADDED, "b")])

    with pytest.raises(ValidationError):
        FileChange(path="x", kind=kind, hunks=[hunk])


def test_new_and_deleted_are_exclusive():
    """Test that a record cannot be both new and deleted."""
    with pytest.raises(ValidationError):
        FileChange(path="x", is_new=True, is_deleted=True)


def test_file_change_is_immutable():
    """Test that records cannot be modified after construction."""
    change = FileChange(path="x")

    with pytest.raises(ValidationError):
        change.path = "y"


def test_additions_and_deletions():
    """Test numstat-style totals."""
    change = FileChange(
        path="x",
        hunks=[
            Hunk(
                old_start=1,
                old_count=2,
                new_start=1,
                new_count=3,
                body=[
                    line(LineTag.CONTEXT, "a"),
                    line(LineTag.REMOVED, "b"),
                    line(LineTag.ADDED, "c"),
                    line(LineTag.ADDED, "d"),
                ],
            )
        ],
    )

    assert change.additions == 2
    assert change.deletions == 1


def test_file_change_json_round_trip():
    """Test that records survive JSON serialization."""
    change = FileChange(
        path="x",
        old_path="x",
        hunks=[Hunk(old_start=1, new_start=1, body=[line(LineTag.REMOVED, "a"), line(LineTag.ADDED, "b")])],
    )

    assert FileChange.model_validate_json(change.model_dump_json()) == change


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
