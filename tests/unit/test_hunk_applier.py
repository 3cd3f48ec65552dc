"""Unit tests for the Hunk Applier component."""

import pytest

from patchkit.models.file_change import FileChange, FileKind, Hunk, HunkLine, LineTag
from patchkit.services.hunk_applier import (
    DeletedFileError,
    HunkApplier,
    OffsetOutOfRangeError,
    UnsupportedKindError,
    apply,
    count_lines,
    replacement_lines,
)
from patchkit.services.patch_parser import parse


def make_hunk(old_start, old_count, new_start, new_count, *raw_lines):
    """Build a hunk from tagged lines such as ' a', '-b', '+c'."""
    tags = {" ": LineTag.CONTEXT, "-": LineTag.REMOVED, "+": LineTag.ADDED, "\\": LineTag.NO_NEWLINE}
    body = [HunkLine(tag=tags[raw[0]], text=raw[1:]) for raw in raw_lines]
    return Hunk(
        old_start=old_start,
        old_count=old_count,
        new_start=new_start,
        new_count=new_count,
        body=body,
    )


def numbered(count):
    return "".join(f"line{i}\n" for i in range(1, count + 1))


class TestHelpers:
    """Tests for replacement and line counting helpers."""

    def test_replacement_lines_drop_removed_and_markers(self):
        hunk = make_hunk(1, 2, 1, 2, " a", "-b", "\\ No newline at end of file", "+c")

        assert replacement_lines(hunk) == ["a", "c"]

    @pytest.mark.parametrize(
        "text,expected",
        [("", 0), ("a", 1), ("a\n", 1), ("a\nb", 2), ("a\nb\n", 2), ("\n", 1)],
    )
    def test_count_lines(self, text, expected):
        assert count_lines(text) == expected


class TestHunkApplier:
    """Test suite for HunkApplier."""

    def test_single_hunk(self):
        change = FileChange(
            path="f.txt",
            hunks=[make_hunk(1, 3, 1, 4, " a", "-b", "+c", "+d", " e")],
        )

        assert apply("a\nb\ne\n", change) == "a\nc\nd\ne\n"

    def test_context_only_hunk_is_a_no_op(self):
        original = "a\nb\nc\nd\n"
        change = FileChange(path="f.txt", hunks=[make_hunk(2, 2, 2, 2, " b", " c")])

        assert apply(original, change) == original

    def test_context_comes_from_hunk_body(self):
        change = FileChange(path="f.txt", hunks=[make_hunk(1, 1, 1, 1, " A")])

        assert apply("a\n", change) == "A\n"

    def test_hunks_applied_bottom_up(self):
        # The insertion at line 2 shifts everything below it by two lines;
        # applied top-down, the second hunk would replace line8 instead of line10.
        insert_hunk = make_hunk(2, 1, 2, 3, " line2", "+ins1", "+ins2")
        replace_hunk = make_hunk(10, 1, 12, 1, "-line10", "+TEN")
        change = FileChange(path="f.txt", hunks=[insert_hunk, replace_hunk])

        result = apply(numbered(20), change)

        expected_lines = (
            ["line1", "line2", "ins1", "ins2"]
            + [f"line{i}" for i in range(3, 10)]
            + ["TEN"]
            + [f"line{i}" for i in range(11, 21)]
        )
        assert result == "\n".join(expected_lines) + "\n"
        assert "line8\n" in result
        assert "line10\n" not in result

    def test_new_file_from_empty_original(self):
        change = FileChange(
            path="new.txt",
            is_new=True,
            hunks=[make_hunk(0, 0, 1, 2, "+hello", "+world")],
        )

        assert apply("", change) == "hello\nworld\n"

    def test_pure_insertion_follows_old_start(self):
        change = FileChange(path="f.txt", hunks=[make_hunk(2, 0, 3, 1, "+inserted")])

        assert apply("a\nb\nc\n", change) == "a\nb\ninserted\nc\n"

    def test_remove_every_line(self):
        change = FileChange(path="f.txt", hunks=[make_hunk(1, 2, 0, 0, "-a", "-b")])

        assert apply("a\nb\n", change) == ""

    def test_original_without_trailing_newline(self):
        change = FileChange(path="f.txt", hunks=[make_hunk(2, 1, 2, 1, "-b", "+B")])

        assert apply("a\nb", change) == "a\nB"

    def test_no_newline_marker_has_no_content(self):
        change = FileChange(
            path="f.txt",
            hunks=[make_hunk(1, 1, 1, 1, "-x", "\\ No newline at end of file", "+y")],
        )

        assert apply("x", change) == "y"

    def test_change_is_not_mutated(self):
        change = FileChange(path="f.txt", hunks=[make_hunk(1, 1, 1, 1, "-a", "+b")])
        before = change.model_dump()

        apply("a\n", change)

        assert change.model_dump() == before

    @pytest.mark.parametrize("kind", [FileKind.BINARY, FileKind.DIRECTORY])
    def test_rejects_unsupported_kinds(self, kind):
        change = FileChange(path="x", kind=kind)

        with pytest.raises(UnsupportedKindError) as exc_info:
            apply("", change)

        assert exc_info.value.path == "x"

    def test_rejects_deleted_file(self):
        change = FileChange(path="gone.txt", is_deleted=True)

        with pytest.raises(DeletedFileError):
            apply("bye\n", change)

    def test_out_of_range_raises_in_strict_mode(self):
        hunk = make_hunk(5, 1, 5, 1, "-e", "+E")
        change = FileChange(path="short.txt", hunks=[hunk])

        with pytest.raises(OffsetOutOfRangeError) as exc_info:
            HunkApplier(strict_offsets=True).apply("a\n", change)

        assert exc_info.value.hunk == hunk
        assert exc_info.value.path == "short.txt"

    def test_out_of_range_truncates_in_lenient_mode(self):
        change = FileChange(
            path="short.txt",
            hunks=[make_hunk(2, 3, 2, 1, "-b", "-x", "-y", "+z")],
        )

        assert HunkApplier(strict_offsets=False).apply("a\nb\n", change) == "a\nz"

    def test_strict_default_comes_from_settings(self, monkeypatch):
        from patchkit.config import settings

        monkeypatch.setattr(settings, "strict_offsets", False)

        assert HunkApplier().strict_offsets is False


class TestParseThenApply:
    """Round trips from real diff text to new content."""

    def test_multi_hunk_fixture(self):
        original = "".join(f"l{i}\n" for i in range(1, 13))
        diff = (
            "diff --git a/f.txt b/f.txt\n"
            "index 1111111..2222222 100644\n"
            "--- a/f.txt\n"
            "+++ b/f.txt\n"
            "@@ -1,4 +1,4 @@\n"
            "-l1\n"
            "+L1\n"
            " l2\n"
            " l3\n"
            " l4\n"
            "@@ -9,4 +9,5 @@\n"
            " l9\n"
            " l10\n"
            "+new\n"
            " l11\n"
            " l12\n"
        )
        (change,) = parse(diff)

        expected = "L1\n" + "".join(f"l{i}\n" for i in range(2, 11)) + "new\nl11\nl12\n"
        assert apply(original, change) == expected

    def test_new_file_fixture(self):
        diff = (
            "diff --git a/docs/README.md b/docs/README.md\n"
            "new file mode 100644\n"
            "index 0000000..5e1c309\n"
            "--- /dev/null\n"
            "+++ b/docs/README.md\n"
            "@@ -0,0 +1,3 @@\n"
            "+# Title\n"
            "+\n"
            "+Body text.\n"
        )
        (change,) = parse(diff)

        assert apply("", change) == "# Title\n\nBody text.\n"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
