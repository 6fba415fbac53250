"""Unit tests for unified diff parsing and hunk patch synthesis."""

from squasher.diff import build_hunk_patch, parse_hunk_start, parse_hunks
from squasher.models import Hunk


class TestParseHunkStart:
    """Test hunk header offset extraction."""

    def test_header_with_counts(self) -> None:
        assert parse_hunk_start("@@ -10,3 +11,4 @@") == 11

    def test_header_without_counts(self) -> None:
        """Single-line ranges omit the count."""
        assert parse_hunk_start("@@ -1 +1 @@") == 1

    def test_header_with_section_heading(self) -> None:
        assert parse_hunk_start("@@ -5,2 +7,2 @@ class Foo:") == 7

    def test_malformed_header(self) -> None:
        assert parse_hunk_start("@@ garbage @@") is None


class TestParseHunks:
    """Test splitting a single file diff into hunks."""

    def test_empty_diff(self) -> None:
        """No differences yields no hunks."""
        assert parse_hunks("") == []

    def test_malformed_header_defaults_offset(self) -> None:
        hunks = parse_hunks("@@ garbage @@\n+line\n")

        assert len(hunks) == 1
        assert hunks[0].start_line == 0
        assert hunks[0].end_line == 1
        assert list(hunks[0].lines) == ["@@ garbage @@", "+line"]

    def test_two_hunk_diff(self, two_hunk_diff: str) -> None:
        hunks = parse_hunks(two_hunk_diff)

        assert len(hunks) == 2
        assert hunks[0].header == "@@ -1,3 +1,4 @@"
        assert hunks[0].start_line == 1
        assert hunks[0].end_line == 2
        assert hunks[1].header == "@@ -10,3 +11,3 @@ def section():"
        assert hunks[1].start_line == 11
        assert hunks[1].end_line == 12
        assert list(hunks[1].lines) == [
            "@@ -10,3 +11,3 @@ def section():",
            " ten",
            "-eleven",
            "+ELEVEN",
            " twelve",
        ]

    def test_preamble_is_dropped(self, two_hunk_diff: str) -> None:
        """File-pair header lines never appear inside a hunk."""
        for hunk in parse_hunks(two_hunk_diff):
            assert not any(line.startswith(("diff --git", "index ", "--- ", "+++ ")) for line in hunk.lines)

    def test_every_hunk_starts_with_its_header(self, two_hunk_diff: str) -> None:
        for hunk in parse_hunks(two_hunk_diff):
            assert hunk.lines[0] == hunk.header

    def test_round_trip_reproduces_body(self, two_hunk_diff: str) -> None:
        """Rejoining all hunk lines gives back the diff minus its preamble."""
        hunks = parse_hunks(two_hunk_diff)
        body = two_hunk_diff[two_hunk_diff.index("@@"):]

        rejoined = "\n".join(line for hunk in hunks for line in hunk.lines) + "\n"

        assert rejoined == body

    def test_end_line_counts_added_lines(self) -> None:
        raw = "@@ -3,2 +3,5 @@\n a\n+b\n+c\n-d\n+e\n+++ not an addition\n"
        hunk = parse_hunks(raw)[0]

        added = sum(
            1 for line in hunk.lines[1:] if line.startswith("+") and not line.startswith("+++")
        )
        assert hunk.end_line - hunk.start_line == added == 3
        assert hunk.end_line >= hunk.start_line

    def test_removal_only_hunk(self) -> None:
        hunk = parse_hunks("@@ -4,2 +4,0 @@\n-x\n-y\n")[0]
        assert hunk.start_line == hunk.end_line == 4

    def test_lines_kept_verbatim(self) -> None:
        """Whitespace, carriage returns and no-newline markers pass through."""
        raw = "@@ -1 +1 @@\n-old\r\n+new  \t\n\\ No newline at end of file\n"
        hunk = parse_hunks(raw)[0]
        assert list(hunk.lines) == [
            "@@ -1 +1 @@",
            "-old\r",
            "+new  \t",
            "\\ No newline at end of file",
        ]

    def test_blank_context_line_is_kept(self) -> None:
        """An empty line inside a hunk is content, not a terminator."""
        hunk = parse_hunks("@@ -1,3 +1,3 @@\n a\n\n+b\n")[0]
        assert list(hunk.lines) == ["@@ -1,3 +1,3 @@", " a", "", "+b"]


class TestBuildHunkPatch:
    """Test single-hunk patch synthesis."""

    def test_patch_layout(self, two_hunk_diff: str) -> None:
        hunk = parse_hunks(two_hunk_diff)[0]

        patch = build_hunk_patch("a.txt", hunk)

        assert patch == (
            "diff --git a/a.txt b/a.txt\n"
            "--- a/a.txt\n"
            "+++ b/a.txt\n"
            "@@ -1,3 +1,4 @@\n"
            " one\n"
            "+one and a half\n"
            " two\n"
            " three\n"
        )

    def test_raw_hunk_text(self) -> None:
        """Raw hunk text from a client is accepted as-is."""
        patch = build_hunk_patch("dir/b.py", "@@ -1 +1 @@\n-a\n+b")
        assert patch.splitlines()[0] == "diff --git a/dir/b.py b/dir/b.py"
        assert patch.endswith("+b\n")

    def test_patch_has_single_hunk(self, two_hunk_diff: str) -> None:
        hunk = parse_hunks(two_hunk_diff)[1]
        patch = build_hunk_patch("a.txt", hunk)

        assert len(parse_hunks(patch)) == 1
        assert parse_hunks(patch)[0] == hunk

    def test_hunk_text_property(self) -> None:
        hunk = Hunk(header="@@ -1 +1 @@", lines=("@@ -1 +1 @@", "+x"), start_line=1, end_line=2)
        assert hunk.text == "@@ -1 +1 @@\n+x"
