"""
Unit tests for content match extraction.

Covers context windows at resource boundaries, the per-resource cap, and
the offsets reported for each match.
"""

import pytest

from resource_finder.tools.content_extractor import (
    extract_content_matches, match_resource_content, split_lines
)
from resource_finder.tools.pattern_compiler import compile_pattern


class TestSplitLines:
    """Test cases for split_lines."""

    def test_empty_content(self):
        """Test that empty content has no lines."""
        assert split_lines("") == []

    def test_trailing_newline(self):
        """Test that a trailing newline does not add a line."""
        assert split_lines("a\nb\n") == ["a", "b"]

    def test_mixed_line_endings(self):
        """Test CRLF and LF line endings."""
        assert split_lines("a\r\nb\nc") == ["a", "b", "c"]

    def test_blank_lines_kept(self):
        """Test that blank lines inside content are kept."""
        assert split_lines("a\n\nb") == ["a", "", "b"]

    def test_only_newlines_break_lines(self):
        """Test that form feeds and Unicode separators stay inside a line."""
        assert split_lines("a\x0cb\nc\u2028d\x85e\n") == ["a\x0cb", "c\u2028d\x85e"]


class TestExtractContentMatches:
    """Test cases for extract_content_matches."""

    def setup_method(self):
        """Set up a 15-line resource with hits on lines 3, 9 and 14."""
        self.lines = [f"line {n}" for n in range(1, 16)]
        for n in (3, 9, 14):
            self.lines[n - 1] = f"line {n} needle here"
        self.matcher = compile_pattern("needle")

    def test_matches_with_context(self):
        """Test line numbers and context windows with two lines of context."""
        matches = extract_content_matches(self.lines, self.matcher, context_lines=2)

        assert [m.line_number for m in matches] == [3, 9, 14]

        first = matches[0]
        assert first.context_before == ["line 1", "line 2"]
        assert first.context_after == ["line 4", "line 5"]

        middle = matches[1]
        assert middle.context_before == ["line 7", "line 8"]
        assert middle.context_after == ["line 10", "line 11"]

        last = matches[2]
        assert last.context_before == ["line 12", "line 13"]
        assert last.context_after == ["line 15"]

    def test_offsets(self):
        """Test that offsets delimit the matched text."""
        matches = extract_content_matches(self.lines, self.matcher)

        first = matches[0]
        assert first.content == "line 3 needle here"
        assert first.match_start == 7
        assert first.match_end == 13
        assert first.get_matched_text() == "needle"

    def test_zero_context(self):
        """Test that zero context lines gives empty windows."""
        matches = extract_content_matches(self.lines, self.matcher, context_lines=0)

        assert len(matches) == 3
        for match in matches:
            assert match.context_before == []
            assert match.context_after == []

    def test_cap(self):
        """Test that scanning stops at the per-resource cap."""
        matches = extract_content_matches(self.lines, self.matcher, max_matches_per_resource=2)

        assert [m.line_number for m in matches] == [3, 9]

    def test_single_line_resource(self):
        """Test a resource of one matching line."""
        matches = extract_content_matches(["only needle"], self.matcher, context_lines=3)

        assert len(matches) == 1
        assert matches[0].line_number == 1
        assert matches[0].context_before == []
        assert matches[0].context_after == []

    def test_window_lengths(self):
        """Test context window lengths at every position."""
        lines = ["needle"] * 6
        context_lines = 2
        matches = extract_content_matches(
            lines, self.matcher, context_lines=context_lines, max_matches_per_resource=20
        )

        assert len(matches) == len(lines)
        for match in matches:
            index = match.line_number - 1
            assert len(match.context_before) == min(context_lines, index)
            assert len(match.context_after) == min(context_lines, len(lines) - 1 - index)

    def test_overlapping_windows_not_merged(self):
        """Test that nearby matches each carry their full window."""
        lines = ["a", "needle 1", "needle 2", "b"]
        matches = extract_content_matches(lines, self.matcher, context_lines=1)

        assert matches[0].context_after == ["needle 2"]
        assert matches[1].context_before == ["needle 1"]

    def test_no_matches(self):
        """Test lines without the pattern."""
        assert extract_content_matches(["a", "b"], self.matcher) == []

    def test_invalid_arguments(self):
        """Test rejected context and cap values."""
        with pytest.raises(ValueError):
            extract_content_matches(self.lines, self.matcher, context_lines=-1)

        with pytest.raises(ValueError):
            extract_content_matches(self.lines, self.matcher, max_matches_per_resource=0)


class TestMatchResourceContent:
    """Test cases for match_resource_content."""

    def test_match_found(self):
        """Test a resource containing the pattern."""
        matcher = compile_pattern("import")
        result = match_resource_content("src/main.py", "import os\n\nprint(1)\n", matcher)

        assert result is not None
        assert result.resource_path == "src/main.py"
        assert result.get_match_count() == 1
        assert result.content_matches[0].context_after == ["", "print(1)"]

    def test_no_match(self):
        """Test a resource without the pattern."""
        matcher = compile_pattern("missing")

        assert match_resource_content("a.txt", "nothing here", matcher) is None

    def test_empty_resource(self):
        """Test an empty resource."""
        matcher = compile_pattern("x")

        assert match_resource_content("empty.txt", "", matcher) is None

    def test_line_numbers_with_form_feed(self):
        """Test that a form feed does not shift line numbers or context."""
        matcher = compile_pattern("needle")
        result = match_resource_content("f.txt", "a\x0cb\nneedle\n", matcher)

        match = result.content_matches[0]
        assert match.line_number == 2
        assert match.context_before == ["a\x0cb"]
        assert match.context_after == []
