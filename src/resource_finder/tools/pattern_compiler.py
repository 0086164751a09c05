"""
Pattern compiler for content searches.

Turns a text pattern and its flags into a matcher that reports the first
occurrence of the pattern within one line.
"""

import re
from typing import Optional, Tuple

from ..errors import PatternInvalidError


class ContentMatcher:
    """Base class for compiled content patterns."""

    def __init__(self, pattern: str):
        self.pattern = pattern

    def search(self, line: str) -> Optional[Tuple[int, int]]:
        """
        Find the first occurrence of the pattern in a line.

        Args:
            line: Text of one line

        Returns:
            (start, end) offsets of the occurrence with end > start, or None
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.pattern!r})"


class LiteralMatcher(ContentMatcher):
    """Case-sensitive literal substring matcher."""

    def search(self, line: str) -> Optional[Tuple[int, int]]:
        start = line.find(self.pattern)
        if start == -1:
            return None
        return start, start + len(self.pattern)


class RegexMatcher(ContentMatcher):
    """Matcher backed by a compiled regular expression."""

    def __init__(self, pattern: str, regex: re.Pattern):
        super().__init__(pattern)
        self.regex = regex

    def search(self, line: str) -> Optional[Tuple[int, int]]:
        # Zero-width hits (e.g. '^', 'x*') carry no text to report
        for match in self.regex.finditer(line):
            if match.end() > match.start():
                return match.start(), match.end()
        return None

    @property
    def case_sensitive(self) -> bool:
        return not self.regex.flags & re.IGNORECASE


def compile_pattern(pattern: str, is_regex: bool = True, case_sensitive: bool = False) -> ContentMatcher:
    """
    Compile a content pattern into a matcher.

    Args:
        pattern: Raw pattern text
        is_regex: Treat the pattern as a regular expression
        case_sensitive: Match case-sensitively

    Returns:
        ContentMatcher for the pattern

    Raises:
        PatternInvalidError: If the pattern is empty or not a valid regular expression
    """
    if not pattern:
        raise PatternInvalidError(pattern or "", "pattern cannot be empty")

    flags = 0 if case_sensitive else re.IGNORECASE

    if is_regex:
        try:
            return RegexMatcher(pattern, re.compile(pattern, flags))
        except re.error as e:
            raise PatternInvalidError(pattern, str(e)) from e

    if case_sensitive:
        return LiteralMatcher(pattern)

    # Case folding needs the regex engine, so metacharacters are escaped first
    return RegexMatcher(pattern, re.compile(re.escape(pattern), flags))
