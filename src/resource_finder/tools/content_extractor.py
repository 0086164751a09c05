"""
Content match extraction for the Resource Finder.

Scans the text of one resource line by line and records, for every line
containing the pattern, the matched offsets and the lines surrounding it.
Only the first occurrence within a line is reported, and scanning stops as
soon as the per-resource cap is reached.
"""

import logging
from typing import List, Optional, Sequence

from ..models.search_results import ContentMatch, ResourceMatch
from .pattern_compiler import ContentMatcher


logger = logging.getLogger(__name__)


def split_lines(content: str) -> List[str]:
    """
    Split resource text into lines without line terminators.

    Only newlines end a line, and a carriage return before one is dropped.
    Form feeds and Unicode separators stay inside the line. A trailing
    newline does not produce an extra empty line, and empty content has no
    lines at all.
    """
    if not content:
        return []

    lines = [line[:-1] if line.endswith("\r") else line for line in content.split("\n")]
    if lines[-1] == "":
        lines.pop()
    return lines


def extract_content_matches(
    lines: Sequence[str],
    matcher: ContentMatcher,
    context_lines: int = 2,
    max_matches_per_resource: int = 5
) -> List[ContentMatch]:
    """
    Extract content matches from the lines of one resource.

    Each match carries its own context window; windows of nearby matches
    may overlap and are not merged.

    Args:
        lines: Lines of the resource, in order
        matcher: Compiled content pattern
        context_lines: Lines of context to include before and after each match
        max_matches_per_resource: Stop after this many matches

    Returns:
        Matches in the order they occur, at most max_matches_per_resource
    """
    if context_lines < 0:
        raise ValueError("context_lines must be >= 0")
    if max_matches_per_resource < 1:
        raise ValueError("max_matches_per_resource must be >= 1")

    matches: List[ContentMatch] = []
    line_count = len(lines)

    for index, line in enumerate(lines):
        span = matcher.search(line)
        if span is None:
            continue

        start, end = span
        matches.append(ContentMatch(
            line_number=index + 1,
            content=line,
            context_before=list(lines[max(0, index - context_lines):index]),
            context_after=list(lines[index + 1:min(line_count, index + 1 + context_lines)]),
            match_start=start,
            match_end=end
        ))

        if len(matches) >= max_matches_per_resource:
            break

    return matches


def match_resource_content(
    resource_path: str,
    content: str,
    matcher: ContentMatcher,
    context_lines: int = 2,
    max_matches_per_resource: int = 5
) -> Optional[ResourceMatch]:
    """
    Search the text of one resource.

    Args:
        resource_path: Path reported for the resource
        content: Full text of the resource
        matcher: Compiled content pattern
        context_lines: Lines of context to include before and after each match
        max_matches_per_resource: Stop after this many matches

    Returns:
        ResourceMatch with its content matches, or None if the pattern does not occur
    """
    content_matches = extract_content_matches(
        split_lines(content),
        matcher,
        context_lines=context_lines,
        max_matches_per_resource=max_matches_per_resource
    )

    if not content_matches:
        return None

    logger.debug(f"Found {len(content_matches)} matches in {resource_path}")
    return ResourceMatch(resource_path=resource_path, content_matches=content_matches)
