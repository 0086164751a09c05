"""
Glob pattern translation for the Resource Finder.

Resource name filters and ignore rules are written as globs. This module
turns them into anchored regular expressions matched against POSIX-style
paths relative to a container root:

- ``*`` matches within one path segment, ``?`` one character of a segment
- ``**/`` matches zero or more whole directories, a trailing ``**`` anything
- ``[abc]`` / ``[!abc]`` character classes, ``{a,b}`` alternatives
"""

import re
import logging
from typing import Dict, List, Any

from ..errors import PatternInvalidError


logger = logging.getLogger(__name__)


def translate_glob(pattern: str) -> str:
    """
    Translate a glob into an unanchored regular expression body.

    Args:
        pattern: Glob pattern using POSIX separators

    Returns:
        Regular expression source for the pattern

    Raises:
        ValueError: If a brace group is left open
    """
    parts = []
    in_group = False
    i, n = 0, len(pattern)

    while i < n:
        char = pattern[i]

        if char == '*':
            if i + 1 < n and pattern[i + 1] == '*':
                i += 2
                if i < n and pattern[i] == '/':
                    parts.append(r'(?:[^/]*/)*')
                    i += 1
                else:
                    parts.append(r'.*')
                continue
            parts.append(r'[^/]*')
        elif char == '?':
            parts.append(r'[^/]')
        elif char == '[':
            end = pattern.find(']', i + 2)
            if end == -1:
                parts.append(re.escape(char))
            else:
                body = pattern[i + 1:end]
                if body.startswith('!'):
                    body = '^' + body[1:]
                parts.append('[' + body.replace('\\', '\\\\') + ']')
                i = end + 1
                continue
        elif char == '{' and not in_group:
            in_group = True
            parts.append('(?:')
        elif char == '}' and in_group:
            in_group = False
            parts.append(')')
        elif char == ',' and in_group:
            parts.append('|')
        else:
            parts.append(re.escape(char))
        i += 1

    if in_group:
        raise ValueError(f"Unclosed '{{' in glob pattern: {pattern}")

    return ''.join(parts)


def glob_to_regex(pattern: str) -> re.Pattern:
    """Compile a glob into a regex matching whole relative paths."""
    return re.compile('^' + translate_glob(pattern) + '$')


def normalize_resource_pattern(pattern: str) -> str:
    """
    Normalize one resource name glob.

    A trailing slash selects everything under that directory. Patterns with
    a single-segment wildcard but no ``**``, and bare names, may match at
    any depth.
    """
    pattern = pattern.strip().replace('\\', '/')

    if pattern.startswith('./'):
        pattern = pattern[2:]

    if pattern.endswith('/'):
        pattern += '**'

    if '*' in pattern and '**' not in pattern:
        pattern = '**/' + pattern
    elif '/' not in pattern and '*' not in pattern:
        pattern = '**/' + pattern

    return pattern


def compile_resource_patterns(resource_pattern: str) -> List[re.Pattern]:
    """
    Compile a resource name filter into regexes, one per '|' alternative.

    Args:
        resource_pattern: Glob filter, alternatives separated by '|'

    Returns:
        List of compiled regexes; a path passes if any of them matches

    Raises:
        PatternInvalidError: If an alternative cannot be translated
    """
    compiled = []
    for alternative in resource_pattern.split('|'):
        if not alternative.strip():
            continue

        normalized = normalize_resource_pattern(alternative)
        try:
            compiled.append(glob_to_regex(normalized))
        except (ValueError, re.error) as e:
            raise PatternInvalidError(alternative, str(e)) from e

        logger.debug(f"Resource pattern '{alternative}' normalized to '{normalized}'")

    return compiled


def matches_any(path: str, patterns: List[re.Pattern]) -> bool:
    """Check if a relative path matches any compiled pattern (no patterns matches all)."""
    if not patterns:
        return True
    return any(pattern.match(path) for pattern in patterns)


def ignore_to_regex(pattern: str) -> str:
    """
    Convert a gitignore-style rule to a regex over relative paths.

    A matching rule also covers everything beneath the matched path. Rules
    starting with '/' are anchored at the container root, all others may
    match at any depth. A trailing '/' is accepted and ignored.

    Args:
        pattern: Ignore rule without its leading '!' negation marker

    Returns:
        Regular expression source
    """
    if pattern.endswith('/'):
        pattern = pattern.rstrip('/')

    is_rooted = pattern.startswith('/')
    if is_rooted:
        pattern = pattern.lstrip('/')

    if not pattern:
        return r'(?!)'

    body = translate_glob(pattern)

    if is_rooted:
        return f'^{body}(?:/.*)?$'
    return f'(?:^|/){body}(?:/.*)?$'


def compile_ignore_patterns(patterns: List[str]) -> List[Dict[str, Any]]:
    """
    Compile gitignore-style rules, keeping order and negation markers.

    Blank entries and '#' comments are skipped.

    Raises:
        ValueError: If a rule cannot be compiled
    """
    compiled = []
    for raw in patterns:
        if not raw or not raw.strip():
            continue

        pattern = raw.strip()
        if pattern.startswith('#'):
            continue

        is_negation = pattern.startswith('!')
        body = pattern[1:] if is_negation else pattern

        try:
            regex = re.compile(ignore_to_regex(body))
        except (ValueError, re.error) as e:
            raise ValueError(f"Invalid ignore pattern '{pattern}': {e}") from e

        compiled.append({
            'regex': regex,
            'is_negation': is_negation,
            'original': pattern
        })

    return compiled


def is_ignored(path: str, compiled_patterns: List[Dict[str, Any]]) -> bool:
    """
    Check a relative path against compiled ignore rules.

    Rules are applied in order; a later negation rule re-includes a path
    an earlier rule ignored.
    """
    normalized_path = path.replace('\\', '/').lstrip('/')

    ignored = False
    for pattern_info in compiled_patterns:
        if pattern_info['regex'].search(normalized_path):
            ignored = not pattern_info['is_negation']

    return ignored
