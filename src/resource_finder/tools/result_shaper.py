"""
Result shaping for the Resource Finder.

Turns an aggregated result into the forms handed back to callers: a
structured dict, a report that is either simple (resource listing only) or
enhanced (listing plus content matches), and the text block rendering of a
report, which embeds the matches as JSON between ``<enhanced-results>`` tags.
"""

import json
import re
from typing import Any, Dict, List, Optional, Tuple, Union

from ..models.search_request import SearchRequest
from ..models.search_results import AggregatedResult, EnhancedReport, ResourceMatch, SimpleReport


ENHANCED_START = '<enhanced-results>'
ENHANCED_END = '</enhanced-results>'
RESOURCES_START = '<resources>'
RESOURCES_END = '</resources>'

_ENHANCED_BLOCK = re.compile(
    re.escape(ENHANCED_START) + r'\s*(.*?)\s*' + re.escape(ENHANCED_END), re.DOTALL
)
_RESOURCES_BLOCK = re.compile(
    re.escape(RESOURCES_START) + r'\n?(.*?)\n?' + re.escape(RESOURCES_END), re.DOTALL
)


def build_search_criteria(request: SearchRequest) -> str:
    """
    Describe the active filters of a request in a fixed order.

    Args:
        request: The search request

    Returns:
        Comma-separated description, empty when nothing is filtered
    """
    criteria = []

    if request.has_pattern():
        criteria.append(f'content pattern "{request.pattern}"')
        criteria.append('case-sensitive' if request.case_sensitive else 'case-insensitive')

    if request.resource_pattern:
        criteria.append(f'resource pattern "{request.resource_pattern}"')

    if request.date_after is not None:
        criteria.append(f'modified after {request.date_after.isoformat()}')

    if request.date_before is not None:
        criteria.append(f'modified before {request.date_before.isoformat()}')

    if request.size_min is not None:
        criteria.append(f'minimum size {request.size_min} bytes')

    if request.size_max is not None:
        criteria.append(f'maximum size {request.size_max} bytes')

    return ', '.join(criteria)


def to_structured(result: AggregatedResult) -> Dict[str, Any]:
    """
    Convert an aggregated result to its structured wire form.

    Args:
        result: The aggregated result

    Returns:
        Dict with camelCase keys
    """
    return {
        'resources': list(result.resources),
        'matches': [match.model_dump(by_alias=True) for match in result.matches],
        'errorMessage': result.error_message,
        'searchCriteria': result.search_criteria,
        'dataSourcesSearched': list(result.containers_searched),
        'notFound': list(result.not_found),
        'pagination': result.pagination.model_dump(by_alias=True) if result.pagination else None,
    }


def shape_result(result: AggregatedResult) -> Union[SimpleReport, EnhancedReport]:
    """
    Choose the report variant for an aggregated result.

    The report is enhanced exactly when at least one resource carries
    content matches.
    """
    fields = dict(
        containers_searched=list(result.containers_searched),
        error_message=result.error_message,
        search_criteria=result.search_criteria,
        resources=list(result.resources),
        not_found=list(result.not_found)
    )

    if result.has_content_matches():
        return EnhancedReport(matches=list(result.matches), **fields)

    return SimpleReport(**fields)


def render_data_source_status(report: Union[SimpleReport, EnhancedReport]) -> str:
    """Describe which requested containers could not be found."""
    if report.not_found:
        return f"Could not find data source for: [{', '.join(report.not_found)}]"
    return "All data sources searched"


def render_summary(report: Union[SimpleReport, EnhancedReport]) -> str:
    """Render the one-paragraph summary of a report."""
    return (
        f"{render_data_source_status(report)}\n"
        f"Found {len(report.resources)} resources matching the search criteria: {report.search_criteria}"
    )


def render_text_block(report: Union[SimpleReport, EnhancedReport]) -> str:
    """
    Render a report as a text block.

    Args:
        report: Simple or enhanced report

    Returns:
        Header lines, the JSON matches block for enhanced reports, and the
        resource listing
    """
    lines = [f"Searched data sources: [{', '.join(report.containers_searched)}]"]

    if report.error_message:
        lines.append("Errors:")
        lines.append(report.error_message)
        lines.append("")

    lines.append(
        f"{len(report.resources)} resources match the search criteria: {report.search_criteria}"
    )

    if isinstance(report, EnhancedReport):
        matches = [match.model_dump(by_alias=True) for match in report.matches]
        lines.append("")
        lines.append(ENHANCED_START)
        # "<\/" keeps closing tags inside matched lines from ending the block
        lines.append(json.dumps({'matches': matches}, indent=2).replace('</', '<\\/'))
        lines.append(ENHANCED_END)

    if isinstance(report, EnhancedReport) or report.resources:
        lines.append("")
        lines.append(RESOURCES_START)
        lines.extend(report.resources)
        lines.append(RESOURCES_END)

    return '\n'.join(lines)


def parse_text_block(text: str) -> Tuple[Optional[List[ResourceMatch]], List[str]]:
    """
    Read matches and resources back from a rendered text block.

    Args:
        text: Output of render_text_block

    Returns:
        Tuple of (matches, or None for simple blocks; resource paths)

    Raises:
        ValueError: If the enhanced block does not hold valid JSON
    """
    matches = None

    enhanced = _ENHANCED_BLOCK.search(text)
    if enhanced:
        try:
            payload = json.loads(enhanced.group(1))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid enhanced results block: {e}") from e
        matches = [ResourceMatch.model_validate(item) for item in payload.get('matches', [])]

    resources: List[str] = []
    listing = _RESOURCES_BLOCK.search(text, enhanced.end() if enhanced else 0)
    if listing:
        resources = [line for line in listing.group(1).split('\n') if line.strip()]

    return matches, resources
