"""
Search results data models for the Resource Finder.

This module defines the structures produced while searching: per-line content
matches with their context window, per-resource match groups, the result
shapes returned by container accessors, the per-container outcome, the
aggregated result, and the two report variants derived from it.
"""

from typing import Dict, List, Optional, Any, Union, Annotated, Literal
from datetime import datetime
from pathlib import PurePosixPath
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models exchanged with accessors and renderers (camelCase aliases)."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class ResourceMetadata(BaseModel):
    """
    Metadata information about a candidate resource.

    Attributes:
        path: Resource path relative to its container root (POSIX separators)
        size: Resource size in bytes
        modified_time: Last modification timestamp
        extension: Resource extension (e.g., '.py', '.md')
        mime_type: MIME type of the resource (if detected)
        is_binary: Whether the resource appears to be binary
    """

    path: str = Field(..., min_length=1, description="Path relative to the container root")
    size: int = Field(..., ge=0, description="Size in bytes")
    modified_time: datetime = Field(..., description="Last modification timestamp")
    extension: Optional[str] = Field(None, description="Resource extension")
    mime_type: Optional[str] = Field(None, description="MIME type of the resource")
    is_binary: bool = Field(False, description="Whether the resource appears to be binary")

    @field_validator('extension')
    @classmethod
    def validate_extension(cls, v: Optional[str]) -> Optional[str]:
        """Normalize extension to include leading dot."""
        if v is None:
            return v
        if not v.startswith('.'):
            return '.' + v.lower()
        return v.lower()

    def get_name(self) -> str:
        """Get the resource name without its directory."""
        return PurePosixPath(self.path).name

    def get_size_human_readable(self) -> str:
        """Get resource size in human-readable format."""
        size = float(self.size)
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if size < 1024.0:
                return f"{size:.1f} {unit}"
            size /= 1024.0
        return f"{size:.1f} PB"

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary representation."""
        data = self.model_dump()
        data['size_human'] = self.get_size_human_readable()
        data['modified_time'] = self.modified_time.isoformat()
        return data


class ContentMatch(WireModel):
    """
    One matched line with its surrounding context.

    Attributes:
        line_number: Line number of the match (1-based)
        content: Full text of the matching line
        context_before: Lines immediately preceding the match, in order
        context_after: Lines immediately following the match, in order
        match_start: Offset where the match starts in the line (0-based)
        match_end: Offset where the match ends in the line (exclusive)
    """

    line_number: int = Field(..., ge=1, description="Line number of the match")
    content: str = Field(..., description="Full text of the matching line")
    context_before: List[str] = Field(default_factory=list, description="Lines before the match")
    context_after: List[str] = Field(default_factory=list, description="Lines after the match")
    match_start: int = Field(..., ge=0, description="Offset where the match starts")
    match_end: int = Field(..., ge=1, description="Offset where the match ends (exclusive)")

    @model_validator(mode='after')
    def validate_offsets(self):
        """Clamp the match end to the line, then require a non-empty span."""
        if self.match_end > len(self.content):
            self.match_end = len(self.content)
        if self.match_end <= self.match_start:
            raise ValueError("match_end must be greater than match_start")
        return self

    def get_matched_text(self) -> str:
        """Get the matched substring of the line."""
        return self.content[self.match_start:self.match_end]

    def get_highlighted_content(self, highlight_start: str = "**", highlight_end: str = "**") -> str:
        """Get the line with the match highlighted using specified markers."""
        before = self.content[:self.match_start]
        after = self.content[self.match_end:]
        return f"{before}{highlight_start}{self.get_matched_text()}{highlight_end}{after}"


class ResourceMatch(WireModel):
    """
    All content matches found within one resource.

    Attributes:
        resource_path: Path of the resource (prefixed with its container once aggregated)
        content_matches: Matches in first-occurrence order, None for metadata-only matches
    """

    resource_path: str = Field(..., min_length=1, description="Path of the matched resource")
    content_matches: Optional[List[ContentMatch]] = Field(None, description="Matched lines")

    @field_validator('content_matches')
    @classmethod
    def validate_content_matches(cls, v: Optional[List[ContentMatch]]) -> Optional[List[ContentMatch]]:
        """An empty match list means the resource matched on metadata only."""
        if not v:
            return None
        return v

    def has_content_matches(self) -> bool:
        """Check if this resource carries content matches."""
        return self.content_matches is not None

    def get_match_count(self) -> int:
        """Get the number of content matches."""
        return len(self.content_matches) if self.content_matches else 0


class Pagination(WireModel):
    """
    Pagination state reported by a container.

    Attributes:
        has_more: Whether more resources are available
        page_size: Page size used for this page
        continuation_token: Opaque token resuming after this page
    """

    has_more: bool = Field(False, description="Whether more resources are available")
    page_size: int = Field(100, gt=0, description="Page size used for this page")
    continuation_token: Optional[str] = Field(None, description="Token resuming after this page")


class FindResult(WireModel):
    """Result of a container's unified find operation."""

    resources: List[ResourceMatch] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)
    error_message: Optional[str] = None


class LegacySearchResult(WireModel):
    """Result of a container's legacy search operation."""

    matches: List[ResourceMatch] = Field(default_factory=list)
    error_message: Optional[str] = None


class ContainerOutcome(BaseModel):
    """
    What searching one container produced.

    Every container yields exactly one outcome: its successes, its error,
    or both when the provider reported a partial error.

    Attributes:
        container_name: Name of the searched container
        resources: Resource paths, prefixed with the container name
        matches: Content-bearing resource matches, prefixed paths
        error: Error text for this container, if any
        pagination: Pagination reported by the container
        succeeded: Whether the container returned results at all
    """

    container_name: str
    resources: List[str] = Field(default_factory=list)
    matches: List[ResourceMatch] = Field(default_factory=list)
    error: Optional[str] = None
    pagination: Optional[Pagination] = None
    succeeded: bool = True

    @classmethod
    def failure(cls, container_name: str, error: str) -> 'ContainerOutcome':
        """Create the outcome of a container that could not be searched."""
        return cls(container_name=container_name, error=error, succeeded=False)


class AggregatedResult(BaseModel):
    """
    Merged results of one request across all selected containers.

    Attributes:
        resources: Prefixed resource paths in container input order
        matches: Content-bearing resource matches in container input order
        error_message: Combined per-container error text
        search_criteria: Human-readable description of the active filters
        containers_searched: Containers that returned results
        not_found: Requested identifiers that resolved to no container
        pagination: Pagination of the first container reporting more results
    """

    resources: List[str] = Field(default_factory=list)
    matches: List[ResourceMatch] = Field(default_factory=list)
    error_message: Optional[str] = None
    search_criteria: str = ""
    containers_searched: List[str] = Field(default_factory=list)
    not_found: List[str] = Field(default_factory=list)
    pagination: Optional[Pagination] = None

    def get_resource_count(self) -> int:
        """Get the number of matching resources."""
        return len(self.resources)

    def has_content_matches(self) -> bool:
        """Check if any resource carries content matches."""
        return any(match.has_content_matches() for match in self.matches)

    def has_errors(self) -> bool:
        """Check if any container reported an error."""
        return bool(self.error_message)

    def get_data_source_status(self) -> str:
        """Describe which requested containers could not be found."""
        if self.not_found:
            return f"Could not find data source for: [{', '.join(self.not_found)}]"
        return "All data sources searched"

    def to_dict(self) -> Dict[str, Any]:
        """Convert aggregated result to dictionary representation."""
        data = self.model_dump(mode='json')
        data['resource_count'] = self.get_resource_count()
        data['has_errors'] = self.has_errors()
        return data

    def __str__(self) -> str:
        """String representation of the aggregated result."""
        parts = [f"Found {self.get_resource_count()} resources"]
        parts.append(f"Searched {len(self.containers_searched)} containers")

        if self.not_found:
            parts.append(f"Not found: {len(self.not_found)}")

        if self.has_errors():
            parts.append("Errors reported")

        return " | ".join(parts)


class SimpleReport(WireModel):
    """Report for searches without content matches: a flat resource listing."""

    kind: Literal['simple'] = 'simple'
    containers_searched: List[str] = Field(default_factory=list)
    error_message: Optional[str] = None
    search_criteria: str = ""
    resources: List[str] = Field(default_factory=list)
    not_found: List[str] = Field(default_factory=list)


class EnhancedReport(WireModel):
    """Report for content searches: structured matches plus the flat listing."""

    kind: Literal['enhanced'] = 'enhanced'
    containers_searched: List[str] = Field(default_factory=list)
    error_message: Optional[str] = None
    search_criteria: str = ""
    resources: List[str] = Field(default_factory=list)
    not_found: List[str] = Field(default_factory=list)
    matches: List[ResourceMatch] = Field(default_factory=list)


SearchReport = Annotated[Union[SimpleReport, EnhancedReport], Field(discriminator='kind')]
