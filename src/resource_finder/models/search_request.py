"""
Search request data models for the Resource Finder.

This module defines the request a caller submits, together with the two
parameter shapes handed to container accessors: the unified, pagination-aware
find parameters and the flattened options of the legacy search operation.
"""

from typing import Dict, List, Optional, Any
from datetime import date
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


ALL_CONTAINERS = "all"


class ResultLevel(Enum):
    """Granularity requested from a container's find operation."""
    RESOURCE = "resource"
    CONTAINER = "container"
    FRAGMENT = "fragment"
    DETAILED = "detailed"


class MetadataFilters(BaseModel):
    """
    Metadata constraints applied to candidate resources.

    Attributes:
        date_after: Only resources modified after this date
        date_before: Only resources modified before this date
        size_min: Only resources of at least this many bytes
        size_max: Only resources of at most this many bytes
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    date_after: Optional[date] = Field(None, description="Modified after this date")
    date_before: Optional[date] = Field(None, description="Modified before this date")
    size_min: Optional[int] = Field(None, ge=0, description="Minimum size in bytes")
    size_max: Optional[int] = Field(None, ge=0, description="Maximum size in bytes")

    def is_empty(self) -> bool:
        """Check if no metadata constraint is set."""
        return (
            self.date_after is None and self.date_before is None
            and self.size_min is None and self.size_max is None
        )


class FindOptions(BaseModel):
    """Options block of the unified find operation."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    case_sensitive: bool = False
    context_lines: int = Field(2, ge=0, le=25)
    max_matches_per_resource: int = Field(5, ge=1, le=20)
    result_level: Optional[ResultLevel] = None
    page_size: int = Field(100, gt=0, le=1000)
    page_token: Optional[str] = None
    filters: MetadataFilters = Field(default_factory=MetadataFilters)


class FindParams(BaseModel):
    """
    Parameters of the unified find operation.

    Attributes:
        pattern: Content pattern, absent for metadata-only searches
        is_regex: Whether the pattern is a regular expression
        resource_pattern: Glob filter on resource names
        structured_query: Provider-native query, passed through untouched
        options: Matching, context and pagination options
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    pattern: Optional[str] = None
    is_regex: bool = True
    resource_pattern: Optional[str] = None
    structured_query: Optional[Dict[str, Any]] = None
    options: FindOptions = Field(default_factory=FindOptions)


class LegacySearchOptions(BaseModel):
    """Flattened options of the legacy search operation (no native pagination)."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    content_pattern: Optional[str] = None
    is_regex: bool = True
    resource_pattern: Optional[str] = None
    case_sensitive: bool = False
    date_after: Optional[date] = None
    date_before: Optional[date] = None
    size_min: Optional[int] = None
    size_max: Optional[int] = None
    context_lines: int = 2
    max_matches_per_resource: int = 5
    page_size: int = 100
    include_content: bool = False


class SearchRequest(BaseModel):
    """
    Represents a resource search with all filters and options.

    A request may carry a content pattern, metadata filters, or both. The
    target containers are named explicitly, or selected with ``["all"]``;
    an empty list selects the primary container.

    Attributes:
        pattern: Text pattern to look for inside resources
        is_regex: Treat the pattern as a regular expression (default True)
        case_sensitive: Match the pattern case-sensitively (default False)
        resource_pattern: Glob filter on resource names, '|' separates alternatives
        date_after: Only resources modified after this date
        date_before: Only resources modified before this date
        size_min: Only resources of at least this many bytes
        size_max: Only resources of at most this many bytes
        context_lines: Lines of context before and after each match (0-25)
        max_matches_per_resource: Cap on matches reported per resource (1-20)
        page_size: Resources per page requested from each container
        page_token: Opaque continuation token from a previous response
        data_source_ids: Container names to search, or ["all"]
        result_level: Granularity requested from find-capable containers
        structured_query: Provider-native query passed through untouched
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    pattern: Optional[str] = Field(None, description="Content pattern")
    is_regex: bool = Field(True, description="Whether the pattern is a regular expression")
    case_sensitive: bool = Field(False, description="Case-sensitive content matching")
    resource_pattern: Optional[str] = Field(None, description="Glob filter on resource names")
    date_after: Optional[date] = Field(None, description="Modified after this date")
    date_before: Optional[date] = Field(None, description="Modified before this date")
    size_min: Optional[int] = Field(None, ge=0, description="Minimum size in bytes")
    size_max: Optional[int] = Field(None, ge=0, description="Maximum size in bytes")
    context_lines: int = Field(2, ge=0, le=25, description="Context lines around each match")
    max_matches_per_resource: int = Field(5, ge=1, le=20, description="Maximum matches per resource")
    page_size: int = Field(100, gt=0, le=1000, description="Resources per page")
    page_token: Optional[str] = Field(None, description="Continuation token")
    data_source_ids: List[str] = Field(default_factory=list, description="Containers to search")
    result_level: Optional[ResultLevel] = Field(None, description="Requested result granularity")
    structured_query: Optional[Dict[str, Any]] = Field(None, description="Provider-native query")

    @field_validator('pattern')
    @classmethod
    def validate_pattern(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty pattern as no pattern."""
        if v is None or v == "":
            return None
        return v

    @field_validator('resource_pattern', 'page_token')
    @classmethod
    def validate_optional_text(cls, v: Optional[str]) -> Optional[str]:
        """Strip surrounding whitespace, mapping blank values to None."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator('data_source_ids')
    @classmethod
    def validate_data_source_ids(cls, v: List[str]) -> List[str]:
        """Drop blank identifiers and surrounding whitespace."""
        return [ds_id.strip() for ds_id in v if ds_id and ds_id.strip()]

    @model_validator(mode='after')
    def validate_ranges(self):
        """Validate that size and date windows are not inverted."""
        if self.size_min is not None and self.size_max is not None:
            if self.size_min > self.size_max:
                raise ValueError("size_min must be <= size_max")

        if self.date_after is not None and self.date_before is not None:
            if self.date_after > self.date_before:
                raise ValueError("date_after must be <= date_before")

        return self

    def has_pattern(self) -> bool:
        """Check if this request searches resource content."""
        return self.pattern is not None

    def has_filters(self) -> bool:
        """Check if this request applies any name or metadata filter."""
        return self.resource_pattern is not None or not self.get_metadata_filters().is_empty()

    def targets_all(self) -> bool:
        """Check if every available container was requested."""
        return any(ds_id.lower() == ALL_CONTAINERS for ds_id in self.data_source_ids)

    def get_metadata_filters(self) -> MetadataFilters:
        """Get the metadata filters of this request."""
        return MetadataFilters(
            date_after=self.date_after,
            date_before=self.date_before,
            size_min=self.size_min,
            size_max=self.size_max
        )

    def to_find_params(self) -> FindParams:
        """Build the parameters of the unified find operation."""
        return FindParams(
            pattern=self.pattern,
            is_regex=self.is_regex,
            resource_pattern=self.resource_pattern,
            structured_query=self.structured_query,
            options=FindOptions(
                case_sensitive=self.case_sensitive,
                context_lines=self.context_lines,
                max_matches_per_resource=self.max_matches_per_resource,
                result_level=self.result_level,
                page_size=self.page_size,
                page_token=self.page_token,
                filters=self.get_metadata_filters()
            )
        )

    def to_legacy_options(self) -> LegacySearchOptions:
        """Build the flattened options of the legacy search operation."""
        return LegacySearchOptions(
            content_pattern=self.pattern,
            is_regex=self.is_regex,
            resource_pattern=self.resource_pattern,
            case_sensitive=self.case_sensitive,
            date_after=self.date_after,
            date_before=self.date_before,
            size_min=self.size_min,
            size_max=self.size_max,
            context_lines=self.context_lines,
            max_matches_per_resource=self.max_matches_per_resource,
            page_size=self.page_size,
            include_content=self.has_pattern()
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the search request to a dictionary representation."""
        return self.model_dump(mode='json')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchRequest':
        """Create a SearchRequest from a dictionary (snake_case or camelCase keys)."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the search request."""
        parts = []
        if self.has_pattern():
            parts.append(f"Pattern: '{self.pattern}'")
        if self.resource_pattern:
            parts.append(f"Resources: '{self.resource_pattern}'")

        if self.data_source_ids:
            parts.append(f"Containers: {', '.join(self.data_source_ids)}")
        else:
            parts.append("Containers: primary")

        parts.append(f"Page size: {self.page_size}")

        return " | ".join(parts)
