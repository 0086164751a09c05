"""
Configuration data models for the Resource Finder.

This module defines the core data structures for managing application configuration,
including the searchable containers, ignore patterns, system limits, and the
defaults applied to search requests.
"""

from typing import Dict, List, Optional, Any
from pathlib import Path
from enum import Enum
from pydantic import BaseModel, Field, PrivateAttr, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..tools.glob_patterns import compile_ignore_patterns, is_ignored
from .search_request import ALL_CONTAINERS


DEFAULT_IGNORE_PATTERNS = [
    "**/.git/**",
    "**/.svn/**",
    "**/.hg/**",
    "**/node_modules/**",
    "**/__pycache__/**",
    "**/.pytest_cache/**",
    "**/venv/**",
    "**/.venv/**",
    "**/.DS_Store",
]


class ContainerType(Enum):
    """Supported container types that can be built from configuration."""
    FILESYSTEM = "filesystem"


class ContainerConfig(BaseModel):
    """
    Configuration of one searchable container.

    Attributes:
        name: Unique container name, used to select it and to prefix its results
        type: Container type
        root: Root directory of a filesystem container
        primary: Whether this container is searched when none is requested
    """

    name: str = Field(..., min_length=1, description="Unique container name")
    type: ContainerType = Field(ContainerType.FILESYSTEM, description="Container type")
    root: str = Field(".", description="Root directory of a filesystem container")
    primary: bool = Field(False, description="Searched when no container is requested")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate container name."""
        v = v.strip()
        if not v:
            raise ValueError("Container name cannot be empty")
        if v.lower() == ALL_CONTAINERS:
            raise ValueError(f"'{ALL_CONTAINERS}' is reserved and cannot be a container name")
        return v

    @field_validator('type', mode='before')
    @classmethod
    def validate_type(cls, v) -> ContainerType:
        """Validate and convert type to enum."""
        if isinstance(v, str):
            try:
                return ContainerType(v.lower())
            except ValueError:
                raise ValueError(f"Invalid container type: {v}")
        return v

    def get_root_path(self) -> Path:
        """Get the resolved root directory."""
        return Path(self.root).expanduser().resolve()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = self.model_dump()
        data['type'] = self.type.value
        return data


class LimitsConfig(BaseModel):
    """
    Configuration for system limits and constraints.

    Attributes:
        max_files: Maximum number of files examined per container walk
        max_bytes_per_file: Files larger than this are skipped (bytes)
        max_concurrent: Maximum containers searched in parallel
        default_page_size: Page size used when a request does not set one
    """

    max_files: int = Field(200000, gt=0, description="Maximum files examined per walk")
    max_bytes_per_file: int = Field(5000000, gt=0, description="Maximum file size to process (bytes)")
    max_concurrent: int = Field(4, gt=0, description="Maximum containers searched in parallel")
    default_page_size: int = Field(100, gt=0, le=1000, description="Default page size")

    def get_max_size_human_readable(self) -> str:
        """Get max file size in human-readable format."""
        size = float(self.max_bytes_per_file)
        for unit in ['B', 'KB', 'MB', 'GB']:
            if size < 1024.0:
                return f"{size:.1f} {unit}"
            size /= 1024.0
        return f"{size:.1f} TB"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = self.model_dump()
        data['max_size_human'] = self.get_max_size_human_readable()
        return data


class SearchDefaults(BaseModel):
    """
    Defaults applied to search requests that leave an option unset.

    Attributes:
        context_lines: Context lines around each match
        max_matches_per_resource: Maximum matches reported per resource
        case_sensitive: Whether content matching is case-sensitive
    """

    context_lines: int = Field(2, ge=0, le=25, description="Context lines around each match")
    max_matches_per_resource: int = Field(5, ge=1, le=20, description="Maximum matches per resource")
    case_sensitive: bool = Field(False, description="Case-sensitive content matching")

    def apply(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Fill unset request options with these defaults (snake_case or camelCase keys)."""
        merged = dict(request_data)
        for key, value in self.model_dump().items():
            if merged.get(key) is None and merged.get(to_camel(key)) is None:
                merged.pop(to_camel(key), None)
                merged[key] = value
        return merged

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class FinderConfig(BaseModel):
    """
    Main configuration class for the Resource Finder.

    Attributes:
        containers: Searchable containers, in the order results are reported
        ignore: Ignore patterns (gitignore-style) applied to filesystem containers
        limits: System limits and constraints
        search: Defaults for search requests
    """

    containers: List[ContainerConfig] = Field(..., min_length=1, description="Searchable containers")
    ignore: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS),
        description="List of ignore patterns (gitignore-style)"
    )
    limits: LimitsConfig = Field(default_factory=LimitsConfig, description="System limits and constraints")
    search: SearchDefaults = Field(default_factory=SearchDefaults, description="Defaults for search requests")

    _compiled_ignore_patterns: List[Dict[str, Any]] = PrivateAttr(default_factory=list)

    @field_validator('ignore')
    @classmethod
    def validate_ignore(cls, v: List[str]) -> List[str]:
        """Drop blank patterns and comments."""
        return [p.strip() for p in v if p and p.strip() and not p.strip().startswith('#')]

    @model_validator(mode='after')
    def validate_containers(self):
        """Validate container names are unique and at most one is primary."""
        seen = set()
        for container in self.containers:
            if container.name in seen:
                raise ValueError(f"Duplicate container name: {container.name}")
            seen.add(container.name)

        primaries = [c.name for c in self.containers if c.primary]
        if len(primaries) > 1:
            raise ValueError(f"Only one container can be primary, got: {', '.join(primaries)}")

        return self

    def model_post_init(self, __context) -> None:
        """Compile ignore patterns for efficient matching."""
        self._compiled_ignore_patterns = compile_ignore_patterns(self.ignore)

    def should_ignore(self, path: str) -> bool:
        """
        Check if a path relative to a container root should be ignored.

        Args:
            path: Relative path (directories may carry a trailing '/')

        Returns:
            True if path should be ignored, False otherwise
        """
        return is_ignored(path, self._compiled_ignore_patterns)

    def get_container(self, name: str) -> Optional[ContainerConfig]:
        """Get a container configuration by name."""
        for container in self.containers:
            if container.name == name:
                return container
        return None

    def get_primary_container(self) -> ContainerConfig:
        """Get the container searched when none is requested."""
        for container in self.containers:
            if container.primary:
                return container
        return self.containers[0]

    def apply_request_defaults(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Fill unset options of a request dict from the search defaults and limits.

        Args:
            request_data: Request fields (snake_case or camelCase keys)

        Returns:
            New dict with defaults filled in
        """
        merged = self.search.apply(request_data)
        if merged.get('page_size') is None and merged.get('pageSize') is None:
            merged.pop('pageSize', None)
            merged['page_size'] = self.limits.default_page_size
        return merged

    def validate_configuration(self) -> List[str]:
        """
        Check the configuration for non-fatal problems.

        Returns:
            List of warning messages
        """
        warnings = []

        for container in self.containers:
            if container.type != ContainerType.FILESYSTEM:
                continue
            root_path = container.get_root_path()
            if not root_path.exists():
                warnings.append(f"Root directory of '{container.name}' does not exist: {root_path}")
            elif not root_path.is_dir():
                warnings.append(f"Root of '{container.name}' is not a directory: {root_path}")

        if self.limits.max_files > 1000000:
            warnings.append("Very high max_files limit may cause memory issues")

        if self.limits.max_bytes_per_file > 50000000:
            warnings.append("Very high max_bytes_per_file limit may cause memory issues")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        return {
            'containers': [container.to_dict() for container in self.containers],
            'ignore': list(self.ignore),
            'limits': self.limits.to_dict(),
            'search': self.search.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FinderConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the configuration."""
        parts = [f"Containers: {len(self.containers)}"]
        parts.append(f"Primary: {self.get_primary_container().name}")
        parts.append(f"Ignore patterns: {len(self.ignore)}")
        parts.append(f"Max concurrent: {self.limits.max_concurrent}")

        return " | ".join(parts)
