"""
Container accessors for the Resource Finder.

An accessor is the per-container object the aggregator calls to search. Its
capability is declared by type: ``UnifiedAccessor`` subclasses expose the
pagination-aware ``find`` operation, ``LegacyAccessor`` subclasses the older
``search`` operation. Anything else cannot be searched.

The filesystem accessor shipped here enumerates a directory tree with
``FSWalker`` and extracts content matches from text files.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from ..errors import ContainerOperationError
from ..models.config import FinderConfig
from ..models.search_request import FindParams, LegacySearchOptions, ResultLevel
from ..models.search_results import (
    FindResult, LegacySearchResult, Pagination, ResourceMatch, ResourceMetadata
)
from .content_extractor import match_resource_content
from .fs_walker import FSWalker
from .pattern_compiler import ContentMatcher, compile_pattern


logger = logging.getLogger(__name__)


class AccessorCapability(Enum):
    """Search operation an accessor supports."""
    UNIFIED = "unified"
    LEGACY = "legacy"
    UNSUPPORTED = "unsupported"


class UnifiedAccessor(ABC):
    """Accessor exposing the unified, pagination-aware find operation."""

    @abstractmethod
    def find(self, params: FindParams) -> Union[FindResult, Dict[str, Any]]:
        """
        Find resources matching the given parameters.

        Args:
            params: Pattern, filters, and options including pagination

        Returns:
            FindResult, or a dict of the same shape
        """


class LegacyAccessor(ABC):
    """Accessor exposing only the legacy search operation (no native pagination)."""

    @abstractmethod
    def search(self, query: str, options: LegacySearchOptions) -> Union[LegacySearchResult, Dict[str, Any]]:
        """
        Search resources with a query string.

        Args:
            query: Content pattern, or '' for metadata-only searches
            options: Flattened search options

        Returns:
            LegacySearchResult, or a dict of the same shape
        """


def classify_accessor(accessor: Any) -> AccessorCapability:
    """Get the search capability of an accessor, preferring find over search."""
    if isinstance(accessor, UnifiedAccessor):
        return AccessorCapability.UNIFIED
    if isinstance(accessor, LegacyAccessor):
        return AccessorCapability.LEGACY
    return AccessorCapability.UNSUPPORTED


class Container:
    """
    A named searchable container.

    The accessor is either given directly or built on demand by a factory;
    a factory that raises makes only this container fail.

    Attributes:
        name: Container name, used to select it and to prefix its results
        provider_type: Kind of container (e.g. 'filesystem')
    """

    def __init__(
        self,
        name: str,
        accessor: Any = None,
        accessor_factory: Optional[Callable[[], Any]] = None,
        provider_type: str = "filesystem"
    ):
        if accessor is None and accessor_factory is None:
            raise ValueError(f"Container '{name}' needs an accessor or an accessor factory")

        self.name = name
        self.provider_type = provider_type
        self._accessor = accessor
        self._accessor_factory = accessor_factory

    def get_accessor(self) -> Any:
        """Get the accessor, building it on first use."""
        if self._accessor is None:
            self._accessor = self._accessor_factory()
        return self._accessor

    def __repr__(self) -> str:
        return f"Container(name={self.name!r}, provider_type={self.provider_type!r})"


class FilesystemAccessor(UnifiedAccessor):
    """
    Accessor for a local directory tree.

    Resources are visited in a stable sorted walk order. The continuation token is the
    number of matching resources already returned, so a follow-up call skips
    exactly that many matches and resumes.
    """

    def __init__(self, name: str, root: Union[str, Path], config: FinderConfig):
        """
        Initialize the filesystem accessor.

        Args:
            name: Container name (used in log messages)
            root: Root directory of the container
            config: Configuration providing ignore patterns and limits
        """
        self.name = name
        self.root = Path(root).expanduser().resolve()
        self.config = config
        self.walker = FSWalker(config)

    def find(self, params: FindParams) -> FindResult:
        """
        Find resources under the root matching names, metadata, and content.

        Args:
            params: Pattern, filters, and options including pagination

        Returns:
            FindResult with one page of matching resources

        Raises:
            ContainerOperationError: If the continuation token is invalid
            PatternInvalidError: If the content or resource pattern is invalid
            FileNotFoundError: If the root directory does not exist
        """
        options = params.options
        start_index = self._parse_page_token(options.page_token)

        matcher = None
        if params.pattern is not None:
            matcher = compile_pattern(params.pattern, params.is_regex, options.case_sensitive)

        if params.structured_query:
            logger.debug(f"{self.name}: structured queries are not supported for filesystem containers, ignoring")

        self.walker.reset_stats()
        resources: List[ResourceMatch] = []
        skipped = 0
        has_more = False

        candidates = self.walker.walk_container(self.root, params.resource_pattern, options.filters)
        for metadata in candidates:
            resource_match = self._match_resource(metadata, matcher, params)
            if resource_match is None:
                continue

            if skipped < start_index:
                skipped += 1
                continue

            if len(resources) >= options.page_size:
                has_more = True
                break

            resources.append(resource_match)

        stats = self.walker.get_stats()
        logger.info(
            f"{self.name}: found {len(resources)} resources "
            f"(scanned {stats['files_scanned']} files, ignored {stats['files_ignored']})"
        )

        return FindResult(
            resources=resources,
            pagination=Pagination(
                has_more=has_more,
                page_size=options.page_size,
                continuation_token=str(start_index + len(resources)) if has_more else None
            )
        )

    def _match_resource(
        self,
        metadata: ResourceMetadata,
        matcher: Optional[ContentMatcher],
        params: FindParams
    ) -> Optional[ResourceMatch]:
        """Check one candidate against the content pattern, if any."""
        if matcher is None:
            return ResourceMatch(resource_path=metadata.path)

        if metadata.is_binary:
            return None

        content = self._read_text(metadata.path)
        if content is None:
            return None

        options = params.options
        resource_match = match_resource_content(
            metadata.path,
            content,
            matcher,
            context_lines=options.context_lines,
            max_matches_per_resource=options.max_matches_per_resource
        )

        if resource_match is not None and options.result_level == ResultLevel.RESOURCE:
            return ResourceMatch(resource_path=metadata.path)

        return resource_match

    def _read_text(self, relative_path: str) -> Optional[str]:
        """Read a resource as text, or None if it cannot be read."""
        try:
            return (self.root / relative_path).read_text(encoding='utf-8', errors='replace')
        except OSError as e:
            logger.warning(f"{self.name}: error reading {relative_path}: {e}")
            return None

    def _parse_page_token(self, page_token: Optional[str]) -> int:
        """Decode a continuation token into the number of resources to skip."""
        if page_token is None:
            return 0
        try:
            start_index = int(page_token)
        except ValueError as e:
            raise ContainerOperationError(f"Invalid page token: {page_token}", self.name) from e
        if start_index < 0:
            raise ContainerOperationError(f"Invalid page token: {page_token}", self.name)
        return start_index

    def __repr__(self) -> str:
        return f"FilesystemAccessor(name={self.name!r}, root={str(self.root)!r})"
