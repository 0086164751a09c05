"""
Multi-source aggregation for the Resource Finder.

Runs one search request against every selected container and merges the
per-container outcomes into a single result. A failing container never
aborts the request: its error is recorded and the remaining containers are
still searched. Only an invalid pattern or an empty container selection
fails the whole request.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError

from ..errors import CapabilityMissingError, DataSourceNotFoundError
from ..models.search_request import SearchRequest
from ..models.search_results import (
    AggregatedResult, ContainerOutcome, FindResult, LegacySearchResult, Pagination, ResourceMatch
)
from .accessors import AccessorCapability, Container, classify_accessor
from .pattern_compiler import compile_pattern
from .registry import ContainerRegistry
from .result_shaper import build_search_criteria


logger = logging.getLogger(__name__)


def prefix_path(container_name: str, path: str) -> str:
    """Qualify a resource path with the name of its container."""
    return f"[{container_name}] {path}"


def format_container_error(container_name: str, message: str) -> str:
    """Attribute an error message to the container that produced it."""
    return f"[{container_name}]: {message}"


def path_from_uri(uri: str) -> str:
    """
    Get a container-relative path from a resource URI.

    Plain paths are returned unchanged.
    """
    if uri.startswith('file:./'):
        return uri[len('file:./'):]
    if '://' in uri:
        return uri.split('://', 1)[1] or uri
    return uri


class MultiSourceAggregator:
    """
    Searches a list of containers and merges what they return.

    With ``max_workers`` greater than one, containers are searched on a thread
    pool; outcomes are slotted back by container position so the merged result
    is identical to a sequential run.
    """

    def __init__(self, max_workers: int = 1):
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.max_workers = max_workers

    def aggregate(
        self,
        request: SearchRequest,
        containers: Sequence[Container],
        not_found: Sequence[str] = ()
    ) -> AggregatedResult:
        """
        Search every container and merge the outcomes.

        Args:
            request: The search request
            containers: Containers to search, in reporting order
            not_found: Requested identifiers that resolved to no container

        Returns:
            AggregatedResult with prefixed paths, matches, errors and pagination

        Raises:
            DataSourceNotFoundError: If there is no container to search
            PatternInvalidError: If the content pattern cannot be compiled
        """
        if not containers:
            raise DataSourceNotFoundError(list(request.data_source_ids))

        if request.has_pattern():
            compile_pattern(request.pattern, request.is_regex, request.case_sensitive)

        logger.info(f"Searching {len(containers)} containers: {request}")

        outcomes = self._search_all(request, containers)
        result = self._merge(outcomes, not_found)
        result.search_criteria = build_search_criteria(request)

        logger.info(
            f"Search complete: {result.get_resource_count()} resources from "
            f"{len(result.containers_searched)} of {len(containers)} containers"
        )
        return result

    def _search_all(self, request: SearchRequest, containers: Sequence[Container]) -> List[ContainerOutcome]:
        """Search the containers sequentially or on a thread pool."""
        if self.max_workers == 1 or len(containers) == 1:
            return [self._search_container(request, container) for container in containers]

        outcomes: List[Optional[ContainerOutcome]] = [None] * len(containers)
        workers = min(self.max_workers, len(containers))

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._search_container, request, container): index
                for index, container in enumerate(containers)
            }
            for future in as_completed(futures):
                outcomes[futures[future]] = future.result()

        return outcomes

    def _search_container(self, request: SearchRequest, container: Container) -> ContainerOutcome:
        """
        Search one container, capturing any failure as its outcome.

        Args:
            request: The search request
            container: Container to search

        Returns:
            ContainerOutcome for this container
        """
        logger.debug(f"Searching container {container.name}")

        try:
            accessor = container.get_accessor()
            capability = classify_accessor(accessor)

            if capability == AccessorCapability.UNIFIED:
                raw = accessor.find(request.to_find_params())
                found = raw if isinstance(raw, FindResult) else FindResult.model_validate(raw)
                return self._build_outcome(
                    container.name, request, found.resources, found.error_message, found.pagination
                )

            if capability == AccessorCapability.LEGACY:
                raw = accessor.search(request.pattern or '', request.to_legacy_options())
                searched = raw if isinstance(raw, LegacySearchResult) else LegacySearchResult.model_validate(raw)
                return self._build_outcome(
                    container.name, request, searched.matches, searched.error_message, None
                )

            raise CapabilityMissingError(container.name)

        except ValidationError as e:
            logger.error(f"Container {container.name} returned a malformed result: {e}")
            return ContainerOutcome.failure(
                container.name,
                format_container_error(container.name, f"Malformed result: {e.error_count()} validation errors")
            )

        except Exception as e:
            logger.error(f"Container {container.name} failed: {e}")
            return ContainerOutcome.failure(
                container.name, format_container_error(container.name, str(e) or e.__class__.__name__)
            )

    def _build_outcome(
        self,
        container_name: str,
        request: SearchRequest,
        resource_matches: List[ResourceMatch],
        error_message: Optional[str],
        pagination: Optional[Pagination]
    ) -> ContainerOutcome:
        """Prefix and cap what one container returned."""
        resources: List[str] = []
        matches: List[ResourceMatch] = []

        for resource_match in resource_matches:
            prefixed = prefix_path(container_name, path_from_uri(resource_match.resource_path))
            resources.append(prefixed)

            if request.has_pattern() and resource_match.has_content_matches():
                matches.append(ResourceMatch(
                    resource_path=prefixed,
                    content_matches=resource_match.content_matches[:request.max_matches_per_resource]
                ))

        error = None
        if error_message:
            error = format_container_error(container_name, error_message)
            logger.warning(f"Container {container_name} reported an error: {error_message}")

        return ContainerOutcome(
            container_name=container_name,
            resources=resources,
            matches=matches,
            error=error,
            pagination=pagination
        )

    @staticmethod
    def _merge(outcomes: Sequence[ContainerOutcome], not_found: Sequence[str]) -> AggregatedResult:
        """Concatenate outcomes in container order."""
        result = AggregatedResult(not_found=list(not_found))
        errors: List[str] = []

        for outcome in outcomes:
            if outcome.error:
                errors.append(outcome.error)
            if not outcome.succeeded:
                continue

            result.resources.extend(outcome.resources)
            result.matches.extend(outcome.matches)
            result.containers_searched.append(outcome.container_name)

            if result.pagination is None and outcome.pagination is not None and outcome.pagination.has_more:
                result.pagination = outcome.pagination

        result.error_message = '\n'.join(errors) if errors else None
        return result


def find_resources(
    request: Union[SearchRequest, Dict[str, Any]],
    registry: ContainerRegistry,
    max_workers: Optional[int] = None
) -> AggregatedResult:
    """
    Resolve the request's containers and run the search.

    Args:
        request: Search request, or a dict in request shape (unset options take configured defaults)
        registry: Registry holding the available containers
        max_workers: Containers searched concurrently (default: limits.max_concurrent)

    Returns:
        AggregatedResult of the search

    Raises:
        DataSourceNotFoundError: If no requested container exists
        PatternInvalidError: If the content pattern cannot be compiled
    """
    if not isinstance(request, SearchRequest):
        if registry.config is not None:
            request = registry.config.apply_request_defaults(request)
        request = SearchRequest.from_dict(request)

    if max_workers is None:
        max_workers = registry.config.limits.max_concurrent if registry.config else 1

    containers, not_found = registry.resolve(request.data_source_ids)
    if not containers:
        raise DataSourceNotFoundError(not_found or list(request.data_source_ids))

    aggregator = MultiSourceAggregator(max_workers=max_workers)
    return aggregator.aggregate(request, containers, not_found)
