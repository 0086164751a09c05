"""
Error taxonomy for resource searches.

Only PatternInvalidError and DataSourceNotFoundError ever escape a search
request. Capability and container failures are recorded against the
container that produced them and reported alongside the other results.
"""

from typing import List, Optional


class FinderError(Exception):
    """Base class for all resource finder errors."""
    pass


class PatternInvalidError(FinderError):
    """Raised when a content pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid search pattern '{pattern}': {reason}")


class CapabilityMissingError(FinderError):
    """Raised when a container accessor supports neither find nor search."""

    def __init__(self, container_name: str):
        self.container_name = container_name
        super().__init__(f"No find or search operation available for {container_name}")


class ContainerOperationError(FinderError):
    """Raised when a container accessor fails while searching."""

    def __init__(self, message: str, container_name: Optional[str] = None):
        self.container_name = container_name
        super().__init__(message)


class DataSourceNotFoundError(FinderError):
    """Raised when none of the requested containers can be resolved."""

    def __init__(self, requested_ids: Optional[List[str]] = None):
        self.requested_ids = list(requested_ids or [])
        if self.requested_ids:
            message = f"No valid data sources found for: [{', '.join(self.requested_ids)}]"
        else:
            message = "No valid data sources found"
        super().__init__(message)
