"""
Container registry for the Resource Finder.

Maps the container identifiers of a request to searchable containers. Filesystem
containers come from configuration; containers backed by other providers are
registered at runtime with their own accessors.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..models.config import ContainerType, FinderConfig
from ..models.search_request import ALL_CONTAINERS
from .accessors import Container, FilesystemAccessor


logger = logging.getLogger(__name__)


class ContainerRegistry:
    """
    Ordered collection of named containers.

    Registration order is the order results are reported in when several
    containers are searched.
    """

    def __init__(self, config: Optional[FinderConfig] = None):
        self.config = config
        self._containers: List[Container] = []
        self._primary_name: Optional[str] = None

    @classmethod
    def from_config(cls, config: FinderConfig) -> 'ContainerRegistry':
        """
        Build a registry holding every container declared in configuration.

        Args:
            config: Configuration declaring the containers

        Returns:
            Registry with one container per configured entry
        """
        registry = cls(config)

        for container_config in config.containers:
            if container_config.type == ContainerType.FILESYSTEM:
                registry.register(
                    Container(
                        container_config.name,
                        accessor_factory=cls._filesystem_factory(
                            container_config.name, container_config.root, config
                        ),
                        provider_type=container_config.type.value
                    ),
                    primary=container_config.primary
                )

        return registry

    @staticmethod
    def _filesystem_factory(name: str, root: str, config: FinderConfig):
        def build() -> FilesystemAccessor:
            return FilesystemAccessor(name, root, config)
        return build

    def register(self, container: Container, primary: bool = False) -> None:
        """
        Add a container.

        Args:
            container: Container to add
            primary: Make this the container searched when none is requested

        Raises:
            ValueError: If the name is taken or reserved
        """
        if container.name.lower() == ALL_CONTAINERS:
            raise ValueError(f"'{ALL_CONTAINERS}' is reserved and cannot be a container name")
        if self.get(container.name) is not None:
            raise ValueError(f"Container already registered: {container.name}")

        self._containers.append(container)
        if primary:
            self._primary_name = container.name

        logger.debug(f"Registered container {container.name} ({container.provider_type})")

    def get(self, name: str) -> Optional[Container]:
        """Get a container by name."""
        for container in self._containers:
            if container.name == name:
                return container
        return None

    def get_primary(self) -> Optional[Container]:
        """Get the container searched when none is requested."""
        if self._primary_name is not None:
            return self.get(self._primary_name)
        return self._containers[0] if self._containers else None

    def list_names(self) -> List[str]:
        """Get the names of all containers in registration order."""
        return [container.name for container in self._containers]

    def resolve(self, container_ids: Sequence[str]) -> Tuple[List[Container], List[str]]:
        """
        Resolve requested identifiers to containers.

        An empty list selects the primary container, and "all" selects every
        container. Unknown identifiers are returned separately rather than
        raising, so the request can proceed with the containers that exist.

        Args:
            container_ids: Requested container names

        Returns:
            Tuple of (containers in request order, identifiers not found)
        """
        if not container_ids:
            primary = self.get_primary()
            return ([primary] if primary else []), []

        if any(ds_id.lower() == ALL_CONTAINERS for ds_id in container_ids):
            return list(self._containers), []

        containers: List[Container] = []
        not_found: List[str] = []

        for ds_id in container_ids:
            container = self.get(ds_id)
            if container is None:
                if ds_id not in not_found:
                    not_found.append(ds_id)
            elif container not in containers:
                containers.append(container)

        if not_found:
            logger.warning(f"Could not find data source for: [{', '.join(not_found)}]")

        return containers, not_found

    def __len__(self) -> int:
        return len(self._containers)
