"""
Filesystem walker for the Resource Finder.

This module traverses one filesystem container, matches resource names against
the request's glob filter, extracts metadata and applies the date and size
filters. It respects ignore patterns and walks in sorted order so that
pagination over its output is stable between calls.
"""

import os
import logging
import mimetypes
from pathlib import Path
from datetime import datetime, time
from typing import Dict, Optional, Iterator, Union

from ..models.config import FinderConfig
from ..models.search_request import MetadataFilters
from ..models.search_results import ResourceMetadata
from .glob_patterns import compile_resource_patterns, matches_any


logger = logging.getLogger(__name__)


class FSWalker:
    """
    Filesystem walker that enumerates candidate resources of one container.

    This class provides directory traversal with support for:
    - Ignore pattern matching (gitignore-style)
    - Glob filters on resource names with '|' alternatives
    - Metadata extraction and date/size filtering
    - File count and file size limits
    """

    def __init__(self, config: FinderConfig):
        """
        Initialize the filesystem walker.

        Args:
            config: Configuration object containing ignore patterns and limits
        """
        self.config = config
        self._stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'files_scanned': 0,
            'files_matched': 0,
            'directories_traversed': 0,
            'files_ignored': 0,
            'files_too_large': 0,
            'errors': 0
        }

    def walk_container(
        self,
        root: Union[str, Path],
        resource_pattern: Optional[str] = None,
        filters: Optional[MetadataFilters] = None
    ) -> Iterator[ResourceMetadata]:
        """
        Walk a container root and yield resources passing all filters.

        Args:
            root: Root directory of the container
            resource_pattern: Glob filter on relative paths, '|' separates alternatives
            filters: Date and size constraints

        Yields:
            ResourceMetadata for each matching file, in sorted path order

        Raises:
            FileNotFoundError: If the root does not exist
            NotADirectoryError: If the root is not a directory
            PatternInvalidError: If the resource pattern cannot be compiled
        """
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Root directory does not exist: {root_path}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Root path is not a directory: {root_path}")

        compiled_patterns = compile_resource_patterns(resource_pattern) if resource_pattern else []

        logger.info(f"Walking directory tree: {root_path}")

        for current_dir, subdirs, files in os.walk(root_path):
            current_path = Path(current_dir)
            self._stats['directories_traversed'] += 1

            # Prune ignored subdirectories and keep traversal order stable
            subdirs[:] = sorted(
                d for d in subdirs
                if not self.config.should_ignore(self._relative(root_path, current_path / d) + '/')
            )

            for filename in sorted(files):
                file_path = current_path / filename
                relative_path = self._relative(root_path, file_path)

                if self.config.should_ignore(relative_path):
                    self._stats['files_ignored'] += 1
                    continue

                if self._stats['files_scanned'] >= self.config.limits.max_files:
                    logger.warning(f"Reached maximum file limit: {self.config.limits.max_files}")
                    return

                self._stats['files_scanned'] += 1

                if not matches_any(relative_path, compiled_patterns):
                    continue

                metadata = self._extract_metadata(file_path, relative_path)
                if metadata is None:
                    continue

                if metadata.size > self.config.limits.max_bytes_per_file:
                    logger.debug(f"Skipping large file: {relative_path} ({metadata.size} bytes)")
                    self._stats['files_too_large'] += 1
                    continue

                if not self.passes_filters(metadata, filters):
                    continue

                self._stats['files_matched'] += 1
                yield metadata

    @staticmethod
    def _relative(root_path: Path, path: Path) -> str:
        """Get a POSIX-style path relative to the container root."""
        return path.relative_to(root_path).as_posix()

    def _extract_metadata(self, file_path: Path, relative_path: str) -> Optional[ResourceMetadata]:
        """
        Extract metadata from a file.

        Args:
            file_path: Absolute path of the file
            relative_path: Path relative to the container root

        Returns:
            ResourceMetadata object or None if extraction fails
        """
        try:
            stat_result = file_path.stat()
            mime_type, _ = mimetypes.guess_type(str(file_path))

            return ResourceMetadata(
                path=relative_path,
                size=stat_result.st_size,
                modified_time=datetime.fromtimestamp(stat_result.st_mtime),
                extension=file_path.suffix.lower() if file_path.suffix else None,
                mime_type=mime_type,
                is_binary=self._is_binary_file(file_path, mime_type)
            )

        except OSError as e:
            logger.warning(f"Error extracting metadata from {file_path}: {e}")
            self._stats['errors'] += 1
            return None

    def _is_binary_file(self, file_path: Path, mime_type: Optional[str] = None) -> bool:
        """
        Check if a file appears to be binary.

        Args:
            file_path: Path to check
            mime_type: Guessed MIME type, if any

        Returns:
            True if the file appears to be binary
        """
        if mime_type and mime_type.split('/')[0] in ('image', 'audio', 'video'):
            return True

        try:
            with open(file_path, 'rb') as f:
                chunk = f.read(1024)
        except OSError:
            # Unreadable files are never read as text
            return True

        if b'\x00' in chunk:
            return True

        if chunk:
            try:
                chunk.decode('utf-8')
                return False
            except UnicodeDecodeError as e:
                # A multi-byte character cut off at the end of the sample
                if e.start >= len(chunk) - 3:
                    return False
            printable_chars = sum(1 for byte in chunk if 32 <= byte <= 126 or byte in (9, 10, 13))
            return printable_chars / len(chunk) < 0.7

        return False

    def passes_filters(self, metadata: ResourceMetadata, filters: Optional[MetadataFilters]) -> bool:
        """
        Check if a resource passes the date and size filters.

        Args:
            metadata: Metadata of the resource
            filters: Date and size constraints (None passes everything)

        Returns:
            True if the resource passes all filters
        """
        if filters is None:
            return True

        if filters.size_min is not None and metadata.size < filters.size_min:
            return False

        if filters.size_max is not None and metadata.size > filters.size_max:
            return False

        if filters.date_after is not None:
            if metadata.modified_time < datetime.combine(filters.date_after, time.min):
                return False

        if filters.date_before is not None:
            if metadata.modified_time > datetime.combine(filters.date_before, time.min):
                return False

        return True

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the walking operation.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = self._empty_stats()

