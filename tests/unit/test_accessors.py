"""
Unit tests for container accessors.

Tests capability classification, lazy accessor construction, and the
filesystem accessor's find operation including pagination.
"""

import os
import shutil
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from resource_finder.errors import ContainerOperationError, PatternInvalidError
from resource_finder.models.config import ContainerConfig, FinderConfig
from resource_finder.models.search_request import SearchRequest
from resource_finder.models.search_results import FindResult, LegacySearchResult
from resource_finder.tools.accessors import (
    AccessorCapability, Container, FilesystemAccessor, LegacyAccessor,
    UnifiedAccessor, classify_accessor
)


class StubUnified(UnifiedAccessor):
    def find(self, params):
        return FindResult()


class StubLegacy(LegacyAccessor):
    def search(self, query, options):
        return LegacySearchResult()


class StubBoth(UnifiedAccessor, LegacyAccessor):
    def find(self, params):
        return FindResult()

    def search(self, query, options):
        return LegacySearchResult()


class TestClassifyAccessor:
    """Test cases for accessor capability classification."""

    def test_unified(self):
        assert classify_accessor(StubUnified()) == AccessorCapability.UNIFIED

    def test_legacy(self):
        assert classify_accessor(StubLegacy()) == AccessorCapability.LEGACY

    def test_unified_preferred(self):
        """Test that find wins when both operations exist."""
        assert classify_accessor(StubBoth()) == AccessorCapability.UNIFIED

    def test_unsupported(self):
        assert classify_accessor(object()) == AccessorCapability.UNSUPPORTED


class TestContainer:
    """Test cases for the Container handle."""

    def test_direct_accessor(self):
        accessor = StubUnified()
        container = Container("remote", accessor=accessor, provider_type="notion")

        assert container.get_accessor() is accessor
        assert container.provider_type == "notion"

    def test_factory_called_once(self):
        """Test that the accessor factory runs on first use only."""
        factory = MagicMock(return_value=StubLegacy())
        container = Container("remote", accessor_factory=factory)

        factory.assert_not_called()
        first = container.get_accessor()
        second = container.get_accessor()

        assert first is second
        factory.assert_called_once()

    def test_missing_accessor(self):
        with pytest.raises(ValueError):
            Container("empty")


class TestFilesystemAccessor:
    """Test cases for FilesystemAccessor."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)

        files = {
            "a.py": "import os\n\n# TODO: one\nx = 1\n",
            "b.py": "print('no match')\n",
            "docs/c.md": "# Title\nTODO two\nmore\n",
            "docs/d.md": "todo three\n",
            "logo.png": "not really an image",
        }
        for relative_path, content in files.items():
            full_path = self.test_root / relative_path
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(content)

        (self.test_root / "blob.dat").write_bytes(b'TODO\x00\x01')

        self.config = FinderConfig(containers=[ContainerConfig(name="local", root=str(self.test_root))])
        self.accessor = FilesystemAccessor("local", self.test_root, self.config)

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _find(self, **request_fields):
        return self.accessor.find(SearchRequest(**request_fields).to_find_params())

    def test_metadata_only(self):
        """Test a search without a content pattern."""
        result = self._find(resource_pattern="*.md")

        assert [r.resource_path for r in result.resources] == ["docs/c.md", "docs/d.md"]
        assert all(not r.has_content_matches() for r in result.resources)
        assert not result.pagination.has_more

    def test_content_search(self):
        """Test a case-insensitive content search."""
        result = self._find(pattern="todo")
        paths = [r.resource_path for r in result.resources]

        assert paths == ["a.py", "docs/c.md", "docs/d.md"]

        first = result.resources[0].content_matches[0]
        assert first.line_number == 3
        assert first.content == "# TODO: one"
        assert first.context_before == ["import os", ""]
        assert first.context_after == ["x = 1"]
        assert first.get_matched_text() == "TODO"

    def test_binary_resources_skipped(self):
        """Test that binary resources are never content-searched."""
        paths = [r.resource_path for r in self._find(pattern="TODO").resources]

        assert "blob.dat" not in paths
        assert "logo.png" not in paths

    def test_case_sensitive(self):
        """Test case-sensitive content search."""
        result = self._find(pattern="TODO", case_sensitive=True)

        assert [r.resource_path for r in result.resources] == ["a.py", "docs/c.md"]

    def test_literal_search(self):
        """Test literal pattern search with metacharacters."""
        result = self._find(pattern="print('no", is_regex=False)

        assert [r.resource_path for r in result.resources] == ["b.py"]

    def test_invalid_pattern(self):
        """Test that invalid patterns raise PatternInvalidError."""
        with pytest.raises(PatternInvalidError):
            self._find(pattern="(unclosed")

    def test_resource_level_strips_matches(self):
        """Test that resource-level results carry no content matches."""
        result = self._find(pattern="todo", result_level="resource")

        assert len(result.resources) == 3
        assert all(not r.has_content_matches() for r in result.resources)

    def test_structured_query_ignored(self):
        """Test that structured queries do not affect filesystem searches."""
        result = self._find(resource_pattern="*.md", structured_query={'filter': 'x'})

        assert len(result.resources) == 2

    def test_pagination(self):
        """Test that continuation tokens resume where the previous page stopped."""
        first = self._find(pattern="todo", page_size=2)

        assert [r.resource_path for r in first.resources] == ["a.py", "docs/c.md"]
        assert first.pagination.has_more
        assert first.pagination.page_size == 2
        assert first.pagination.continuation_token == "2"

        second = self._find(pattern="todo", page_size=2, page_token=first.pagination.continuation_token)

        assert [r.resource_path for r in second.resources] == ["docs/d.md"]
        assert not second.pagination.has_more
        assert second.pagination.continuation_token is None

    def test_exact_page(self):
        """Test that a full last page reports no more results."""
        result = self._find(pattern="todo", page_size=3)

        assert len(result.resources) == 3
        assert not result.pagination.has_more

    def test_invalid_page_token(self):
        """Test that malformed continuation tokens are rejected."""
        with pytest.raises(ContainerOperationError):
            self._find(page_token="abc")

        with pytest.raises(ContainerOperationError):
            self._find(page_token="-1")

    def test_missing_root(self):
        """Test searching a root that does not exist."""
        accessor = FilesystemAccessor("gone", self.test_root / "missing", self.config)

        with pytest.raises(FileNotFoundError):
            accessor.find(SearchRequest().to_find_params())
