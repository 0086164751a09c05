"""
Unit tests for configuration data models.

Tests ContainerConfig, LimitsConfig, SearchDefaults and FinderConfig
validation, defaults and helper methods.
"""

import os
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from resource_finder.models.config import (
    ContainerConfig, ContainerType, DEFAULT_IGNORE_PATTERNS, FinderConfig,
    LimitsConfig, SearchDefaults
)


class TestContainerConfig:
    """Test cases for ContainerConfig."""

    def test_defaults(self):
        container = ContainerConfig(name="local")

        assert container.type == ContainerType.FILESYSTEM
        assert container.root == "."
        assert container.primary is False

    def test_type_from_string(self):
        assert ContainerConfig(name="a", type="FileSystem").type == ContainerType.FILESYSTEM

        with pytest.raises(ValidationError):
            ContainerConfig(name="a", type="ftp")

    def test_name_validation(self):
        """Test blank and reserved names."""
        assert ContainerConfig(name="  docs ").name == "docs"

        with pytest.raises(ValidationError):
            ContainerConfig(name="   ")

        with pytest.raises(ValidationError):
            ContainerConfig(name="ALL")

    def test_get_root_path(self):
        container = ContainerConfig(name="home", root="~")

        assert container.get_root_path() == Path.home().resolve()

    def test_to_dict(self):
        data = ContainerConfig(name="local", root="/srv").to_dict()

        assert data == {'name': "local", 'type': "filesystem", 'root': "/srv", 'primary': False}


class TestLimitsConfig:
    """Test cases for LimitsConfig."""

    def test_defaults(self):
        limits = LimitsConfig()

        assert limits.max_files == 200000
        assert limits.max_bytes_per_file == 5000000
        assert limits.max_concurrent == 4
        assert limits.default_page_size == 100

    def test_validation(self):
        with pytest.raises(ValidationError):
            LimitsConfig(max_files=0)

        with pytest.raises(ValidationError):
            LimitsConfig(max_concurrent=-1)

        with pytest.raises(ValidationError):
            LimitsConfig(default_page_size=5000)

    def test_human_readable(self):
        limits = LimitsConfig(max_bytes_per_file=1048576)

        assert limits.get_max_size_human_readable() == "1.0 MB"
        assert limits.to_dict()['max_size_human'] == "1.0 MB"


class TestSearchDefaults:
    """Test cases for SearchDefaults."""

    def test_validation(self):
        with pytest.raises(ValidationError):
            SearchDefaults(context_lines=30)

        with pytest.raises(ValidationError):
            SearchDefaults(max_matches_per_resource=0)

    def test_apply_fills_unset(self):
        """Test that defaults fill only unset options."""
        defaults = SearchDefaults(context_lines=4, case_sensitive=True)

        merged = defaults.apply({'pattern': 'x', 'context_lines': None, 'caseSensitive': False})

        assert merged['context_lines'] == 4
        assert merged['max_matches_per_resource'] == 5
        assert merged['caseSensitive'] is False
        assert 'case_sensitive' not in merged

    def test_apply_drops_null_camel_keys(self):
        merged = SearchDefaults().apply({'contextLines': None})

        assert 'contextLines' not in merged
        assert merged['context_lines'] == 2

    def test_apply_does_not_mutate(self):
        request_data = {'pattern': 'x'}
        SearchDefaults().apply(request_data)

        assert request_data == {'pattern': 'x'}


class TestFinderConfig:
    """Test cases for FinderConfig."""

    def test_minimal(self):
        config = FinderConfig(containers=[ContainerConfig(name="local")])

        assert config.ignore == DEFAULT_IGNORE_PATTERNS
        assert config.limits == LimitsConfig()
        assert config.search == SearchDefaults()

    def test_containers_required(self):
        with pytest.raises(ValidationError):
            FinderConfig(containers=[])

        with pytest.raises(ValidationError):
            FinderConfig()

    def test_duplicate_names(self):
        with pytest.raises(ValidationError, match="Duplicate container name"):
            FinderConfig.from_dict({'containers': [{'name': 'a'}, {'name': 'a'}]})

    def test_single_primary(self):
        with pytest.raises(ValidationError, match="Only one container can be primary"):
            FinderConfig.from_dict({
                'containers': [{'name': 'a', 'primary': True}, {'name': 'b', 'primary': True}]
            })

    def test_primary_container(self):
        config = FinderConfig.from_dict({'containers': [{'name': 'a'}, {'name': 'b', 'primary': True}]})
        assert config.get_primary_container().name == 'b'

        config = FinderConfig.from_dict({'containers': [{'name': 'a'}, {'name': 'b'}]})
        assert config.get_primary_container().name == 'a'

    def test_get_container(self):
        config = FinderConfig.from_dict({'containers': [{'name': 'a'}, {'name': 'b'}]})

        assert config.get_container('b').name == 'b'
        assert config.get_container('c') is None

    def test_apply_request_defaults(self):
        """Test request defaults from search settings and limits."""
        config = FinderConfig.from_dict({
            'containers': [{'name': 'a'}],
            'search': {'max_matches_per_resource': 10},
            'limits': {'default_page_size': 25}
        })

        merged = config.apply_request_defaults({'pattern': 'x'})
        assert merged['max_matches_per_resource'] == 10
        assert merged['page_size'] == 25

        explicit = config.apply_request_defaults({'pageSize': 7})
        assert explicit['pageSize'] == 7
        assert 'page_size' not in explicit

    def test_validate_configuration(self):
        """Test non-fatal warnings for roots and limits."""
        with tempfile.TemporaryDirectory() as temp_dir:
            file_root = Path(temp_dir) / "file.txt"
            file_root.write_text("x")

            config = FinderConfig.from_dict({
                'containers': [
                    {'name': 'ok', 'root': temp_dir},
                    {'name': 'missing', 'root': os.path.join(temp_dir, 'missing')},
                    {'name': 'file', 'root': str(file_root)},
                ],
                'limits': {'max_files': 2000000, 'max_bytes_per_file': 60000000}
            })

            warnings = config.validate_configuration()

        assert len(warnings) == 4
        assert any("'missing' does not exist" in w for w in warnings)
        assert any("'file' is not a directory" in w for w in warnings)
        assert any("max_files" in w for w in warnings)
        assert any("max_bytes_per_file" in w for w in warnings)

    def test_to_dict_round_trip(self):
        config = FinderConfig.from_dict({
            'containers': [{'name': 'a', 'root': '/srv/a', 'primary': True}],
            'ignore': ['*.tmp'],
            'search': {'case_sensitive': True}
        })

        data = config.to_dict()
        data['limits'].pop('max_size_human')

        assert data['containers'][0]['type'] == 'filesystem'
        assert FinderConfig.from_dict(data).to_dict()['search'] == config.to_dict()['search']

    def test_str(self):
        config = FinderConfig.from_dict({'containers': [{'name': 'a'}, {'name': 'b', 'primary': True}]})
        text = str(config)

        assert "Containers: 2" in text
        assert "Primary: b" in text
        assert f"Ignore patterns: {len(DEFAULT_IGNORE_PATTERNS)}" in text
