"""
YAML configuration loading for the Resource Finder.

A configuration file declares the searchable containers together with ignore
rules, limits and request defaults. Files are looked up in the working
directory, the home directory and ``~/.config/resource-finder``; when none
exists a single filesystem container rooted at the working directory is used.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import yaml
from pydantic import ValidationError

from ..models.config import DEFAULT_IGNORE_PATTERNS, FinderConfig, LimitsConfig, SearchDefaults


CONFIG_FILE_NAMES = [
    '.resourcefinder.yaml',
    '.resourcefinder.yml',
    'resourcefinder.yaml',
    'resourcefinder.yml'
]

MAX_RECOMMENDED_CONTAINERS = 10

SECTION_COMMENTS = [
    ('containers', "Containers to search; the one marked primary (else the first) is searched by default"),
    ('ignore', "Paths never reported, gitignore syntax, '!' re-includes"),
    ('limits', "Walk limits and parallelism"),
    ('search', "Values used when a request leaves an option unset"),
]


@dataclass
class ConfigParseResult:
    """
    Outcome of loading a configuration.

    Attributes:
        config: Validated configuration
        warnings: Problems that did not prevent loading
        config_path: File the configuration came from, None for built-in defaults
        is_default: Whether no file was found
    """
    config: FinderConfig
    warnings: List[str] = field(default_factory=list)
    config_path: Optional[Path] = None
    is_default: bool = False


class ConfigurationError(Exception):
    """Raised when a configuration cannot be read, parsed or validated."""
    pass


def search_locations() -> Iterator[Path]:
    """Yield candidate configuration files in lookup order."""
    for directory in (Path.cwd(), Path.home(), Path.home() / '.config' / 'resource-finder'):
        for name in CONFIG_FILE_NAMES:
            yield directory / name


def default_config_data(root: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the configuration used when no file declares containers.

    Args:
        root: Root of the primary container (default: working directory)
    """
    return {
        'containers': [
            {'name': 'primary', 'type': 'filesystem', 'root': root or str(Path.cwd()), 'primary': True}
        ],
        'ignore': list(DEFAULT_IGNORE_PATTERNS),
        'limits': LimitsConfig().model_dump(),
        'search': SearchDefaults().model_dump(),
    }


class ConfigParser:
    """
    Loads, validates and writes Resource Finder configuration files.

    In strict mode any warning (missing container roots, excessive limits,
    no ignore rules, ...) fails the load.
    """

    DEFAULT_CONFIG_NAMES = CONFIG_FILE_NAMES

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Load the configuration from a file, a discovered file, or defaults.

        Args:
            config_path: Explicit configuration file; discovered when None

        Returns:
            ConfigParseResult with the validated configuration and warnings

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        if config_path is not None:
            config_path = Path(config_path)
            if not config_path.exists():
                raise ConfigurationError(f"Configuration file not found: {config_path}")
            raw = self.read_yaml(config_path)
        else:
            config_path = self.discover_config_file()
            raw = self.read_yaml(config_path) if config_path else None

        is_default = raw is None
        config = self.build_config(raw or {})

        warnings = config.validate_configuration() + self.collect_warnings(config, is_default)
        for warning in warnings:
            self.logger.warning(warning)

        if self.strict_mode and warnings:
            raise ConfigurationError(f"Configuration warnings in strict mode: {'; '.join(warnings)}")

        self.logger.info(f"Loaded configuration from {config_path or 'built-in defaults'}: {config}")
        return ConfigParseResult(config=config, warnings=warnings, config_path=config_path, is_default=is_default)

    def discover_config_file(self) -> Optional[Path]:
        """
        Find the first readable configuration file in the lookup locations.

        Returns:
            Path of the file, or None if there is none
        """
        for candidate in search_locations():
            if candidate.is_file():
                self.logger.debug(f"Using configuration file {candidate}")
                return candidate

        self.logger.info("No configuration file found, using defaults")
        return None

    def read_yaml(self, file_path: Path) -> Dict[str, Any]:
        """
        Read a YAML mapping from a file.

        Empty files read as an empty mapping.

        Raises:
            ConfigurationError: If the file cannot be read or is not a YAML mapping
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

        if data is None:
            self.logger.warning(f"Configuration file is empty: {file_path}")
            return {}

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a YAML object, got {type(data).__name__}"
            )

        return data

    def build_config(self, raw: Dict[str, Any]) -> FinderConfig:
        """
        Validate raw configuration data.

        Sections other than ``containers`` are kept when containers are left
        out; the default primary container is added in that case.

        Raises:
            ConfigurationError: If the data does not validate
        """
        data = dict(raw)
        if not data.get('containers'):
            data['containers'] = default_config_data()['containers']

        return self.validate_data(data)

    def validate_data(self, data: Dict[str, Any]) -> FinderConfig:
        """Validate configuration data as given, without filling in containers."""
        try:
            return FinderConfig.from_dict(data)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e
        except ValueError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

    def collect_warnings(self, config: FinderConfig, is_default: bool) -> List[str]:
        """Warnings about how the configuration was obtained and its scope."""
        warnings = []

        if is_default:
            warnings.append("No configuration file found, using default settings")

        if len(config.containers) > MAX_RECOMMENDED_CONTAINERS:
            warnings.append(
                f"{len(config.containers)} containers configured, searching all of them may be slow"
            )

        if not config.ignore:
            warnings.append("No ignore patterns configured, version control directories will be searched")

        return warnings

    def save_config(self, config: FinderConfig, output_path: Union[str, Path]) -> None:
        """
        Write a configuration as commented YAML.

        Raises:
            ConfigurationError: If the file cannot be written
        """
        output_path = Path(output_path)
        data = config.to_dict()
        data['limits'].pop('max_size_human', None)

        self._write(output_path, self.render_yaml(data), "Cannot write configuration file")
        self.logger.info(f"Configuration saved to {output_path}")

    def render_yaml(self, data: Dict[str, Any]) -> str:
        """
        Render configuration data as YAML, one commented block per section.

        Sections are written in a fixed order; absent sections are skipped.
        """
        blocks = ["# Resource Finder configuration"]

        for section, comment in SECTION_COMMENTS:
            if section not in data:
                continue
            body = yaml.safe_dump({section: data[section]}, default_flow_style=False, sort_keys=False)
            blocks.append(f"# {comment}\n{body.rstrip()}")

        return "\n\n".join(blocks) + "\n"

    def validate_config_file(self, config_path: Union[str, Path]) -> List[str]:
        """
        Check a configuration file without loading it.

        Returns:
            Error messages, empty if the file is valid
        """
        config_path = Path(config_path)
        if not config_path.exists():
            return [f"Configuration file not found: {config_path}"]

        try:
            self.validate_data(self.read_yaml(config_path))
        except ConfigurationError as e:
            return [str(e)]

        return []

    def get_config_template(self) -> str:
        """Get a commented example configuration with two containers."""
        data = default_config_data(root='.')
        data['containers'].append(
            {'name': 'docs', 'type': 'filesystem', 'root': '~/Documents', 'primary': False}
        )
        return self.render_yaml(data)

    @staticmethod
    def _write(output_path: Path, content: str, failure: str) -> None:
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            raise ConfigurationError(f"{failure} {output_path}: {e}") from e


def load_config(config_path: Optional[Union[str, Path]] = None, strict_mode: bool = False) -> ConfigParseResult:
    """
    Load the Resource Finder configuration.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    return ConfigParser(strict_mode=strict_mode).load_config(config_path)


def validate_config_file(config_path: Union[str, Path]) -> List[str]:
    """Check a configuration file, returning error messages (empty if valid)."""
    return ConfigParser().validate_config_file(config_path)


def create_config_template(output_path: Union[str, Path]) -> None:
    """
    Write an example configuration file.

    Raises:
        ConfigurationError: If the file cannot be written
    """
    output_path = Path(output_path)
    ConfigParser._write(output_path, ConfigParser().get_config_template(), "Cannot create template file")
