"""Configuration file discovery and parsing.

The loader looks for ``<base_name><suffix>`` in a list of directories and
parses the first file it can read. YAML and JSON files are read with PyYAML
(JSON being a subset of YAML), TOML files with :mod:`tomllib`. When no file
is found, callers fall back to the configuration shipped with the package.
"""

import os
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

import yaml

from .config import Config
from .errors import ConfigError, ConfigNotFoundError
from .logging import get_logger

logger = get_logger(__name__, None, "config_loader")

APPLICATION_NAME = "clipboard-cleaner"
CONFIG_ENV_VAR = "CLIPBOARD_CLEANER_CONFIG"
DEFAULT_CONFIG_RESOURCE = "default-config.yaml"

YAML_SUFFIXES = (".yaml", ".yml", ".json")
TOML_SUFFIXES = (".toml",)


def default_file_suffixes() -> List[str]:
    return [".yaml", ".yml", ".json", ".toml"]


def default_search_paths(application: str = APPLICATION_NAME) -> List[Path]:
    """Directories searched for a configuration file, lowest priority first."""
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    cwd = Path.cwd()
    paths = [
        Path(config_home) / application,
        cwd / "etc",
        cwd / "conf",
    ]
    if os.name == "posix":
        paths.append(Path("/etc") / application)
    return paths


def parse_config_text(content: str, suffix: str) -> Config:
    """Parse configuration text according to the file suffix.

    Raises:
        ConfigError: if the suffix is unsupported or the text does not parse
    """
    suffix = suffix.lower()
    data: Any
    try:
        if suffix in YAML_SUFFIXES:
            data = yaml.safe_load(content)
        elif suffix in TOML_SUFFIXES:
            data = tomllib.loads(content)
        else:
            raise ConfigError(f"Cannot read config files with suffix {suffix}")
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Could not parse configuration: {e}") from e
    return Config.from_dict(data)


def load_config_file(path: Union[str, Path]) -> Config:
    """Read and parse one configuration file.

    Raises:
        ConfigNotFoundError: if the file does not exist
        ConfigError: if it cannot be read or parsed
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Could not read configuration file {path}: {e}") from e
    return parse_config_text(content, path.suffix)


def load_default_config() -> Config:
    """Return the configuration bundled with the package."""
    content = (
        resources.files("clipboard_cleaner")
        .joinpath("assets", DEFAULT_CONFIG_RESOURCE)
        .read_text(encoding="utf-8")
    )
    return parse_config_text(content, ".yaml")


class ConfigurationLoader:
    """Searches configuration directories for the application's config file."""

    def __init__(
        self,
        base_name: str = APPLICATION_NAME,
        search_paths: Optional[Sequence[Union[str, Path]]] = None,
        file_suffixes: Optional[Sequence[str]] = None,
    ) -> None:
        """Initialize loader.

        Args:
            base_name: File name without suffix
            search_paths: Directories to search, lowest priority first
            file_suffixes: Suffixes tried in order within each directory
        """
        self.base_name = base_name
        self.search_paths = [
            Path(path) for path in (
                default_search_paths() if search_paths is None else search_paths
            )
        ]
        self.file_suffixes = list(
            default_file_suffixes() if file_suffixes is None else file_suffixes
        )

    def candidates(self) -> List[Path]:
        """All file paths tried, in the order they are tried."""
        return [
            directory / f"{self.base_name}{suffix}"
            for directory in reversed(self.search_paths)
            for suffix in self.file_suffixes
        ]

    def load_configuration(self, path: Optional[Union[str, Path]] = None) -> Config:
        """Load the configuration.

        An explicit ``path`` or the ``CLIPBOARD_CLEANER_CONFIG`` environment
        variable takes precedence over the search paths. Errors in an
        explicitly named file are raised; unreadable files found while
        searching are logged and skipped.

        Raises:
            ConfigNotFoundError: if no usable file exists
            ConfigError: if an explicitly named file is invalid
        """
        explicit = path or os.environ.get(CONFIG_ENV_VAR)
        if explicit:
            logger.info("Loading configuration", extra={"path": str(explicit)})
            return load_config_file(explicit)

        for candidate in self.candidates():
            if not candidate.is_file():
                continue
            try:
                config = load_config_file(candidate)
            except ConfigError as e:
                logger.warning(
                    "Skipping invalid configuration file",
                    extra={"path": str(candidate), "reason": str(e)},
                )
                continue
            logger.info("Loaded configuration", extra={"path": str(candidate)})
            return config

        raise ConfigNotFoundError("No configuration file found.")

    def load_or_default(self, path: Optional[Union[str, Path]] = None) -> Config:
        """Like :meth:`load_configuration`, falling back to the bundled default."""
        try:
            return self.load_configuration(path)
        except ConfigNotFoundError:
            if path or os.environ.get(CONFIG_ENV_VAR):
                raise
            logger.warning("No configuration file found. Using integrated default config.")
            return load_default_config()
