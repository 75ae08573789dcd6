"""Configuration loader for nativesearch.

This module provides the ConfigLoader class for loading, parsing, and
validating nativesearch.yml files.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from nativesearch.config.defaults import CONFIG_FILE_NAMES, ENV_VAR_MAP
from nativesearch.config.env_loader import load_env_file, substitute_env_vars
from nativesearch.config.validator import flatten_pydantic_errors
from nativesearch.lib.errors import ConfigError
from nativesearch.models.config import NativeSearchConfig

logger = logging.getLogger(__name__)

# Env overrides that must be parsed as integers
_INT_FIELDS = {"indexer.max_chunk_tokens", "indexer.workers"}


def _set_dotted(target: dict[str, Any], dotted: str, value: Any) -> None:
    """Set ``target['a']['b'] = value`` for ``dotted == 'a.b'``."""
    section, _, key = dotted.partition(".")
    node = target.setdefault(section, {})
    if not isinstance(node, dict):
        raise ConfigError(section, f"Expected a mapping, got {type(node).__name__}")
    node[key] = value


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> None:
    """Deep merge override into base (in-place).

    Nested dicts merge recursively; any other value replaces the base value.
    """
    for key, override_value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(override_value, Mapping)
        ):
            _deep_merge(base[key], override_value)
        else:
            base[key] = override_value


def _env_overrides(env_vars: Mapping[str, str]) -> dict[str, Any]:
    """Collect NATIVESEARCH_* overrides into a nested config dict.

    Args:
        env_vars: Environment mapping

    Returns:
        Nested dict of overrides

    Raises:
        ConfigError: If an integer override cannot be parsed
    """
    overrides: dict[str, Any] = {}
    for dotted, env_name in ENV_VAR_MAP.items():
        raw = env_vars.get(env_name)
        if raw is None or raw == "":
            continue
        value: Any = raw
        if dotted in _INT_FIELDS:
            try:
                value = int(raw)
            except ValueError as e:
                raise ConfigError(
                    dotted, f"{env_name} must be an integer, got {raw!r}"
                ) from e
        _set_dotted(overrides, dotted, value)
    return overrides


class ConfigLoader:
    """Loads and validates nativesearch configuration.

    Configuration precedence (highest to lowest):
    1. Explicit overrides (CLI options)
    2. NATIVESEARCH_* environment variables
    3. The YAML config file
    4. Built-in defaults
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the loader.

        Args:
            env: Environment mapping for ${VAR} substitution and
                NATIVESEARCH_* overrides. Defaults to ``os.environ``.
        """
        self._env = env

    def find_config_file(self, directory: str | Path = ".") -> Path | None:
        """Locate nativesearch.yml or nativesearch.yaml in a directory.

        Prefers the .yml extension when both exist.
        """
        base = Path(directory)
        for name in CONFIG_FILE_NAMES:
            candidate = base / name
            if candidate.is_file():
                return candidate
        return None

    def parse_yaml(
        self, file_path: str | Path, env: Mapping[str, str] | None = None
    ) -> dict[str, Any]:
        """Read a YAML file with ${VAR} substitution.

        Args:
            file_path: Path to the YAML file
            env: Variables for ${VAR} substitution (default: os.environ)

        Returns:
            Parsed mapping (empty when the file is empty)

        Raises:
            ConfigError: If the file cannot be read, parsed, or is not a mapping
        """
        path = Path(file_path)
        try:
            raw_text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(
                "config_file",
                f"Configuration file not found at {path}. "
                f"Please ensure the file exists at this path.",
            ) from e

        try:
            content = yaml.safe_load(substitute_env_vars(raw_text, env))
        except yaml.YAMLError as e:
            raise ConfigError(
                "yaml_parse", f"Failed to parse YAML file {path}: {e}"
            ) from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigError(
                "config_file", f"Top level of {path} must be a mapping"
            )
        return content

    def load(
        self,
        file_path: str | Path | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> NativeSearchConfig:
        """Load, merge and validate the configuration.

        Args:
            file_path: Explicit config file. When None, the working directory
                is searched and defaults are used if nothing is found.
            overrides: Nested dict of highest-precedence values

        Returns:
            Validated NativeSearchConfig

        Raises:
            ConfigError: If loading or validation fails
        """
        load_env_file()
        env = self._env if self._env is not None else os.environ

        config_dict: dict[str, Any] = {}
        path = Path(file_path) if file_path is not None else self.find_config_file()
        if path is not None:
            logger.debug(f"Loading configuration from {path}")
            config_dict = self.parse_yaml(path, env)
        else:
            logger.debug("No configuration file found, using defaults")

        _deep_merge(config_dict, _env_overrides(env))
        if overrides:
            _deep_merge(config_dict, overrides)

        try:
            return NativeSearchConfig(**config_dict)
        except PydanticValidationError as e:
            error_text = "\n".join(flatten_pydantic_errors(e))
            source = str(path) if path is not None else "defaults"
            raise ConfigError(
                "config_validation",
                f"Invalid configuration in {source}:\n{error_text}",
            ) from e
