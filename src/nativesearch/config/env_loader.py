"""Environment variable handling for configuration files.

Supports ``${VAR_NAME}`` references inside YAML and loading ``.env`` files
with python-dotenv before substitution.
"""

import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from nativesearch.lib.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def load_env_file(path: str | Path | None = None) -> bool:
    """Load variables from a .env file without overriding the environment.

    Args:
        path: Explicit .env path. When None, the nearest .env found by
            walking up from the working directory is used.

    Returns:
        True if a file was found and loaded
    """
    if path is None:
        path = find_dotenv(usecwd=True)
        if not path:
            return False
    loaded = load_dotenv(dotenv_path=path, override=False)
    if loaded:
        logger.debug(f"Loaded environment file: {path}")
    return bool(loaded)


def substitute_env_vars(text: str, env: Mapping[str, str] | None = None) -> str:
    """Replace every ``${VAR}`` in text with the variable's value.

    Args:
        text: Raw configuration text
        env: Variables to read. Defaults to ``os.environ``.

    Returns:
        Text with all references substituted

    Raises:
        ConfigError: If a referenced variable is not set

    Example:
        >>> os.environ["DOCS_URL"] = "https://docs.example.com"
        >>> substitute_env_vars("base_url: ${DOCS_URL}")
        'base_url: https://docs.example.com'
    """
    variables = env if env is not None else os.environ

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        value = variables.get(name)
        if value is None:
            raise ConfigError(
                name,
                f"Environment variable '{name}' is referenced in the "
                f"configuration but not set",
            )
        return value

    return ENV_VAR_PATTERN.sub(_replace, text)
