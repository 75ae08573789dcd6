"""Configuration loading and validation for nativesearch.

Main components:
- ConfigLoader (nativesearch.config.loader): load and validate nativesearch.yml
- Environment variable substitution (${VAR_NAME} pattern) and .env loading
- Default values for the indexer, query engine and assistant
"""

from nativesearch.config.env_loader import load_env_file, substitute_env_vars

__all__ = [
    "substitute_env_vars",
    "load_env_file",
]
