"""Configuration plumbing shared by CLI commands."""

from collections.abc import Mapping
from typing import Any

import click

from nativesearch.config.loader import ConfigLoader
from nativesearch.models.config import NativeSearchConfig


def prune_none(values: Mapping[str, Any]) -> dict[str, Any]:
    """Drop options the user did not pass."""
    return {key: value for key, value in values.items() if value is not None}


def load_cli_config(
    ctx: click.Context, overrides: Mapping[str, Any] | None = None
) -> NativeSearchConfig:
    """Load configuration using the group's ``--config`` option.

    Args:
        ctx: Current click context
        overrides: Nested CLI overrides, highest precedence

    Raises:
        ConfigError: If the configuration is invalid
    """
    root = ctx.find_root()
    config_path = (root.obj or {}).get("config_path")
    return ConfigLoader().load(config_path, overrides=overrides)
