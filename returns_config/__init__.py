"""
Returns configuration.

``get_active_config()`` is the single runtime entry point:

    RETURNS_CONFIG_PATH   YAML file to load (default: packaged defaults.yaml)
    DATABASE_URL          overrides database.url
"""

from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path

from returns_config.loader import load_config, parse_config
from returns_config.schema import DatabaseSettings, LoggingSettings, ReturnsConfig

DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")

__all__ = [
    "DEFAULTS_PATH",
    "DatabaseSettings",
    "LoggingSettings",
    "ReturnsConfig",
    "get_active_config",
    "load_config",
    "parse_config",
]


def get_active_config(environ: dict[str, str] | None = None) -> ReturnsConfig:
    """Load the configuration selected by the environment."""
    env = os.environ if environ is None else environ
    config = load_config(env.get("RETURNS_CONFIG_PATH") or DEFAULTS_PATH)

    database_url = env.get("DATABASE_URL")
    if database_url:
        config = replace(config, database=replace(config.database, url=database_url))
    return config
