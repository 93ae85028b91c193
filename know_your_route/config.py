"""Configuration system using Pydantic for validation and type safety."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator


class DiscoveryConfig(BaseModel):
    """TTL sweep configuration."""

    max_ttl: int = Field(default=30, ge=1, le=255)
    batch_size: int = Field(default=10, ge=1)
    timeout: int = Field(default=1000, ge=1)

    @model_validator(mode="after")
    def clamp_batch_size(self) -> DiscoveryConfig:
        """A batch never needs to be wider than the whole sweep."""
        if self.batch_size > self.max_ttl:
            self.batch_size = self.max_ttl
        return self


class StatisticsConfig(BaseModel):
    """Cycle statistics configuration."""

    cycles: int = Field(default=10, ge=1)
    timeout: int = Field(default=2000, ge=1)
    interval: int = Field(default=1000, ge=0)


class KnowYourRouteConfig(BaseModel):
    """Main configuration for Know Your Route."""

    discovery: DiscoveryConfig = DiscoveryConfig()
    statistics: StatisticsConfig = StatisticsConfig()


def load_from_env() -> dict[str, Any]:
    """Load configuration from environment variables.

    Environment variables should follow the pattern:
    KNOW_YOUR_ROUTE_<SECTION>_<KEY>=value

    Examples:
        KNOW_YOUR_ROUTE_DISCOVERY_MAX_TTL=20
        KNOW_YOUR_ROUTE_STATISTICS_CYCLES=5
    """
    config = {}
    prefix = "KNOW_YOUR_ROUTE_"

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        config_key = key[len(prefix) :].lower()
        parts = config_key.split("_", 1)

        if len(parts) != 2:
            continue

        section, field = parts

        if value.isdigit():
            value = int(value)

        if section not in config:
            config[section] = {}
        config[section][field] = value

    return config


def find_config_file() -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./know_your_route.toml (current directory)
    2. ~/.config/know-your-route/config.toml (XDG config)
    3. ~/.know-your-route.toml (home directory)
    """
    candidates = [
        Path.cwd() / "know_your_route.toml",
        Path.home() / ".config" / "know-your-route" / "config.toml",
        Path.home() / ".know-your-route.toml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


def load_config(config_file: str | Path | None = None) -> KnowYourRouteConfig:
    """Load configuration from multiple sources with proper validation.

    Sources are loaded in this order (later sources override earlier ones):
    1. Default configuration (embedded in code)
    2. Configuration file (TOML format)
    3. Environment variables

    Args:
        config_file: Path to configuration file. If None, will search standard locations.

    Returns:
        Validated configuration object.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    config_dict = {}

    if isinstance(config_file, str):
        config_file = Path(config_file)

    if config_file is None:
        config_file = find_config_file()

    if config_file and config_file.exists():
        try:
            with open(config_file, "rb") as f:
                file_config = tomllib.load(f)
                config_dict.update(file_config)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load config file {config_file}: {e}"
            ) from e

    env_config = load_from_env()
    for section, values in env_config.items():
        if section not in config_dict:
            config_dict[section] = {}
        config_dict[section].update(values)

    try:
        return KnowYourRouteConfig(**config_dict)
    except Exception as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e


def create_default_config(output_file: Path) -> None:
    """Create a default configuration file with sensible defaults."""

    toml_content = """# Know Your Route Configuration

[discovery]
max_ttl = 30
batch_size = 10
timeout = 1000  # milliseconds per TTL probe

[statistics]
cycles = 10
timeout = 2000  # milliseconds per direct probe
interval = 1000  # milliseconds between cycles
"""

    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(toml_content)


class ConfigurationError(Exception):
    """Configuration-related errors."""

    pass
