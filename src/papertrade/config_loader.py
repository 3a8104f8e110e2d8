"""Configuration loader with Pydantic validation and environment variable interpolation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables at module level
load_dotenv(find_dotenv(usecwd=True))

from papertrade.constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_HOST,
    DEFAULT_MAX_STEP,
    DEFAULT_PORT,
    DEFAULT_PRICE_FLOOR,
    LogLevel,
)


def interpolate_env_vars(value: Any) -> Any:
    """
    Interpolate environment variables in string values.

    Supports formats:
    - ${VAR_NAME} - replaced with empty string if not set
    - ${VAR_NAME:default} - optional with default value
    """
    if not isinstance(value, str):
        return value

    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)

        env_value = os.environ.get(var_name)

        if env_value is not None:
            return env_value
        elif default is not None:
            return default
        else:
            return ""

    return re.sub(pattern, replacer, value)


def process_config_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively process config dict to interpolate env vars."""
    result = {}
    for key, value in data.items():
        if isinstance(value, dict):
            result[key] = process_config_dict(value)
        elif isinstance(value, list):
            result[key] = [
                process_config_dict(item) if isinstance(item, dict) else interpolate_env_vars(item)
                for item in value
            ]
        else:
            result[key] = interpolate_env_vars(value)
    return result


# ============================================
# Pydantic Configuration Models
# ============================================


class EnvironmentConfig(BaseModel):
    """Environment and runtime settings."""

    log_level: LogLevel = LogLevel.INFO
    data_dir: str = DEFAULT_DATA_DIR
    strict_reads: bool = False  # Raise on unreadable collection files instead of resetting


class ServerConfig(BaseModel):
    """HTTP server settings."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    static_dir: str | None = None

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"Port must be 1-65535, got: {v}")
        return v


class SimulatorConfig(BaseModel):
    """Quote simulator settings."""

    max_step: float = DEFAULT_MAX_STEP
    price_floor: float = DEFAULT_PRICE_FLOOR

    @field_validator("max_step", "price_floor")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate values are strictly positive."""
        if v <= 0:
            raise ValueError(f"Value must be positive, got: {v}")
        return v


class SeedQuoteConfig(BaseModel):
    """Initial quote for one symbol."""

    symbol: str
    name: str
    price: float

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Symbol must not be empty")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Seed price must be positive, got: {v}")
        return v


def _default_seed_quotes() -> list[SeedQuoteConfig]:
    return [
        SeedQuoteConfig(symbol="AAPL", name="Apple Inc.", price=150.00),
        SeedQuoteConfig(symbol="GOOGL", name="Alphabet Inc.", price=2800.00),
        SeedQuoteConfig(symbol="MSFT", name="Microsoft Corporation", price=300.00),
        SeedQuoteConfig(symbol="AMZN", name="Amazon.com Inc.", price=3300.00),
        SeedQuoteConfig(symbol="TSLA", name="Tesla Inc.", price=800.00),
    ]


class SeedConfig(BaseModel):
    """Quotes written to an empty stocks collection on startup."""

    quotes: list[SeedQuoteConfig] = Field(default_factory=_default_seed_quotes)

    @field_validator("quotes")
    @classmethod
    def validate_unique_symbols(cls, v: list[SeedQuoteConfig]) -> list[SeedQuoteConfig]:
        seen: set[str] = set()
        for quote in v:
            if quote.symbol in seen:
                raise ValueError(f"Duplicate seed symbol: {quote.symbol}")
            seen.add(quote.symbol)
        return v


class AppConfig(BaseModel):
    """Root application configuration."""

    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    simulator: SimulatorConfig = Field(default_factory=SimulatorConfig)
    seed: SeedConfig = Field(default_factory=SeedConfig)

    @property
    def data_dir(self) -> Path:
        return Path(self.environment.data_dir)


# ============================================
# Configuration Loader
# ============================================


class ConfigLoader:
    """Load and validate configuration from YAML files with env var interpolation."""

    def __init__(self, config_path: str | Path) -> None:
        """
        Initialize config loader.

        Args:
            config_path: Path to the YAML configuration file.
        """
        self.config_path = Path(config_path)
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """
        Load and validate configuration.

        Returns:
            Validated AppConfig instance.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            yaml.YAMLError: If YAML is invalid.
            pydantic.ValidationError: If config validation fails.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        processed_config = process_config_dict(raw_config)

        self._config = AppConfig.model_validate(processed_config)

        return self._config

    @property
    def config(self) -> AppConfig:
        """Get loaded config, loading if necessary."""
        if self._config is None:
            return self.load()
        return self._config

    def reload(self) -> AppConfig:
        """Force reload configuration from disk."""
        self._config = None
        return self.load()


def load_config(config_path: str | Path) -> AppConfig:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Validated AppConfig instance.
    """
    loader = ConfigLoader(config_path)
    return loader.load()


def load_config_with_overrides(
    config_path: str | Path | None,
    *,
    host: str | None = None,
    port: int | None = None,
    data_dir: str | None = None,
) -> AppConfig:
    """
    Load configuration with CLI overrides.

    A ``config_path`` of None yields the built-in defaults.

    Args:
        config_path: Path to the YAML configuration file.
        host: Override server host.
        port: Override server port.
        data_dir: Override data directory.

    Returns:
        Validated AppConfig instance with overrides applied.
    """
    config = load_config(config_path) if config_path is not None else AppConfig()

    updates: dict[str, Any] = {}

    server_updates: dict[str, Any] = {}
    if host is not None:
        server_updates["host"] = host
    if port is not None:
        server_updates["port"] = port
    if server_updates:
        updates["server"] = ServerConfig.model_validate(
            {**config.server.model_dump(), **server_updates}
        )

    if data_dir is not None:
        updates["environment"] = config.environment.model_copy(update={"data_dir": data_dir})

    if updates:
        return config.model_copy(update=updates)

    return config
