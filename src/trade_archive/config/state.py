"""
Unified configuration state for the trade archive.

Single source of truth for archive storage, history API, analytics and
logging settings: hierarchical YAML files, environment overrides, type
validation and sensible defaults.
"""

import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from trade_archive.analytics.income import RowLimits
from trade_archive.ingestion.config.value_objects import (
    DEFAULT_HISTORY_PATH,
    HistoryApiClientConfig,
    HttpClientConfig,
)
from trade_archive.shared.models.exchange_rate import DEFAULT_QUOTE_CURRENCY

logger = logging.getLogger(__name__)


# =============================================================================
# PYDANTIC MODELS - Type-Safe Configuration
# =============================================================================


class ArchiveConfig(BaseModel):
    """Archive storage backend and truncation settings."""

    backend: Literal["local", "s3", "memory"] = Field(default="local")
    local_root: str = Field(default="./data")
    bucket: str = Field(default="trade-archive")
    endpoint: str | None = Field(default=None)
    region: str = Field(default="us-east-1")
    max_bytes: int | None = Field(default=5 * 1024 * 1024, ge=1)
    shrink_ratio: float = Field(default=0.9, gt=0, lt=1)
    root: str = Field(default="trade_archive/v1")

    model_config = ConfigDict(extra="allow")


class HistoryApiConfig(BaseModel):
    """Trade history API configuration."""

    base_url: str = Field(default="https://www.pathofexile.com")
    history_path: str = Field(default=DEFAULT_HISTORY_PATH)
    timeout: float = Field(default=30.0, gt=0)
    verify_ssl: bool = Field(default=True)
    headers: dict[str, str] = Field(default_factory=lambda: {"Accept": "application/json"})

    model_config = ConfigDict(extra="allow")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if v.startswith(("http://", "https://")):
            return v.rstrip("/")
        raise ValueError("History API base_url must start with http:// or https://")

    def to_client_config(self) -> HistoryApiClientConfig:
        return HistoryApiClientConfig(
            base_url=self.base_url,
            history_path=self.history_path,
            headers=dict(self.headers),
            http_config=HttpClientConfig(timeout=self.timeout, verify_ssl=self.verify_ssl),
        )


class RowLimitsConfig(BaseModel):
    """Maximum rows per income table."""

    days: int = Field(default=14, ge=1)
    weeks: int = Field(default=12, ge=1)
    categories: int = Field(default=12, ge=1)
    base_types: int = Field(default=12, ge=1)
    rarities: int = Field(default=12, ge=1)

    model_config = ConfigDict(extra="allow")

    def to_row_limits(self) -> RowLimits:
        return RowLimits(
            days=self.days,
            weeks=self.weeks,
            categories=self.categories,
            base_types=self.base_types,
            rarities=self.rarities,
        )


class AnalyticsConfig(BaseModel):
    """Income statistics defaults."""

    preferred_currency: str = Field(default=DEFAULT_QUOTE_CURRENCY)
    row_limits: RowLimitsConfig = Field(default_factory=RowLimitsConfig)

    model_config = ConfigDict(extra="allow")

    @field_validator("preferred_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.strip().lower() or DEFAULT_QUOTE_CURRENCY


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)

    model_config = ConfigDict(extra="allow")


class ConfigState(BaseModel):
    """
    Root configuration state - single source of truth for all app config.
    """

    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)
    history_api: HistoryApiConfig = Field(default_factory=HistoryApiConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Environment metadata
    env: str = Field(default="dev")
    config_dir: str = Field(default="./config")

    model_config = ConfigDict(extra="allow")


# =============================================================================
# CONFIG LOADER - Clean, Validated Loading
# =============================================================================


class ConfigLoader:
    """
    Load and validate configuration from hierarchical YAML files.

    Merges:
      1. Global defaults (model defaults)
      2. YAML files from config_dir
      3. env/<env>.yaml
      4. Environment variable overrides
    """

    CONFIG_FILES = ("archive.yaml", "history_api.yaml", "analytics.yaml", "logging.yaml")

    def __init__(self, config_dir: str = "./config"):
        self.config_dir = Path(config_dir)
        self._yaml_cache: dict[Path, Any] = {}
        self.env = os.getenv("TRADE_ARCHIVE_ENV", "dev")

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load YAML file with caching."""
        if path in self._yaml_cache:
            return self._yaml_cache[path]

        if not path.exists():
            logger.debug(f"Config file not found (using defaults): {path}")
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load {path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Ignoring {path}: top level is not a mapping")
            return {}
        self._yaml_cache[path] = data
        logger.debug(f"Loaded config: {path.relative_to(self.config_dir)}")
        return data

    def _apply_env_overrides(self, config: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variable overrides to config."""
        if root := os.getenv("TRADE_ARCHIVE_ROOT"):
            config.setdefault("archive", {})["local_root"] = root

        if backend := os.getenv("TRADE_ARCHIVE_BACKEND"):
            config.setdefault("archive", {})["backend"] = backend.strip().lower()

        if bucket := os.getenv("TRADE_ARCHIVE_BUCKET"):
            config.setdefault("archive", {})["bucket"] = bucket

        if endpoint := os.getenv("MINIO_ENDPOINT"):
            config.setdefault("archive", {})["endpoint"] = endpoint

        if base_url := os.getenv("HISTORY_API_BASE_URL"):
            config.setdefault("history_api", {})["base_url"] = base_url

        if log_level := os.getenv("LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level

        return config

    def _merge_dicts(self, base: dict, override: dict) -> dict:
        """Deep merge override into base dict."""
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result

    def load(self) -> ConfigState:
        """
        Load complete configuration state.

        Returns:
            ConfigState: Validated configuration object

        Raises:
            ValidationError: If configuration is invalid
        """
        logger.info(f"Loading configuration from {self.config_dir} (env: {self.env})")

        config: dict[str, Any] = {}

        # 1. Top-level YAML files; each file holds its own section
        for config_file in self.CONFIG_FILES:
            section = config_file.removesuffix(".yaml")
            file_config = self._load_yaml(self.config_dir / config_file)
            if file_config:
                config = self._merge_dicts(config, {section: file_config})

        # 2. Environment-specific overrides (full tree)
        env_config = self._load_yaml(self.config_dir / "env" / f"{self.env}.yaml")
        config = self._merge_dicts(config, env_config)

        # 3. Environment variable overrides
        config = self._apply_env_overrides(config)

        try:
            state = ConfigState(env=self.env, config_dir=str(self.config_dir), **config)
        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            raise
        logger.info(
            f"Configuration loaded: backend={state.archive.backend}, "
            f"preferred={state.analytics.preferred_currency}, "
            f"log_level={state.logging.level}"
        )
        return state


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================


def get_config(config_dir: str | None = None) -> ConfigState:
    """
    Load and return the configuration state.

    Args:
        config_dir: Override config directory. Defaults to
            $TRADE_ARCHIVE_CONFIG_DIR, else ./config

    Returns:
        ConfigState: Validated configuration object
    """
    if config_dir is None:
        config_dir = os.getenv("TRADE_ARCHIVE_CONFIG_DIR", "./config")
        if not Path(config_dir).exists():
            logger.warning(f"Config directory not found at {config_dir}, using defaults")

    loader = ConfigLoader(config_dir=config_dir)
    return loader.load()


__all__ = [
    "AnalyticsConfig",
    "ArchiveConfig",
    "ConfigLoader",
    "ConfigState",
    "HistoryApiConfig",
    "LoggingConfig",
    "RowLimitsConfig",
    "get_config",
]
