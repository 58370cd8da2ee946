"""
Centralized configuration management for the console controller.

This module provides a single source of truth for all configuration values,
supporting:
- JSON configuration file (console.json)
- Environment variable overrides
- Programmatic defaults

Configuration is loaded in priority order:
1. Environment variables (highest priority)
2. JSON config file
3. Dataclass defaults (lowest priority)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tsdb_console.core.constants import Section
from tsdb_console.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Default config file locations (searched in order)
CONFIG_FILE_PATHS = [
    Path("console.json"),
    Path("./config/console.json"),
    Path.home() / ".tsdb_console" / "console.json",
    Path("/etc/tsdb_console/console.json"),
]

DEFAULT_PAGE_SIZE_OPTIONS: tuple[int, ...] = (10, 20, 50)


def find_config_file() -> Path | None:
    """Locate the console config file.

    CONFIG_FILE wins when it points at an existing file; otherwise the
    first existing entry of CONFIG_FILE_PATHS is used.
    """
    env_config_path = os.getenv("CONFIG_FILE")
    if env_config_path:
        candidate = Path(env_config_path)
        if candidate.exists():
            return candidate
        logger.warning(f"CONFIG_FILE specified but not found: {env_config_path}")

    return next((path for path in CONFIG_FILE_PATHS if path.exists()), None)


def _read_json(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    with path.open() as f:
        return json.load(f)


def _get_env_or_config(
    env_key: str,
    config_dict: dict[str, Any],
    config_key: str,
    default: Any,
    type_cast: type | None = None
) -> Any:
    """Get value from environment, config file, or default (in priority order).

    Args:
        env_key: Environment variable name
        config_dict: Config dictionary section
        config_key: Key within config dictionary
        default: Default value if not found
        type_cast: Optional type to cast the value to

    Returns:
        Configuration value from highest priority source
    """
    env_value = os.getenv(env_key)
    if env_value is not None:
        if type_cast is bool:
            return env_value.lower() in ("true", "1", "yes")
        try:
            return type_cast(env_value) if type_cast else env_value
        except ValueError as e:
            raise ConfigurationError(env_key, reason=str(e), value=env_value) from e

    if config_key in config_dict:
        return config_dict[config_key]

    return default


@dataclass(frozen=True)
class ApiConfig:
    """Configuration for the database API client."""

    base_url: str = "http://localhost:8080"
    api_prefix: str = "/api"
    # None means no explicit timeout: a hung call only stalls its own view
    timeout_seconds: float | None = None
    pool_connections: int = 10
    pool_maxsize: int = 10

    @property
    def api_root(self) -> str:
        """Base URL joined with the API prefix."""
        base = self.base_url.rstrip("/")
        prefix = self.api_prefix.strip("/")
        return f"{base}/{prefix}" if prefix else base

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ApiConfig:
        """Create configuration from config dict with environment overrides."""
        api_config = config.get("api", {})
        return cls(
            base_url=_get_env_or_config("TSDB_API_URL", api_config, "base_url", cls.base_url),
            api_prefix=api_config.get("api_prefix", cls.api_prefix),
            timeout_seconds=_get_env_or_config(
                "TSDB_API_TIMEOUT", api_config, "timeout_seconds", cls.timeout_seconds, float
            ),
            pool_connections=api_config.get("pool_connections", cls.pool_connections),
            pool_maxsize=api_config.get("pool_maxsize", cls.pool_maxsize),
        )


@dataclass(frozen=True)
class PaginationConfig:
    """Configuration for paginated business tables."""

    default_page_size: int = 10
    page_size_options: tuple[int, ...] = DEFAULT_PAGE_SIZE_OPTIONS

    def __post_init__(self) -> None:
        if self.default_page_size <= 0:
            raise ConfigurationError(
                "pagination.default_page_size",
                reason="must be a positive integer",
                value=self.default_page_size,
            )
        if not self.page_size_options or any(size <= 0 for size in self.page_size_options):
            raise ConfigurationError(
                "pagination.page_size_options",
                reason="must be a non-empty list of positive integers",
                value=self.page_size_options,
            )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> PaginationConfig:
        """Create configuration from config dict with environment overrides."""
        page_config = config.get("pagination", {})
        return cls(
            default_page_size=_get_env_or_config(
                "CONSOLE_PAGE_SIZE", page_config, "default_page_size", cls.default_page_size, int
            ),
            page_size_options=tuple(page_config.get("page_size_options", DEFAULT_PAGE_SIZE_OPTIONS)),
        )


@dataclass(frozen=True)
class NotificationConfig:
    """Configuration for transient user notifications."""

    dismiss_after_seconds: float = 3.0
    history_size: int = 50

    def __post_init__(self) -> None:
        if self.dismiss_after_seconds < 0:
            raise ConfigurationError(
                "notifications.dismiss_after_seconds",
                reason="must not be negative",
                value=self.dismiss_after_seconds,
            )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> NotificationConfig:
        """Create configuration from config dict."""
        notify_config = config.get("notifications", {})
        return cls(
            dismiss_after_seconds=notify_config.get("dismiss_after_seconds", cls.dismiss_after_seconds),
            history_size=notify_config.get("history_size", cls.history_size),
        )


@dataclass(frozen=True)
class ControllerConfig:
    """Configuration for the view-state controller."""

    initial_section: str = Section.DASHBOARD.value
    # Drop results of loads that were superseded by a newer load of the same view
    discard_stale_loads: bool = True

    def __post_init__(self) -> None:
        if Section.parse(self.initial_section) is None:
            raise ConfigurationError(
                "controller.initial_section",
                reason=f"must be one of {[s.value for s in Section]}",
                value=self.initial_section,
            )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ControllerConfig:
        """Create configuration from config dict with environment overrides."""
        ctl_config = config.get("controller", {})
        return cls(
            initial_section=ctl_config.get("initial_section", cls.initial_section),
            discard_stale_loads=_get_env_or_config(
                "CONSOLE_DISCARD_STALE_LOADS", ctl_config, "discard_stale_loads", cls.discard_stale_loads, bool
            ),
        )


@dataclass(frozen=True)
class ServerConfig:
    """Configuration for the console web server."""

    host: str = "0.0.0.0"
    port: int = 8050

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ServerConfig:
        """Create configuration from config dict with environment overrides."""
        server_config = config.get("server", {})
        return cls(
            host=_get_env_or_config("CONSOLE_HOST", server_config, "host", cls.host),
            port=_get_env_or_config("CONSOLE_PORT", server_config, "port", cls.port, int),
        )


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for log output."""

    level: str = "INFO"
    json_format: bool = False

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> LoggingConfig:
        """Create configuration from config dict with environment overrides."""
        log_config = config.get("logging", {})
        return cls(
            level=_get_env_or_config("LOG_LEVEL", log_config, "level", cls.level),
            json_format=_get_env_or_config("LOG_JSON", log_config, "json_format", cls.json_format, bool),
        )


@dataclass
class ConsoleConfig:
    """Root configuration aggregating all sub-configurations."""

    api: ApiConfig = field(default_factory=ApiConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    controller: ControllerConfig = field(default_factory=ControllerConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Track which config file was loaded (if any)
    config_file_path: str | None = None

    @classmethod
    def from_file(cls, file_path: str | Path) -> ConsoleConfig:
        """Load configuration from a specific JSON file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            json.JSONDecodeError: If the file contains invalid JSON.
        """
        path = Path(file_path)
        return cls.from_config(_read_json(path), config_file_path=str(path))

    @classmethod
    def from_config(cls, config: dict[str, Any], config_file_path: str | None = None) -> ConsoleConfig:
        """Create full configuration from config dictionary."""
        return cls(
            api=ApiConfig.from_config(config),
            pagination=PaginationConfig.from_config(config),
            notifications=NotificationConfig.from_config(config),
            controller=ControllerConfig.from_config(config),
            server=ServerConfig.from_config(config),
            logging=LoggingConfig.from_config(config),
            config_file_path=config_file_path,
        )

    @classmethod
    def from_env(cls) -> ConsoleConfig:
        """Create full configuration from config file and environment variables."""
        path = find_config_file()
        return cls.from_config(_read_json(path), config_file_path=str(path) if path else None)

    @classmethod
    def default(cls) -> ConsoleConfig:
        """Create configuration with all defaults (no file loading)."""
        return cls()


# Process-wide configuration, resolved lazily
_config: ConsoleConfig | None = None


def get_config() -> ConsoleConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = ConsoleConfig.from_env()
    return _config


def set_config(config: ConsoleConfig) -> None:
    """Install an explicit configuration (used by the entry point and tests)."""
    global _config
    _config = config


def reset_config() -> None:
    """Forget the current configuration so the next access reloads it."""
    global _config
    _config = None
