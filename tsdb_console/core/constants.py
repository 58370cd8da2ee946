"""
Enumerations and fixed values shared across the console controller.
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class Section(str, Enum):
    """Top-level navigable views of the console."""

    DASHBOARD = "dashboard"
    CONFIG = "config"
    METADATA = "metadata"
    CLUSTER = "cluster"
    BUSINESS = "business"

    @classmethod
    def parse(cls, value: str | Section) -> Section | None:
        """Return the matching section, or None for unknown names."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class BusinessTab(str, Enum):
    """Sub-tabs of the business section."""

    OVERVIEW = "overview"
    INSTANCES = "instances"
    DATA_VIEWER = "data-viewer"
    PLUGINS = "plugins"

    @property
    def is_paginated(self) -> bool:
        return self is not BusinessTab.OVERVIEW

    @classmethod
    def parse(cls, value: str | BusinessTab) -> BusinessTab | None:
        """Return the matching tab, or None for unknown names."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class ConfigTab(str, Enum):
    """Tabs of the configuration editor."""

    BUSINESS = "business"
    SYSTEM = "system"
    INSTANCE = "instance"


class NotificationSeverity(str, Enum):
    """Severity of a transient user notification."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class InstanceStatus(str, Enum):
    """Lifecycle status of a business instance."""

    RUNNING = "running"
    STOPPED = "stopped"
    UNKNOWN = "unknown"


# Config record key prefixes
BUSINESS_KEY_PREFIX: Final[str] = "business:"
SYSTEM_CONFIG_KEY: Final[str] = "system:main"
INSTANCE_KEY_PREFIX: Final[str] = "instance:"

# Categorical filter values offered by the data viewer ("" = all types)
DATA_TYPE_OPTIONS: Final[tuple[str, ...]] = ("", "stock", "market", "trade")

COMPRESSION_OPTIONS: Final[tuple[str, ...]] = ("lz4", "snappy", "none")

PLUGIN_STATUS_INSTALLED: Final[str] = "installed"

UNKNOWN_LABEL: Final[str] = "unknown"


def instance_config_key(instance_id: str) -> str:
    """Build the config record key for an instance."""
    return f"{INSTANCE_KEY_PREFIX}{instance_id}"


def business_config_key(business_type: str) -> str:
    """Build the config record key for a business type."""
    return f"{BUSINESS_KEY_PREFIX}{business_type}"
