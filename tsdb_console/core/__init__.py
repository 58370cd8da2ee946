"""
Core module - configuration, constants, exceptions, logging, protocols.
"""

from tsdb_console.core.config import (
    ApiConfig,
    ConsoleConfig,
    ControllerConfig,
    LoggingConfig,
    NotificationConfig,
    PaginationConfig,
    ServerConfig,
    get_config,
    reset_config,
    set_config,
)
from tsdb_console.core.constants import (
    DATA_TYPE_OPTIONS,
    SYSTEM_CONFIG_KEY,
    BusinessTab,
    ConfigTab,
    InstanceStatus,
    NotificationSeverity,
    Section,
    business_config_key,
    instance_config_key,
)
from tsdb_console.core.exceptions import (
    APIError,
    ConfigurationError,
    ConsoleError,
    PaginationError,
    ParseFault,
    TransportFault,
)
from tsdb_console.core.logging import (
    EventType,
    LogContext,
    configure_logging,
    get_logger,
    log_event,
)
from tsdb_console.core.protocols import ConsoleApi, NotificationSink

__all__ = [
    # Config
    "ApiConfig",
    "ConsoleConfig",
    "ControllerConfig",
    "LoggingConfig",
    "NotificationConfig",
    "PaginationConfig",
    "ServerConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Constants
    "DATA_TYPE_OPTIONS",
    "SYSTEM_CONFIG_KEY",
    "BusinessTab",
    "ConfigTab",
    "InstanceStatus",
    "NotificationSeverity",
    "Section",
    "business_config_key",
    "instance_config_key",
    # Exceptions
    "ConsoleError",
    "APIError",
    "TransportFault",
    "ParseFault",
    "ConfigurationError",
    "PaginationError",
    # Logging
    "EventType",
    "LogContext",
    "configure_logging",
    "get_logger",
    "log_event",
    # Protocols
    "ConsoleApi",
    "NotificationSink",
]
