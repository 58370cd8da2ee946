"""
TSDB Management Console controller.

Client-side state and orchestration for the administrative console of a
time-series database cluster: navigation between management views,
configuration form merging, local pagination and filtering of API results,
and uniform error surfacing through transient notifications.

Package Structure:
    - core: Configuration, constants, exceptions, logging, protocols
    - engine: Config merge and pagination/filter computations
    - api: Pydantic payload models and the API client
    - notifications: Single-slot notification channel
    - controller: View-state controller and view models
    - web: FastAPI app exposing controller snapshots

Example usage:
    from tsdb_console import get_config
    from tsdb_console.controller import build_controller

    controller = build_controller(get_config())
    await controller.start()
    await controller.switch_section("business")
"""

__version__ = "1.0.0"

from tsdb_console.core.config import ConsoleConfig, get_config
from tsdb_console.core.constants import BusinessTab, NotificationSeverity, Section
from tsdb_console.core.exceptions import ConsoleError, ParseFault, TransportFault
from tsdb_console.core.logging import configure_logging, get_logger

__all__ = [
    # Version
    "__version__",
    # Config
    "get_config",
    "ConsoleConfig",
    # Constants
    "Section",
    "BusinessTab",
    "NotificationSeverity",
    # Exceptions
    "ConsoleError",
    "TransportFault",
    "ParseFault",
    # Logging
    "get_logger",
    "configure_logging",
]
