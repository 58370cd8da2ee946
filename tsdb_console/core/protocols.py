"""
Protocol definitions and abstract base classes for the console controller.

This module defines interfaces that enable:
- Loose coupling between the controller and its collaborators
- Easy mocking for testing
- Type-safe dependency injection
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tsdb_console.core.constants import NotificationSeverity


# =============================================================================
# Notification Interface
# =============================================================================


@runtime_checkable
class NotificationSink(Protocol):
    """Anything that can surface a transient, severity-tagged message."""

    def notify(self, message: str, severity: NotificationSeverity | str = ...) -> Any:
        """Display a message, superseding whatever is currently shown."""
        ...


# =============================================================================
# API Interface
# =============================================================================


class ConsoleApi(ABC):
    """Abstract base class for the database API transport.

    Implementations should handle:
    - Prefixing endpoints with the API base path
    - Mapping failures onto TransportFault / ParseFault
    - Surfacing failures through the notification sink
    """

    @abstractmethod
    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Issue one request and return the decoded JSON payload.

        Args:
            endpoint: Path below the API prefix, e.g. "/stats".
            method: HTTP method.
            body: JSON body for write calls.

        Raises:
            TransportFault: On a non-success status or network failure.
            ParseFault: If the payload is not well-formed JSON.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release transport resources."""
        ...
