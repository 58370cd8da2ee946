"""
Custom exception hierarchy for the console controller.

This module provides a structured exception hierarchy that enables:
- Specific error handling at the API and controller layers
- Rich error context for debugging
- Consistent error messages surfaced as notifications
"""

from __future__ import annotations

from typing import Any


class ConsoleError(Exception):
    """Base exception for all console errors.

    All custom exceptions in the console inherit from this class,
    enabling catching all console-related errors with a single except clause.
    """

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        self.cause = cause
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message including context."""
        parts = [self.message]
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"[{context_str}]")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " ".join(parts)


# =============================================================================
# API-Related Exceptions
# =============================================================================


class APIError(ConsoleError):
    """Base exception for failures talking to the database API."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        full_context: dict[str, Any] = {"endpoint": endpoint}
        full_context.update(context or {})
        super().__init__(message, context=full_context, cause=cause)
        self.endpoint = endpoint


class TransportFault(APIError):
    """Raised on a non-success status code or a network failure.

    Examples:
        - HTTP 500 from the backend
        - Connection refused
        - Read interrupted mid-response
    """

    def __init__(
        self,
        endpoint: str,
        *,
        status_code: int | None = None,
        reason: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        context: dict[str, Any] = {}
        if status_code is not None:
            context["status_code"] = status_code
            message = f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}"
        else:
            message = f"Request to {endpoint} failed"
            if reason:
                message = f"{message}: {reason}"
        super().__init__(message, endpoint=endpoint, context=context, cause=cause)
        self.status_code = status_code
        self.reason = reason


class ParseFault(APIError):
    """Raised when a response payload is not well-formed or has the wrong shape."""

    def __init__(
        self,
        endpoint: str,
        *,
        reason: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            f"Malformed response from {endpoint}: {reason}",
            endpoint=endpoint,
            cause=cause,
        )
        self.reason = reason


# =============================================================================
# Configuration-Related Exceptions
# =============================================================================


class ConfigurationError(ConsoleError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        parameter: str,
        *,
        reason: str,
        value: Any = None,
    ) -> None:
        context = {"parameter": parameter}
        if value is not None:
            context["value"] = value
        super().__init__(f"Configuration error for {parameter}: {reason}", context=context)
        self.parameter = parameter


# =============================================================================
# Pagination-Related Exceptions
# =============================================================================


class PaginationError(ConsoleError):
    """Raised when a pagination cursor is given an impossible value."""

    def __init__(self, *, field_name: str, value: Any, reason: str) -> None:
        super().__init__(
            f"Invalid {field_name}: {reason}",
            context={"field": field_name, "value": value},
        )
        self.field_name = field_name
        self.value = value
