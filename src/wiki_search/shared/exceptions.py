"""
Unified Exception Hierarchy for Wiki Search MCP.

Exception Hierarchy:
    WikiSearchError (base)
    ├── TransportError
    │   ├── RateLimitError
    │   ├── NetworkError
    │   └── ServiceUnavailableError
    ├── ValidationError
    │   └── InvalidParameterError
    ├── DataError
    │   ├── NotFoundError
    │   └── ParseError
    ├── EmbeddingError
    └── ConfigurationError

Recovery policy:
    ParseError on one markup node         -> node skipped, extraction continues
    TransportError on one search backend  -> empty contribution
    TransportError/NotFoundError on load  -> secondary source, then placeholder
    EmbeddingError on one candidate       -> candidate skipped
    EmbeddingError on the query vector    -> propagated to the caller
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    WARNING = auto()  # Recoverable, can continue
    ERROR = auto()  # Failed but can retry
    CRITICAL = auto()  # Cannot continue
    TRANSIENT = auto()  # Temporary, should retry automatically


class ErrorCategory(Enum):
    """Categories for error classification."""

    TRANSPORT = "transport"
    VALIDATION = "validation"
    DATA = "data"
    EMBEDDING = "embedding"
    CONFIGURATION = "config"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context attached to an error."""

    tool_name: str | None = None
    operation: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    retry_after: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def merged(self, **changes: Any) -> ErrorContext:
        """Return a copy with *changes* applied to the unset fields only."""
        values = {
            "tool_name": self.tool_name,
            "operation": self.operation,
            "input_value": self.input_value,
            "suggestion": self.suggestion,
            "retry_after": self.retry_after,
            "metadata": self.metadata,
        }
        for key, value in changes.items():
            if values.get(key) in (None, {}):
                values[key] = value
        return ErrorContext(**values)


class WikiSearchError(Exception):
    """
    Base exception for all Wiki Search errors.

    Provides:
    - Structured error context
    - Severity and category classification
    - JSON-ready serialization via ``to_dict``
    """

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.TRANSPORT,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
            "retryable": self.retryable,
        }
        if self.context.tool_name:
            result["tool"] = self.context.tool_name
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        if self.context.retry_after:
            result["retry_after_seconds"] = self.context.retry_after
        return result


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(WikiSearchError):
    """Network failure or non-success response from a remote source."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        retryable: bool = True,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.TRANSPORT,
            retryable=retryable,
        )


class RateLimitError(TransportError):
    """Raised when a source rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: float = 1.0,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = (context or ErrorContext()).merged(
            suggestion="Wait and retry the request",
            retry_after=retry_after,
        )
        super().__init__(message, context=ctx, retryable=True)
        self.severity = ErrorSeverity.TRANSIENT


class NetworkError(TransportError):
    """Raised for connectivity issues and unexpected client errors."""

    def __init__(
        self,
        message: str = "Network connection failed",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context, retryable=True)


class ServiceUnavailableError(TransportError):
    """Raised when a remote service answers with a 5xx status."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        *,
        service: str = "MediaWiki",
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(f"{service}: {message}", context=context, retryable=True)
        self.severity = ErrorSeverity.TRANSIENT


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(WikiSearchError):
    """Base class for validation errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )


class InvalidParameterError(ValidationError):
    """Raised when a parameter value is invalid."""

    def __init__(
        self,
        param_name: str,
        value: Any,
        expected: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = (context or ErrorContext()).merged(
            input_value=value,
            suggestion=f"Expected {expected}",
        )
        super().__init__(
            f"Invalid parameter '{param_name}': {value!r} (expected {expected})",
            context=ctx,
        )


# =============================================================================
# Data Errors
# =============================================================================


class DataError(WikiSearchError):
    """Base class for data-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.DATA,
            retryable=False,
        )


class NotFoundError(DataError):
    """Raised when a source has no such title."""

    def __init__(
        self,
        resource: str,
        identifier: str | None = None,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        msg = f"{resource} not found"
        if identifier:
            msg = f"{resource} not found: {identifier}"
        ctx = (context or ErrorContext()).merged(
            input_value=identifier,
            suggestion="Check the title spelling or search for a different article",
        )
        super().__init__(msg, context=ctx)


class ParseError(DataError):
    """Raised when a markup node or payload could not be interpreted."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        full_msg = f"Parse error: {message}"
        if source:
            full_msg = f"Parse error ({source}): {message}"
        super().__init__(full_msg, context=context)


# =============================================================================
# Embedding Errors
# =============================================================================


class EmbeddingError(WikiSearchError):
    """Raised when the embedding provider fails for a given text."""

    def __init__(
        self,
        message: str,
        *,
        text: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = (context or ErrorContext()).merged(input_value=text)
        super().__init__(
            message,
            context=ctx,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.EMBEDDING,
            retryable=False,
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(WikiSearchError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
        )

