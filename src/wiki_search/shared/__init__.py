"""
Shared utilities for Wiki Search MCP.

Provides:
- Unified exception hierarchy
- Async fan-out helpers and circuit breaker

Python 3.12+ features:
- Type parameter syntax (PEP 695)
- asyncio.TaskGroup
"""

from .async_utils import CircuitBreaker, gather_with_errors
from .exceptions import (
    # Base
    WikiSearchError,
    ErrorContext,
    ErrorSeverity,
    ErrorCategory,
    # Transport errors
    TransportError,
    RateLimitError,
    NetworkError,
    ServiceUnavailableError,
    # Validation errors
    ValidationError,
    InvalidParameterError,
    # Data errors
    DataError,
    NotFoundError,
    ParseError,
    # Embedding / configuration errors
    EmbeddingError,
    ConfigurationError,
)

__all__ = [
    "WikiSearchError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "TransportError",
    "RateLimitError",
    "NetworkError",
    "ServiceUnavailableError",
    "ValidationError",
    "InvalidParameterError",
    "DataError",
    "NotFoundError",
    "ParseError",
    "EmbeddingError",
    "ConfigurationError",
    "CircuitBreaker",
    "gather_with_errors",
]
