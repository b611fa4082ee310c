"""
Custom exceptions for the import pipeline with structured error context.

This module provides the exception hierarchy used throughout the
GitHub -> BigQuery import. Each exception includes context information
for debugging and for the final error report of a failed run.

Exception Hierarchy:
    IngestionException (base)
    ├── ExtractionError
    │   ├── APIExtractionError
    │   │   ├── NetworkError (retryable)
    │   │   ├── RateLimitError (retryable)
    │   │   ├── GraphQLQueryError (retryable)
    │   │   ├── AuthenticationError (non-retryable)
    │   │   └── ResponseValidationError (non-retryable)
    │   └── WindowFetchError
    ├── LoadError
    │   ├── WarehouseError
    │   └── LoadJobError
    └── RetryableError / NonRetryableError (mixins)
"""

from typing import Optional, Dict, Any, List
from datetime import datetime, timezone


class IngestionException(Exception):
    """
    Base exception for all import-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (window, table, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Retry Strategy Mixins
# ============================================================================

class RetryableError(IngestionException):
    """
    Mixin for errors that should be retried by the retry executor.

    Use this for transient errors like:
    - Network timeouts and connection resets
    - Rate limiting (HTTP 429)
    - GraphQL errors reported for an otherwise healthy response
    """
    pass


class NonRetryableError(IngestionException):
    """
    Mixin for errors that should NOT be retried.

    Use this for permanent errors like:
    - Authentication failures (HTTP 401, 403)
    - Response shapes that fail boundary validation
    """
    pass


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(IngestionException):
    """Base exception for upstream fetch failures."""
    pass


class APIExtractionError(ExtractionError):
    """
    Exception raised when a GraphQL request fails.

    Context should include:
        - api_url: The endpoint that failed
        - status_code: HTTP status code (if applicable)
        - response_body: Response body (truncated)
    """
    pass


class NetworkError(RetryableError, APIExtractionError):
    """Transport failures and 5xx responses."""
    pass


class RateLimitError(RetryableError, APIExtractionError):
    """Rate limiting responses (HTTP 429 or exhausted quota)."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        retry_after: Optional[int] = None
    ):
        super().__init__(message, context, original_exception)
        self.retry_after = retry_after  # Seconds to wait before retry
        if retry_after:
            self.context["retry_after"] = retry_after


class GraphQLQueryError(RetryableError, APIExtractionError):
    """
    The API answered 200 with a GraphQL `errors` array.

    GitHub reports search timeouts and secondary limits this way, so these
    are treated as transient.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.errors = errors or []
        self.context["errors"] = self.errors


class AuthenticationError(NonRetryableError, APIExtractionError):
    """Authentication failures (HTTP 401, 403) that should not be retried."""
    pass


class ResponseValidationError(NonRetryableError, APIExtractionError):
    """
    Response payload did not match the expected shape.

    Context should include:
        - model: Name of the schema that rejected the payload
        - errors: Validation error details
    """
    pass


class WindowFetchError(ExtractionError):
    """
    A window's fetch failed after its retry budget was exhausted.

    Context should include:
        - attempts: Number of attempts made
        - operation: Description of the failed operation
    """
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(IngestionException):
    """Base exception for warehouse write failures."""
    pass


class WarehouseError(LoadError):
    """
    Exception raised when a warehouse statement fails.

    Context should include:
        - operation: EXISTS, DELETE, DROP or LOAD
        - table_name: Name of the table
    """
    pass


class LoadJobError(LoadError):
    """
    Exception raised when a bulk load job reports errors.

    The delete for the window has already committed when this is raised,
    so the window's rows stay absent until the next successful run.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(message, context, original_exception)
        self.errors = errors or []
        self.context["errors"] = self.errors
