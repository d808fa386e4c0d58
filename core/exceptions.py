"""
Custom exceptions for the ingestion engine with structured error context.

Each exception carries a human-readable message, a context dictionary
(table name, endpoint path, attempt counts, ...) and the original exception
that triggered it, so failures can be logged once with everything needed to
diagnose them.

Exception Hierarchy:
    ETLException (base)
    ├── ExtractionError
    │   └── APIExtractionError
    │       └── NetworkError (retryable)
    ├── SchemaSyncError
    ├── LoadError
    │   └── DatabaseError
    ├── IngestionError
    ├── ConfigurationError (non-retryable)
    └── RetryableError / NonRetryableError (mixins)
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ETLException(Exception):
    """
    Base exception for all ingestion errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (table, path, params, ...)
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
            base_msg += (
                f" | Caused by: {type(self.original_exception).__name__}: "
                f"{str(self.original_exception)}"
            )

        return base_msg

    @property
    def table_name(self) -> Optional[str]:
        """Destination table the error relates to, when known."""
        return self.context.get("table_name")

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

class RetryableError(ETLException):
    """
    Mixin for errors caused by transient conditions.

    Raised after the transport has already spent its own attempts; callers
    may schedule the endpoint again on a later run.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        max_retries: int = 3
    ):
        super().__init__(message, context, original_exception)
        self.max_retries = max_retries


class NonRetryableError(ETLException):
    """Mixin for errors that will not go away by trying again."""
    pass


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(ETLException):
    """Base exception for data extraction failures."""
    pass


class APIExtractionError(ExtractionError):
    """
    Exception raised when the upstream API cannot be read.

    Context should include:
        - path: The API endpoint path
        - status_code: HTTP status code (if applicable)
        - attempts: Number of attempts made
    """
    pass


class NetworkError(RetryableError, APIExtractionError):
    """All transport attempts failed (network error or non-2xx response)."""
    pass


# ============================================================================
# Schema / Load Errors
# ============================================================================

class SchemaSyncError(ETLException):
    """
    Exception raised when a destination table cannot be created or extended.

    Context should include:
        - table_name: Destination table
        - operation: CREATE or ALTER
    """
    pass


class LoadError(ETLException):
    """Base exception for data loading failures."""
    pass


class DatabaseError(LoadError):
    """
    Exception raised when an insert or administrative statement fails.

    Context should include:
        - operation: INSERT, TRUNCATE, DROP
        - table_name: Name of the table
        - batch_size: Rows in the failing batch (for inserts)
    """
    pass


# ============================================================================
# Pipeline Errors
# ============================================================================

class IngestionError(ETLException):
    """
    Single structured error raised by the ingestion pipeline.

    Context includes the destination table, the endpoint path and the
    query parameters of the failing invocation.
    """
    pass


class ConfigurationError(NonRetryableError):
    """Invalid or missing configuration (unknown provider, missing API URL)."""
    pass
