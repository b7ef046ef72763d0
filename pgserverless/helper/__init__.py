"""
Helper package for pgserverless.
Provides error, logging and database utilities.
"""

from .error import (
    CONNECTION_ERRORS,
    QUERY_ERRORS,
    ErrorClass,
    NotConnectedError,
    RetryCancelledError,
    ServerlessError,
    ValidationError,
    classify_error,
    contains_error,
)

from .database import (
    Database,
    DatabaseConfiguration,
    psycopg_connect,
)

from .logging import (
    ColorFormatter,
    JSONFormatter,
    ServerlessLogger,
    get_logger,
    new_logger,
)

__all__ = [
    # Error handling
    "CONNECTION_ERRORS",
    "QUERY_ERRORS",
    "ErrorClass",
    "NotConnectedError",
    "RetryCancelledError",
    "ServerlessError",
    "ValidationError",
    "classify_error",
    "contains_error",
    # Database utilities
    "Database",
    "DatabaseConfiguration",
    "psycopg_connect",
    # Logging utilities
    "ColorFormatter",
    "JSONFormatter",
    "ServerlessLogger",
    "get_logger",
    "new_logger",
]
