"""
Error handling utilities for the serverless PostgreSQL connection.
Provides the wrapped error type and the retry classification of driver errors.
"""

import inspect
from enum import Enum
from types import FrameType
from typing import Iterable, List, Optional


TOO_MANY_CLIENTS_ERR = "sorry, too many clients already"
TERMINATING_CONNECTION_ERR = "terminating connection due to administrator command"

# Errors raised while establishing a connection that are worth retrying
CONNECTION_ERRORS: List[str] = [TOO_MANY_CLIENTS_ERR]
CONNECTION_SQLSTATES: List[str] = ["53300"]

# Errors raised on an established connection that require reconnect and redo
QUERY_ERRORS: List[str] = [TERMINATING_CONNECTION_ERR]
QUERY_SQLSTATES: List[str] = ["57P01"]


class ErrorClass(str, Enum):
    """Retry class of an error."""

    CONNECTION = "connection"
    QUERY = "query"
    OTHER = "other"


class ServerlessError(Exception):
    """
    Error class with trace information.
    Wrapping a ServerlessError again keeps the innermost original error
    and appends the new context to the trace.
    """

    def __init__(
        self,
        trace: str,
        original: Exception,
        error_class: Optional[ErrorClass] = None,
    ):
        """Initialize ServerlessError with original error and trace."""
        traceWithFunction = trace
        current_frame = inspect.currentframe()

        frame: Optional[FrameType] = None
        if current_frame is not None:
            frame = current_frame.f_back
            # Skip constructors of subclasses
            while frame is not None and frame.f_code.co_name == "__init__":
                frame = frame.f_back

        if frame:
            traceWithFunction = f"{frame.f_code.co_name} - {trace}"

        if isinstance(original, ServerlessError):
            self.original = original.original
            self.trace = original.trace + [traceWithFunction]
            self.error_class = error_class or original.error_class
        else:
            self.original = original
            self.trace = [traceWithFunction]
            self.error_class = error_class or classify_error(original)

        super().__init__(str(self.original))

    def __str__(self) -> str:
        """Return formatted error message with trace."""
        return f"{str(self.original)} | Trace: {', '.join(self.trace)}"


class NotConnectedError(ServerlessError):
    """Raised when an operation is issued without an open connection."""

    def __init__(self, trace: str):
        super().__init__(trace, Exception("not connected"), ErrorClass.OTHER)


class RetryCancelledError(ServerlessError):
    """Raised when a pending backoff wait is cancelled by the caller."""

    def __init__(self, trace: str, last_error: Optional[Exception] = None):
        super().__init__(
            trace, last_error or Exception("retry cancelled"), ErrorClass.OTHER
        )


class ValidationError(ValueError):
    """Raised when a configuration override is out of range."""


def contains_error(messages: Iterable[str], error: BaseException) -> bool:
    """
    Check if the error message contains one of the given messages.

    :param messages: Substrings to look for.
    :param error: The error to check.
    :returns: True if any message is part of the error text.
    """
    text = str(error)
    for message in messages:
        if message in text:
            return True
    return False


def classify_error(error: BaseException) -> ErrorClass:
    """
    Classify a driver error into its retry class.
    Matches on the SQLSTATE when the driver reports one and on the message text
    otherwise, since connection failures are often reported without a code.

    :param error: The error raised by the client library.
    :returns: The ErrorClass of the error.
    """
    if isinstance(error, ServerlessError):
        return error.error_class

    sqlstate = getattr(error, "sqlstate", None)
    if sqlstate in CONNECTION_SQLSTATES or contains_error(CONNECTION_ERRORS, error):
        return ErrorClass.CONNECTION
    if sqlstate in QUERY_SQLSTATES or contains_error(QUERY_ERRORS, error):
        return ErrorClass.QUERY
    return ErrorClass.OTHER
