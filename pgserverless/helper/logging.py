"""
Logging utilities for the serverless PostgreSQL connection.
Provides the debug gated diagnostic logger and the console formatters.
"""

import json
import logging
import sys
from typing import Any, Optional, TextIO


ERROR_LVL = "ERROR"
NORMAL_LVL = "NORMAL"


class ColorFormatter(logging.Formatter):
    """
    Colored log formatter for console output.
    """

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[95m",  # Magenta
        "INFO": "\033[94m",  # Blue
        "WARNING": "\033[93m",  # Yellow
        "ERROR": "\033[91m",  # Red
        "CRITICAL": "\033[95m",  # Magenta
        "RESET": "\033[0m",  # Reset
    }

    def __init__(self, use_colors: bool = True, include_timestamp: bool = True):
        """
        Initialize the color formatter.

        :param use_colors: Whether to use colors in the output.
        :param include_timestamp: Whether to include timestamps in log messages.
        """
        self.use_colors = use_colors and sys.stdout.isatty()
        self.include_timestamp = include_timestamp

        if include_timestamp:
            fmt = "%(asctime)s %(levelname)s: %(message)s"
        else:
            fmt = "%(levelname)s: %(message)s"

        super().__init__(fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record with colors.

        :param record: The log record to format.
        :returns: The formatted log message string.
        """
        formatted = super().format(record)

        if self.use_colors and record.levelname in self.COLORS:
            color = self.COLORS[record.levelname]
            reset = self.COLORS["RESET"]
            parts = formatted.split(": ", 1)
            if len(parts) == 2:
                level_part, message_part = parts
                formatted = f"{color}{level_part}: {reset}{message_part}"

        return formatted


class JSONFormatter(logging.Formatter):
    """
    Structured formatter writing one indented JSON document per record.
    Records at ERROR or above get the ERROR level, everything else NORMAL.
    """

    def format(self, record: logging.LogRecord) -> str:
        level = ERROR_LVL if record.levelno >= logging.ERROR else NORMAL_LVL
        return json.dumps(
            {"level": level, "message": record.getMessage()}, indent=4
        )


class ServerlessLogger:
    """
    Diagnostic logger for connection events.
    Info and failure events are only emitted when debug is enabled.
    """

    def __init__(
        self,
        name: str = "pgserverless.events",
        debug: bool = False,
        use_json: bool = True,
        use_colors: bool = True,
        stream: Optional[TextIO] = None,
    ):
        """
        Initialize the serverless logger.

        :param name: Logger name.
        :param debug: Whether diagnostic events are emitted.
        :param use_json: Whether to write structured JSON records.
        :param use_colors: Whether to use colored output for plain records.
        :param stream: Output stream (defaults to sys.stdout), only used when
            the named logger has no handler yet.
        """
        self.debug = debug
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Instances sharing a name share the first configured handler
        if not self.logger.handlers:
            handler = logging.StreamHandler(stream or sys.stdout)
            if use_json:
                handler.setFormatter(JSONFormatter())
            else:
                handler.setFormatter(ColorFormatter(use_colors=use_colors))
            self.logger.addHandler(handler)

        self.logger.propagate = False

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Emit an info event with optional context.

        :param message: The event message.
        :param kwargs: Additional context to include in the event.
        """
        self.log_with_context(logging.INFO, message, **kwargs)

    def failure(self, error: BaseException, **kwargs: Any) -> None:
        """
        Emit a failure event for the given error.

        :param error: The error to report.
        :param kwargs: Additional context to include in the event.
        """
        self.log_with_context(logging.ERROR, str(error), **kwargs)

    def log_with_context(self, level: int, message: str, **kwargs: Any) -> None:
        """
        Log message with additional context information if debug is enabled.

        :param level: Logging level.
        :param message: The log message.
        :param kwargs: Additional context to include in the log.
        """
        if not self.debug:
            return

        if kwargs:
            context_parts = [f"{k}={v}" for k, v in kwargs.items()]
            context_str = " | " + " ".join(context_parts)
            message += context_str

        self.logger.log(level, message)

    def set_debug(self, debug: bool) -> None:
        """Enable or disable diagnostic events."""
        self.debug = debug


def new_logger(debug: bool, name: str = "pgserverless.events") -> ServerlessLogger:
    """
    Create the diagnostic logger of a connection.

    :param debug: Whether diagnostic events are emitted.
    :param name: Logger name.
    :returns: ServerlessLogger instance.
    """
    return ServerlessLogger(name=name, debug=debug)


def get_logger(name: str = "pgserverless") -> logging.Logger:
    """
    Get a module logger for internal warnings.
    These are not gated by the debug flag.

    :param name: Logger name.
    :returns: logging.Logger instance.
    """
    return logging.getLogger(name)
