"""
Test cases for logging utilities.
"""

import io
import json
import logging
import unittest

from .logging import (
    ColorFormatter,
    JSONFormatter,
    ServerlessLogger,
    get_logger,
    new_logger,
)


class TestColorFormatter(unittest.TestCase):
    """Test cases for ColorFormatter class."""

    def test_init_without_colors(self):
        """Test ColorFormatter initialization with colors disabled."""
        formatter = ColorFormatter(use_colors=False, include_timestamp=False)
        self.assertFalse(formatter.use_colors)
        self.assertFalse(formatter.include_timestamp)

    def test_format_without_timestamp(self):
        """Test formatting without timestamp."""
        formatter = ColorFormatter(use_colors=False, include_timestamp=False)

        record = logging.LogRecord(
            name="test",
            level=logging.ERROR,
            pathname="",
            lineno=0,
            msg="Error message",
            args=(),
            exc_info=None,
        )

        self.assertEqual(formatter.format(record), "ERROR: Error message")


class TestJSONFormatter(unittest.TestCase):
    """Test cases for JSONFormatter class."""

    def _record(self, level: int, msg: str) -> logging.LogRecord:
        return logging.LogRecord(
            name="test",
            level=level,
            pathname="",
            lineno=0,
            msg=msg,
            args=(),
            exc_info=None,
        )

    def test_info_is_normal_level(self):
        """Test info records are written with the NORMAL level."""
        formatted = JSONFormatter().format(self._record(logging.INFO, "Connected"))
        self.assertEqual(json.loads(formatted), {"level": "NORMAL", "message": "Connected"})

    def test_error_is_error_level(self):
        """Test error records are written with the ERROR level."""
        formatted = JSONFormatter().format(self._record(logging.ERROR, "boom"))
        self.assertEqual(json.loads(formatted), {"level": "ERROR", "message": "boom"})

    def test_output_is_indented(self):
        """Test records are pretty printed with four spaces."""
        formatted = JSONFormatter().format(self._record(logging.INFO, "x"))
        self.assertIn('\n    "level": "NORMAL"', formatted)


class TestServerlessLogger(unittest.TestCase):
    """Test cases for ServerlessLogger class."""

    def setUp(self):
        """Set up test fixtures."""
        self.stream = io.StringIO()

    def test_debug_disabled_emits_nothing(self):
        """Test no events are written without debug."""
        logger = ServerlessLogger(name="test.silent", stream=self.stream)
        logger.info("Connected")
        logger.failure(ValueError("failed"))

        self.assertEqual(self.stream.getvalue(), "")

    def test_info_event(self):
        """Test info events are written as NORMAL records."""
        logger = ServerlessLogger(name="test.info", debug=True, stream=self.stream)
        logger.info("Connected")

        record = json.loads(self.stream.getvalue())
        self.assertEqual(record, {"level": "NORMAL", "message": "Connected"})

    def test_failure_event(self):
        """Test failure events carry the error message."""
        logger = ServerlessLogger(name="test.failure", debug=True, stream=self.stream)
        logger.failure(RuntimeError("too many clients"))

        record = json.loads(self.stream.getvalue())
        self.assertEqual(record, {"level": "ERROR", "message": "too many clients"})

    def test_event_with_context(self):
        """Test context is appended to the message."""
        logger = ServerlessLogger(
            name="test.context",
            debug=True,
            use_json=False,
            use_colors=False,
            stream=self.stream,
        )
        logger.info("Killed processes", count=3)

        self.assertIn("INFO: Killed processes | count=3", self.stream.getvalue())

    def test_set_debug(self):
        """Test enabling debug after creation."""
        logger = ServerlessLogger(name="test.toggle", stream=self.stream)
        logger.info("hidden")
        logger.set_debug(True)
        logger.info("shown")

        output = self.stream.getvalue()
        self.assertNotIn("hidden", output)
        self.assertIn("shown", output)

    def test_no_duplicate_handlers(self):
        """Test that no duplicate handlers are added."""
        logger1 = ServerlessLogger(name="test.handlers", stream=self.stream)
        initial_handler_count = len(logger1.logger.handlers)

        logger2 = ServerlessLogger(name="test.handlers", stream=self.stream)
        self.assertEqual(initial_handler_count, len(logger2.logger.handlers))

    def test_second_instance_keeps_first_stream(self):
        """Test a second logger with the same name does not redirect the first one."""
        other_stream = io.StringIO()
        logger1 = ServerlessLogger(name="test.shared", debug=True, stream=self.stream)
        ServerlessLogger(name="test.shared", debug=True, stream=other_stream)

        logger1.info("Connected")

        record = json.loads(self.stream.getvalue())
        self.assertEqual(record["message"], "Connected")
        self.assertEqual(other_stream.getvalue(), "")


class TestLoggerFunctions(unittest.TestCase):
    """Test cases for module-level logger functions."""

    def test_new_logger(self):
        """Test new_logger sets the debug flag."""
        logger = new_logger(True, name="test.new")
        self.assertIsInstance(logger, ServerlessLogger)
        self.assertTrue(logger.debug)

    def test_get_logger(self):
        """Test get_logger returns a standard logger."""
        logger = get_logger("pgserverless.test")
        self.assertIsInstance(logger, logging.Logger)
        self.assertEqual(logger.name, "pgserverless.test")


if __name__ == "__main__":
    unittest.main()
