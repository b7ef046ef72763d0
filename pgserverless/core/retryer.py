"""
Retryer component for the serverless connection.

This module provides the two retry loops of the connection: retrying the
connection handshake on connection class errors, and reconnecting then redoing
an operation on query class errors. Both loops wait a jittered delay between
attempts and surface the failure of the last attempt.
"""

import threading
import time
from datetime import timedelta
from typing import Callable, Optional, TypeVar

from .delay import Delay
from ..helper.error import ErrorClass, RetryCancelledError, classify_error
from ..helper.logging import ServerlessLogger, get_logger


logger = get_logger(__name__)

T = TypeVar("T")


class Retryer:
    """Attempt based retryer driven by a Delay generator."""

    def __init__(
        self,
        max_retries: int,
        delay: Delay,
        events: Optional[ServerlessLogger] = None,
        cancel_event: Optional[threading.Event] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the retryer.

        :param max_retries: Attempt ceiling, at least one attempt is always made.
        :param delay: The backoff delay generator.
        :param events: Diagnostic logger for retry events.
        :param cancel_event: Optional event that aborts a pending wait when set.
        :param sleep: Blocking sleep used when no cancel event is given.
        :raises ValueError: If max_retries is negative.
        """
        if max_retries < 0:
            raise ValueError("max retries cannot be negative")

        self.max_retries = max_retries
        self.delay = delay
        self.events = events
        self.cancel_event = cancel_event
        self.sleep = sleep

    def _event(self, message: str) -> None:
        if self.events is not None:
            self.events.info(message)

    @property
    def attempts(self) -> int:
        return max(1, self.max_retries)

    def wait(self) -> timedelta:
        """
        Block for the next backoff delay.

        :returns: The delay that was waited.
        :raises RetryCancelledError: If the cancel event is set during the wait.
        """
        delay = self.delay.get_delay()
        seconds = delay.total_seconds()

        if self.cancel_event is not None:
            if self.cancel_event.wait(seconds):
                raise RetryCancelledError(
                    "waiting for retry", Exception("retry cancelled")
                )
        else:
            self.sleep(seconds)

        return delay

    def connect(self, connect: Callable[[], T]) -> T:
        """Attempt to establish a connection up to max_retries times.

        Connection class errors are retried after a backoff delay. The error of
        the last attempt and any other error are raised unchanged.

        :param connect: Function opening the connection.
        :returns: The result of connect.
        """
        for attempt in range(1, self.attempts + 1):
            try:
                return connect()
            except Exception as err:
                if classify_error(err) != ErrorClass.CONNECTION:
                    raise

                if attempt == self.attempts:
                    raise

                delay = self.wait()
                self._event(
                    f"Retry connection...Retry attempt: {attempt} with delay: {delay}"
                )

        # Unreachable, the loop either returns or raises
        raise RuntimeError("connect retry loop exited without result")

    def run(
        self,
        operation: Callable[[], T],
        reconnect: Callable[[], None],
        reconnect_first: bool = False,
    ) -> T:
        """Run an operation, reconnecting and redoing it on query class errors.

        Every attempt after a query class failure first waits, then reconnects,
        then redoes the operation. A connection class failure of the reconnect
        uses up the attempt and the next attempt reconnects again. Any other
        error is raised unchanged. When all attempts fail the last error is raised.

        :param operation: The operation to run, replayed unchanged on redo.
        :param reconnect: Function replacing the underlying connection.
        :param reconnect_first: Whether the current connection is known to be
            broken and must be replaced before the first attempt.
        :returns: The result of the operation.
        """
        last_error: Optional[Exception] = None
        needs_reconnect = reconnect_first

        for attempt in range(1, self.attempts + 1):
            if needs_reconnect:
                # No wait before the very first attempt
                delay = self.wait() if attempt > 1 else timedelta(0)
                try:
                    reconnect()
                except Exception as err:
                    if classify_error(err) != ErrorClass.CONNECTION:
                        raise
                    last_error = err
                    self._event(
                        f"Reconnect failed...Retry attempt: {attempt} with delay: {delay}"
                    )
                    continue

                needs_reconnect = False
                self._event(
                    f"Retry query...Retry attempt: {attempt} with delay: {delay}"
                )

            try:
                return operation()
            except Exception as err:
                if classify_error(err) != ErrorClass.QUERY:
                    raise
                last_error = err
                needs_reconnect = True
                logger.debug(f"Query attempt {attempt}/{self.attempts} failed: {err}")

        assert last_error is not None
        raise last_error
