"""
Main ServerlessConn class.

A resilience layer around a single psycopg connection for serverless
functions: connect with jittered retry, reconnect and redo operations when the
server drops the connection, and reap idle connections of the same user and
database when the server gets close to its connection ceiling.
"""

import threading
import time
from typing import Any, Callable, Optional

from psycopg import Connection

from .core.delay import DelayConfig, new_delay
from .core.retryer import Retryer
from .database.db_activity import ActivityDBHandler
from .helper.database import Connector, Database
from .helper.error import ServerlessError
from .helper.logging import ServerlessLogger, new_logger
from .model.config import ConnConfigParams, merge_and_validate, new_default_config
from .model.credential import parse_url
from .model.state import ConnState
from .serverless_clean import ServerlessCleanMixin


def new_serverless_conn(
    params: Optional[ConnConfigParams] = None,
    connector: Optional[Connector] = None,
    cancel_event: Optional[threading.Event] = None,
    seed: Optional[int] = None,
) -> "ServerlessConn":
    """
    Create a new, not yet connected ServerlessConn.

    :param params: Configuration overrides, resolved when connecting.
    :param connector: Function opening a client connection from a connection
        string, defaults to psycopg.connect in autocommit mode.
    :param cancel_event: Event aborting a pending backoff wait when set.
    :param seed: Seed for the backoff jitter.
    :returns: ServerlessConn instance.
    """
    return ServerlessConn(params, connector, cancel_event, seed)


class ServerlessConn(ServerlessCleanMixin):
    """
    Serverless PostgreSQL connection.

    One instance owns exactly one client connection and is meant for one
    function invocation. It is not safe for concurrent use from multiple
    threads beyond the serialization its connection mutex provides.
    """

    def __init__(
        self,
        params: Optional[ConnConfigParams] = None,
        connector: Optional[Connector] = None,
        cancel_event: Optional[threading.Event] = None,
        seed: Optional[int] = None,
        logger: Optional[ServerlessLogger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        __init__ stores the overrides and collaborators; nothing is resolved
        or opened until connect is called.
        """
        super().__init__()

        self.temp_config = params
        self.cancel_event = cancel_event
        self.seed = seed
        self.sleep = sleep

        self.logger = logger or new_logger(debug=False)
        self.database = Database("pgserverless", connector)
        self.db_activity = ActivityDBHandler(self.database)

    def connect(self, connection_string: str) -> "ServerlessConn":
        """
        Resolve the configuration and connect, retrying while the server
        rejects new clients.

        :param connection_string: postgres:// URL or libpq key/value string.
        :returns: The connected instance itself.
        :raises ValidationError: If a configuration override is out of range.
        :raises ServerlessError: If the connection string cannot be parsed or
            connecting fails for good.
        """
        with self.conn_mutex:
            self.config = merge_and_validate(new_default_config(), self.temp_config)

            try:
                self.conn_cred = parse_url(connection_string)
            except Exception as e:
                raise ServerlessError("parsing connection url", e) from e

            self.logger.set_debug(self.config.debug)
            self.delay = new_delay(
                DelayConfig(
                    backoff_cap_ms=self.config.backoff_cap_ms,
                    backoff_base_ms=self.config.backoff_base_ms,
                    backoff_delay_ms=self.config.backoff_delay_ms,
                ),
                self.seed,
            )
            self.retryer = Retryer(
                self.config.max_retries,
                self.delay,
                self.logger,
                self.cancel_event,
                self.sleep,
            )
            self.max_connections_cache = None

            self.state = ConnState.CONNECTING
            try:
                connection = self.retryer.connect(
                    lambda: self.database.open(connection_string)
                )
            except ServerlessError as e:
                self.state = ConnState.DISCONNECTED
                self.logger.failure(e)
                raise
            except Exception as e:
                self.state = ConnState.DISCONNECTED
                error = ServerlessError("connecting to database", e)
                self.logger.failure(error)
                raise error from e

            self.database.replace(connection)
            self.state = ConnState.CONNECTED
            self.logger.info("Connected")

            return self

    def get_connection(self) -> Connection:
        """
        Return the current psycopg connection.
        The connection may be replaced by the next retried operation.

        :raises NotConnectedError: If not connected.
        """
        with self.conn_mutex:
            self._ensure_connected("getting connection")
            return self.database.get()

    def close(self) -> None:
        """
        Close the underlying connection.
        Every later operation raises NotConnectedError.
        """
        with self.conn_mutex:
            self.database.close()
            if self.state != ConnState.CLOSED:
                self.state = ConnState.CLOSED
                self.logger.info("Closed")

    def __enter__(self) -> "ServerlessConn":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
