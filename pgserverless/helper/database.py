"""
Database helper functions for the serverless PostgreSQL connection.
Wraps the single psycopg connection owned by a serverless connection.
"""

import os
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import quote

import psycopg
from psycopg import Connection

from .error import NotConnectedError
from .logging import get_logger


logger = get_logger(__name__)

Connector = Callable[[str], Any]


@dataclass
class DatabaseConfiguration:
    """
    Database configuration class.
    Builds the connection URL handed to the serverless connection.
    """

    host: str
    port: int
    database: str
    username: str
    password: str
    sslmode: str = "require"
    application_name: str = "pgserverless"

    @classmethod
    def from_env(cls) -> "DatabaseConfiguration":
        """Create configuration from environment variables."""
        host = os.getenv("PGSERVERLESS_DB_HOST", "localhost")
        port = int(os.getenv("PGSERVERLESS_DB_PORT", "5432"))
        database = os.getenv("PGSERVERLESS_DB_DATABASE", "postgres")
        username = os.getenv("PGSERVERLESS_DB_USERNAME", "postgres")
        password = os.getenv("PGSERVERLESS_DB_PASSWORD", "")
        sslmode = os.getenv("PGSERVERLESS_DB_SSLMODE", "require")

        # Validate required fields
        if not all([host.strip(), database.strip(), username.strip()]):
            raise ValueError(
                "Required environment variables missing: "
                "PGSERVERLESS_DB_HOST, PGSERVERLESS_DB_DATABASE, "
                "PGSERVERLESS_DB_USERNAME must be set"
            )

        return cls(
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            sslmode=sslmode,
        )

    def connection_url(self) -> str:
        """Get the postgres:// connection URL."""
        return (
            f"postgres://{quote(self.username, safe='')}:"
            f"{quote(self.password, safe='')}@{self.host}:{self.port}/"
            f"{quote(self.database, safe='')}"
            f"?sslmode={self.sslmode}&application_name={self.application_name}"
        )


def psycopg_connect(connection_string: str) -> Connection:
    """
    Open a psycopg connection in autocommit mode.
    Autocommit keeps the session in the 'idle' state between statements, which
    is what the idle scan of other instances looks for.
    """
    return psycopg.connect(connection_string, autocommit=True)


class Database:
    """
    Holder of the single client connection.
    The instance is replaced as a whole on reconnect, never mutated.
    """

    def __init__(self, name: str, connector: Optional[Connector] = None):
        """Initialize database holder."""
        self.name = name
        self.connector: Connector = connector or psycopg_connect
        self.instance: Optional[Connection] = None

    def open(self, connection_string: str) -> Connection:
        """
        Open a new client connection without installing it.

        :param connection_string: The connection URL or key/value string.
        :returns: The new client connection.
        """
        return self.connector(connection_string)

    def replace(self, connection: Connection) -> None:
        """
        Install a new connection, closing the previous one.
        The previous connection is usually already broken, so a failing close
        is logged and not raised.
        """
        old = self.instance
        self.instance = connection

        if old is not None and old is not connection:
            try:
                old.close()
            except psycopg.Error as e:
                logger.warning(f"Could not close replaced connection: {e}")

    def get(self) -> Connection:
        """
        Return the current connection.

        :raises NotConnectedError: If no connection is open.
        """
        if self.instance is None:
            raise NotConnectedError("getting connection")
        return self.instance

    def close(self) -> None:
        """Close the database connection."""
        if self.instance is not None:
            self.instance.close()
            self.instance = None
            logger.debug(f"Database connection {self.name} closed")
