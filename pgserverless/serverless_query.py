"""
Query methods for the serverless connection.
Every operation runs through the retryer, which reconnects and redoes the
operation when the server drops the connection mid-query.
"""

from typing import Any, Callable, List, Optional, Sequence, TypeVar, Union

from psycopg import Connection

from .helper.error import (
    ErrorClass,
    RetryCancelledError,
    ServerlessError,
    classify_error,
)
from .model.state import ConnState
from .serverless_global import ServerlessGlobalMixin

T = TypeVar("T")

Params = Optional[Union[Sequence[Any], dict]]


class ServerlessQueryMixin(ServerlessGlobalMixin):
    """
    Mixin class containing the operation wrappers of the serverless connection.
    Not safe for use from multiple threads without the connection mutex, which
    every method here holds for the whole retry loop.
    """

    def __init__(self):
        super().__init__()

    def reconnect(self) -> None:
        """
        Replace the current connection with a new one to the stored URL.

        :raises Exception: The client library error if connecting fails.
        """
        with self.conn_mutex:
            self.state = ConnState.RETRYING
            connection = self.database.open(self.conn_cred.url)
            self.database.replace(connection)
            self.state = ConnState.CONNECTED

    def _run(self, name: str, operation: Callable[[], T]) -> T:
        with self.conn_mutex:
            self._ensure_connected(name)
            try:
                return self.retryer.run(
                    operation,
                    self.reconnect,
                    reconnect_first=self.state == ConnState.RETRYING,
                )
            except ServerlessError as e:
                # Cancelled while waiting to replace a dropped connection
                if isinstance(e, RetryCancelledError):
                    self.state = ConnState.RETRYING
                self.logger.failure(e)
                raise
            except Exception as e:
                # The handle is dead, the next operation reconnects first
                if classify_error(e) == ErrorClass.QUERY:
                    self.state = ConnState.RETRYING
                error = ServerlessError(name, e)
                self.logger.failure(error)
                raise error from e

    def run(self, operation: Callable[[Connection], T], name: str = "run") -> T:
        """
        Run an operation against the current connection with retry.
        The operation is called again with the new connection after a reconnect,
        so it must not hold on to the connection it was given.

        :param operation: Function receiving the psycopg connection.
        :param name: Name used in the error trace.
        :returns: The result of the operation.
        :raises ServerlessError: If the operation fails for good.
        """
        return self._run(name, lambda: operation(self.database.get()))

    def query(self, sql: Any, params: Params = None) -> List[Any]:
        """
        Execute a query and return all rows.

        :param sql: The query to execute.
        :param params: Query parameters.
        :returns: The fetched rows.
        :raises ServerlessError: If the query fails for good.
        """

        def operation() -> List[Any]:
            with self.database.get().cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchall()

        return self._run("query", operation)

    def query_row(self, sql: Any, params: Params = None) -> Optional[Any]:
        """
        Execute a query and return the first row, None if there is none.

        :param sql: The query to execute.
        :param params: Query parameters.
        :returns: The first row or None.
        :raises ServerlessError: If the query fails for good.
        """

        def operation() -> Optional[Any]:
            with self.database.get().cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchone()

        return self._run("query_row", operation)

    def execute(self, sql: Any, params: Params = None) -> str:
        """
        Execute a statement and return its command tag, for example "SELECT 1".

        :param sql: The statement to execute.
        :param params: Statement parameters.
        :returns: The command status of the statement.
        :raises ServerlessError: If the statement fails for good.
        """

        def operation() -> str:
            with self.database.get().cursor() as cur:
                cur.execute(sql, params)
                return cur.statusmessage or ""

        return self._run("execute", operation)
