"""
Clean methods for the serverless connection.

Reaps idle connections of the connection's own user and database once the
number of processes crosses max_connections * connection_utilization_threshold,
so that a burst of cold starts does not keep the server at its ceiling.
"""

import time
from typing import List

from .model.idle_process import IdleProcess
from .serverless_query import ServerlessQueryMixin


class ServerlessCleanMixin(ServerlessQueryMixin):
    """
    Mixin class containing the idle connection reaper.
    """

    def __init__(self):
        super().__init__()

    def get_process_count(self) -> int:
        """Count the processes of the connection's user and database."""
        return self._run(
            "counting processes",
            lambda: self.db_activity.select_process_count(
                self.conn_cred.user, self.conn_cred.database
            ),
        )

    def get_idle_processes(self) -> List[IdleProcess]:
        """
        Select the idle processes of the connection's user and database that
        have been idle longer than min_idle_seconds, at most
        max_idle_connections_to_kill of them.
        """
        return self._run(
            "selecting idle processes",
            lambda: self.db_activity.select_idle_processes(
                self.conn_cred.user,
                self.conn_cred.database,
                self.config.min_idle_seconds,
                self.config.max_idle_connections_to_kill,
            ),
        )

    def terminate_processes(self, pids: List[int]) -> None:
        """Terminate the given processes if they are still idle."""
        self._run(
            "terminating processes",
            lambda: self.db_activity.terminate_processes(pids),
        )

    def get_max_connections(self) -> int:
        """
        Return the connection ceiling used for the utilization check.

        With manual_max_connections the configured max_connections is used.
        Otherwise the server setting is read and cached for
        max_connections_poll_interval_ms.
        """
        if self.config.manual_max_connections:
            return self.config.max_connections

        with self.conn_mutex:
            now = time.monotonic()
            age_ms = (now - self.max_connections_cache_time) * 1000
            if (
                self.max_connections_cache is None
                or age_ms >= self.config.max_connections_poll_interval_ms
            ):
                self.max_connections_cache = self._run(
                    "reading max connections",
                    self.db_activity.select_max_connections,
                )
                self.max_connections_cache_time = now
                self.logger.info(f"Max connections: {self.max_connections_cache}")

            return self.max_connections_cache

    def clean(self) -> int:
        """
        Terminate idle connections if the utilization is over the threshold.

        :returns: Number of processes selected for termination, 0 when the
            utilization is at or below the threshold.
        :raises ServerlessError: If a query fails for good.
        """
        with self.conn_mutex:
            count = self.get_process_count()
            self.logger.info(f"Total processes: {count}")

            max_connections = self.get_max_connections()
            if count <= max_connections * self.config.connection_utilization_threshold:
                return 0

            processes = self.get_idle_processes()
            pids = [process.pid for process in processes]
            self.terminate_processes(pids)

            self.logger.info(f"Killed processes: {len(pids)}")
            return len(pids)
