"""
Activity database handler for the serverless PostgreSQL connection.
Reads pg_stat_activity and terminates idle backends of a user and database.
"""

from typing import List, Optional

from ..helper.database import Database
from ..model.idle_process import IdleProcess


class ActivityDBHandler:
    """
    Activity database handler.
    Always runs on the current connection of the given Database holder.
    """

    def __init__(self, db: Database):
        """Initialize activity database handler."""
        self.db: Database = db

    def select_process_count(self, user: str, database: str) -> int:
        """
        Count the backend processes of a user on a database.

        :param user: The role name.
        :param database: The database name.
        :returns: Number of processes.
        """
        with self.db.get().cursor() as cur:
            cur.execute(
                """
                SELECT COUNT(pid)
                FROM pg_stat_activity
                WHERE datname = %s
                  AND usename = %s;
                """,
                (database, user),
            )
            row = cur.fetchone()
            return int(row[0]) if row else 0

    def select_idle_processes(
        self,
        user: str,
        database: str,
        min_idle_seconds: float,
        limit: Optional[int] = None,
    ) -> List[IdleProcess]:
        """
        Select idle processes of a user on a database that have been idle
        longer than min_idle_seconds.

        :param user: The role name.
        :param database: The database name.
        :param min_idle_seconds: Minimum time since the last state change.
        :param limit: Maximum number of processes, None for no limit.
        :returns: List of IdleProcess in the order the server returns them.
        """
        with self.db.get().cursor() as cur:
            cur.execute(
                """
                WITH processes AS (
                    SELECT
                        EXTRACT(EPOCH FROM (now() - state_change)) AS idle_time,
                        pid
                    FROM pg_stat_activity
                    WHERE usename = %s
                      AND datname = %s
                      AND state = 'idle'
                )
                SELECT pid
                FROM processes
                WHERE idle_time > %s
                LIMIT %s;
                """,
                (user, database, min_idle_seconds, limit),
            )
            return [IdleProcess(pid=int(row[0])) for row in cur.fetchall()]

    def terminate_processes(self, pids: List[int]) -> None:
        """
        Terminate the given processes if they are still idle.
        Processes that are gone or busy by now are skipped by the server.

        :param pids: Process ids to terminate.
        """
        if not pids:
            return

        with self.db.get().cursor() as cur:
            cur.execute(
                """
                SELECT pg_terminate_backend(pid)
                FROM pg_stat_activity
                WHERE pid = ANY(%s)
                  AND state = 'idle';
                """,
                (list(pids),),
            )

    def select_max_connections(self) -> int:
        """
        Read the max_connections setting of the server.

        :returns: The server's connection ceiling.
        """
        with self.db.get().cursor() as cur:
            cur.execute("SHOW max_connections;")
            row = cur.fetchone()
            if row is None:
                raise ValueError("max_connections setting not found")
            return int(row[0])
