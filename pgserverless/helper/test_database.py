"""
Database test utilities for pgserverless.
Runs a PostgreSQL testcontainer shared by all tests of a class.
"""

import os
import threading
import time
from typing import Any, List

import psutil
import psycopg
from testcontainers.postgres import PostgresContainer

from .database import DatabaseConfiguration
from .logging import get_logger


logger = get_logger(__name__)


def docker_available() -> bool:
    """Check whether a Docker daemon is reachable for testcontainers."""
    try:
        import docker

        docker.from_env().ping()
        return True
    except Exception:
        return False


class DatabaseTestMixin:
    """
    Simple mixin class for test cases that need a PostgreSQL database container.
    Uses lazy initialization to avoid creating containers during test discovery.
    """

    MAX_CONNECTIONS = 20

    @classmethod
    def setup_class(cls):
        """Set up PostgreSQL container for the entire test class (lazy initialization)."""
        if not hasattr(cls, "_container_initialized"):
            cls.container: PostgresContainer = PostgresContainer(
                "postgres:16-alpine",
                dbname="test_db",
                username="test_user",
                password="test_password",
            ).with_command(f"postgres -c max_connections={cls.MAX_CONNECTIONS}")
            cls.container.start()

            cls.db_config = DatabaseConfiguration(
                host=cls.container.get_container_host_ip(),
                port=int(cls.container.get_exposed_port(5432)),
                database="test_db",
                username="test_user",
                password="test_password",
                sslmode="disable",
            )
            cls.connection_string = cls.db_config.connection_url()
            cls._container_initialized = True

    @classmethod
    def teardown_class(cls):
        """Clean up PostgreSQL container after all tests."""
        if hasattr(cls, "container") and cls.container:
            try:
                cls.container.stop()
            except Exception as e:
                logger.warning(f"Could not stop container: {e}")
            if hasattr(cls, "_container_initialized"):
                delattr(cls, "_container_initialized")

    def setup_method(self, method: Any = None):
        """Set up the list of mock clients for each test method."""
        self.mock_clients: List[psycopg.Connection] = []
        self._initial_thread_count = threading.active_count()

    def teardown_method(self, method: Any = None):
        """Close the mock clients after each test method."""
        self.clean_mock_clients()

        # Give the server time to drop the closed backends
        time.sleep(0.2)

        process = psutil.Process(os.getpid())
        memory_mb = process.memory_info().rss / 1024 / 1024
        thread_diff = threading.active_count() - self._initial_thread_count
        logger.debug(
            f"Test cleanup - Memory: {memory_mb:.1f} MB, thread increase: +{thread_diff}"
        )

    def create_mock_clients(self, n: int) -> List[psycopg.Connection]:
        """
        Open up to n plain clients, stopping silently when the server is full.

        :param n: Number of clients to open.
        :returns: The opened clients.
        """
        clients: List[psycopg.Connection] = []
        for _ in range(n):
            try:
                clients.append(
                    psycopg.connect(self.connection_string, autocommit=True)
                )
            except psycopg.OperationalError:
                break
        self.mock_clients.extend(clients)
        return clients

    def clean_mock_clients(self) -> None:
        """Close every mock client."""
        for client in self.mock_clients:
            client.close()
        self.mock_clients = []
