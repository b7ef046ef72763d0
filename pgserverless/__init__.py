"""
pgserverless - A resilience layer for PostgreSQL connections in serverless functions

Wraps a single psycopg connection and provides:
- Connecting with decorrelated jitter backoff while the server is full
- Reconnecting and redoing operations when the server drops the connection
- Reaping idle connections of the same user and database near the ceiling
- Debug gated structured diagnostics
"""

from ._version import __version__

__author__ = "pgserverless contributors"

# Core exports
from .serverless import (
    ServerlessConn,
    new_serverless_conn,
)

from .helper.database import (
    DatabaseConfiguration,
)

from .model.config import (
    ConnConfig,
    ConnConfigParams,
)

from .model.credential import (
    ConnCredential,
)

from .model.idle_process import (
    IdleProcess,
)

from .model.state import (
    ConnState,
)

from .helper.error import (
    ErrorClass,
    NotConnectedError,
    RetryCancelledError,
    ServerlessError,
    ValidationError,
)

# Import submodules for direct access
from . import core
from . import database
from . import helper
from . import model

__all__ = [
    # Core classes
    "ServerlessConn",
    "new_serverless_conn",
    # Configuration
    "ConnConfig",
    "ConnConfigParams",
    "DatabaseConfiguration",
    # Models
    "ConnCredential",
    "IdleProcess",
    "ConnState",
    # Exceptions
    "ErrorClass",
    "NotConnectedError",
    "RetryCancelledError",
    "ServerlessError",
    "ValidationError",
    # Submodules
    "core",
    "database",
    "helper",
    "model",
    # Version info
    "__version__",
    "__author__",
]
