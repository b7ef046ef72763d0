"""
Database package for the serverless connection.
Provides the pg_stat_activity handler used by the reaper.
"""

from .db_activity import (
    ActivityDBHandler,
)

__all__ = [
    "ActivityDBHandler",
]
