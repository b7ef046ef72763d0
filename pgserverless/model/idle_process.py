"""
Idle process model.
One row of the idle scan in pg_stat_activity, alive only during a reap cycle.
"""

from dataclasses import dataclass


@dataclass
class IdleProcess:
    """
    Represents an idle backend process that may be terminated.
    """

    pid: int

    def __post_init__(self):
        """Validate the process after initialization."""
        if self.pid < 0:
            raise ValueError("PID cannot be negative")
