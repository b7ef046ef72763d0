"""
Connection state model.
"""

from enum import Enum


class ConnState(str, Enum):
    """Lifecycle states of a serverless connection."""

    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    RETRYING = "RETRYING"
    CLOSED = "CLOSED"
