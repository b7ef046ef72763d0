"""
Core components of the serverless connection: backoff delay and retry loops.
"""

from .delay import Delay, DelayConfig, new_delay
from .retryer import Retryer

__all__ = [
    'Delay',
    'DelayConfig',
    'new_delay',
    'Retryer',
]
