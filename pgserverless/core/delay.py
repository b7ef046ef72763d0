"""
Backoff delay component for the serverless connection.

Computes the decorrelated jitter delay between retry attempts. The formula is
computed as:

    p1 = base - 3 * delay - 1
    p2 = random() * p1
    candidate = floor(p2) + 3 * delay
    result = min(cap, candidate)

With the default tunables (base=2, delay=1000) p1 is negative, so the result
is close to 3 * delay and then capped. Raise base well above delay to get
growing delays.
"""

import math
import random
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


@dataclass(frozen=True)
class DelayConfig:
    """Backoff tunables in milliseconds."""

    backoff_cap_ms: float
    backoff_base_ms: float
    backoff_delay_ms: float


class Delay:
    """Decorrelated jitter delay generator with its own random source."""

    def __init__(self, config: DelayConfig, seed: Optional[int] = None):
        """Initialize the delay generator.

        :param config: The backoff tunables.
        :param seed: Optional seed for a reproducible delay sequence.
        """
        self.config = config
        self.random = random.Random(seed)

    def get_decorrelated_jitter_delay_ms(self) -> int:
        """Return the next delay in whole milliseconds, never below zero."""
        cap_ms = self.config.backoff_cap_ms
        base = self.config.backoff_base_ms
        back_delay = self.config.backoff_delay_ms

        p1 = base - back_delay * 3 - 1
        p2 = self.random.random() * p1
        rand_range = math.floor(p2) + back_delay * 3

        return max(0, int(min(cap_ms, rand_range)))

    def get_delay(self) -> timedelta:
        """Return the next delay as a timedelta."""
        return timedelta(milliseconds=self.get_decorrelated_jitter_delay_ms())


def new_delay(config: DelayConfig, seed: Optional[int] = None) -> Delay:
    """
    Create a new Delay instance.

    :param config: The backoff tunables.
    :param seed: Optional seed for a reproducible delay sequence.
    :returns: Delay instance.
    """
    return Delay(config, seed)
