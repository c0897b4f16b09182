"""
Countdown owned by the shutdown watchdog.
"""

import math
from dataclasses import dataclass, field


@dataclass
class WatchdogTimer:
    """
    Remaining grace period, counted in ticks.

    ``remaining`` stays within ``[0, grace_ticks]``. It only ever drops by one
    tick or jumps back to ``grace_ticks``.
    """

    grace_ticks: int
    tick_interval: float = 1.0
    remaining: int = field(init=False)

    def __post_init__(self):
        if self.grace_ticks < 1:
            raise ValueError(f"grace_ticks must be at least 1, got {self.grace_ticks}")
        if self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {self.tick_interval}")
        self.remaining = self.grace_ticks

    @classmethod
    def from_seconds(cls, grace_period: float, tick_interval: float) -> "WatchdogTimer":
        """Build a timer for a grace period given in seconds."""
        if tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {tick_interval}")
        # round first so 0.3 / 0.1 does not become 4 ticks
        ticks = math.ceil(round(grace_period / tick_interval, 9))
        return cls(grace_ticks=max(ticks, 1), tick_interval=tick_interval)

    @property
    def grace_period(self) -> float:
        return self.grace_ticks * self.tick_interval

    @property
    def remaining_seconds(self) -> float:
        return self.remaining * self.tick_interval

    @property
    def is_full(self) -> bool:
        return self.remaining == self.grace_ticks

    @property
    def expired(self) -> bool:
        return self.remaining <= 0

    def decrement(self) -> int:
        """Consume one tick of the grace period."""
        if self.remaining > 0:
            self.remaining -= 1
        return self.remaining

    def reset(self) -> int:
        """Refill the grace period."""
        self.remaining = self.grace_ticks
        return self.remaining
