"""
Data models for the PiSugar status service.

This module defines the Pydantic models for representing the result of a
single status probe and the battery snapshot reported by the service.
"""

from enum import Enum

from pydantic import BaseModel, Field


class PowerState(str, Enum):
    """Whether external power is connected."""
    PLUGGED = "plugged"
    UNPLUGGED = "unplugged"


class ProbeStatus(str, Enum):
    """What a single probe actually observed."""
    PLUGGED = "plugged"
    UNPLUGGED = "unplugged"
    UNAVAILABLE = "unavailable"  # refused, reset or timed out
    MALFORMED = "malformed"  # reply without a usable battery_power_plugged field


class ProbeOutcome(BaseModel):
    """
    Result of querying the status service once.

    Only an explicit ``battery_power_plugged: false`` reply counts as
    unplugged. Failures and unrecognised replies resolve to PLUGGED so a
    broken status service never advances the shutdown countdown.
    """

    status: ProbeStatus
    raw: str | None = None
    error: str | None = None
    latency_ms: int = 0

    @property
    def power_state(self) -> PowerState:
        if self.status == ProbeStatus.UNPLUGGED:
            return PowerState.UNPLUGGED
        return PowerState.PLUGGED

    @property
    def is_failure(self) -> bool:
        return self.status in (ProbeStatus.UNAVAILABLE, ProbeStatus.MALFORMED)


class BatteryStatus(BaseModel):
    """
    Battery snapshot reported by the PiSugar service.
    """

    level: float = Field(..., description="Battery charge in percent")
    plugged: bool
