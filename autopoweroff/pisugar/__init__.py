"""
PiSugar status service integration.

Provides the line-protocol client and the power-presence probe used by the
shutdown watchdog.
"""

from autopoweroff.pisugar.client import (
    PiSugarClient,
    PiSugarConnectionError,
    PiSugarError,
    PiSugarResponseError,
    PiSugarTimeoutError,
)
from autopoweroff.pisugar.models import BatteryStatus, PowerState, ProbeOutcome, ProbeStatus
from autopoweroff.pisugar.probe import StatusProbe, parse_power_state

__all__ = [
    "BatteryStatus",
    "PiSugarClient",
    "PiSugarConnectionError",
    "PiSugarError",
    "PiSugarResponseError",
    "PiSugarTimeoutError",
    "PowerState",
    "ProbeOutcome",
    "ProbeStatus",
    "StatusProbe",
    "parse_power_state",
]
