"""
Shutdown watchdog for autopoweroff.

Counts down a grace period while external power is absent and powers the
system off when it runs out.
"""

from autopoweroff.watchdog.core import ShutdownWatchdog, TickResult, WatchdogState
from autopoweroff.watchdog.timer import WatchdogTimer

__all__ = ["ShutdownWatchdog", "TickResult", "WatchdogState", "WatchdogTimer"]
