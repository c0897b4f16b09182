"""
Shutdown action for autopoweroff.

Provides the one-shot local poweroff invoked when the grace period runs out.
"""

from autopoweroff.shutdown.executor import (
    ShutdownActionFailed,
    ShutdownExecutor,
    ShutdownResult,
    ShutdownStatus,
)

__all__ = ["ShutdownActionFailed", "ShutdownExecutor", "ShutdownResult", "ShutdownStatus"]
