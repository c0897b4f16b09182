"""
Power-presence probe against the PiSugar status service.

A probe is one isolated request/response exchange. It never raises for I/O
problems: failures come back as UNAVAILABLE or MALFORMED outcomes, both of
which resolve to PLUGGED (fail-open) so they can never accelerate a shutdown.
"""

import logging
import time

from .client import PiSugarClient, PiSugarConnectionError, PiSugarTimeoutError
from .models import ProbeOutcome, ProbeStatus

logger = logging.getLogger(__name__)

PLUGGED_COMMAND = "get battery_power_plugged"
PLUGGED_FIELD = "battery_power_plugged:"
UNPLUGGED_MARKER = "battery_power_plugged: false"


def parse_power_state(reply: str) -> ProbeStatus:
    """
    Classify a status service reply.

    Args:
        reply: Raw reply text.

    Returns:
        UNPLUGGED only when the reply contains ``battery_power_plugged: false``.
        PLUGGED when the field is present with any other value, and MALFORMED
        when the field is missing altogether.
    """
    if UNPLUGGED_MARKER in reply:
        return ProbeStatus.UNPLUGGED
    if PLUGGED_FIELD in reply:
        return ProbeStatus.PLUGGED
    return ProbeStatus.MALFORMED


class StatusProbe:
    """
    Queries the status service for external-power presence.
    """

    def __init__(self, client: PiSugarClient | None = None):
        self.client = client or PiSugarClient()

    async def query(self) -> ProbeOutcome:
        """Run a single probe. No retries are made here."""
        start = time.monotonic()
        try:
            reply = await self.client.request(PLUGGED_COMMAND)
        except PiSugarTimeoutError as e:
            logger.debug("Probe timed out: %s", e)
            return ProbeOutcome(
                status=ProbeStatus.UNAVAILABLE,
                error=f"timeout: {e}",
                latency_ms=_elapsed_ms(start),
            )
        except PiSugarConnectionError as e:
            logger.debug("Probe connection failed: %s", e)
            return ProbeOutcome(
                status=ProbeStatus.UNAVAILABLE,
                error=str(e),
                latency_ms=_elapsed_ms(start),
            )

        status = parse_power_state(reply)
        error = None
        if status == ProbeStatus.MALFORMED:
            error = f"unexpected reply: {reply.strip()!r}" if reply.strip() else "empty reply"
        return ProbeOutcome(status=status, raw=reply, error=error, latency_ms=_elapsed_ms(start))


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
