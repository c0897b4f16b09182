"""
Battery-aware shutdown watchdog.

This module contains the ShutdownWatchdog class. It polls the PiSugar status
service once per tick, counts down while external power is absent, and powers
the system off when the grace period runs out. A single plugged-in reading
refills the grace period.

Probe failures are treated as plugged in: an unreachable or confused status
service never advances the countdown. Prolonged failures are only reported.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import Settings, field_default
from ..pisugar.client import PiSugarClient
from ..pisugar.models import PowerState, ProbeOutcome, ProbeStatus
from ..pisugar.probe import StatusProbe
from ..shutdown.executor import ShutdownExecutor, ShutdownResult, ShutdownStatus
from .timer import WatchdogTimer

logger = logging.getLogger(__name__)


class WatchdogState(str, Enum):
    """Watchdog lifecycle."""
    FULL = "full"  # grace period untouched
    COUNTING = "counting"
    TERMINAL = "terminal"  # shutdown invoked


@dataclass
class TickResult:
    """What happened during one tick."""

    tick: int
    outcome: ProbeOutcome
    remaining: int
    remaining_seconds: float
    state: WatchdogState

    @property
    def power_state(self) -> PowerState:
        return self.outcome.power_state


class ShutdownWatchdog:
    """
    Counts down a grace period while external power is absent.
    """

    def __init__(
        self,
        probe: Optional[StatusProbe] = None,
        executor: Optional[ShutdownExecutor] = None,
        timer: Optional[WatchdogTimer] = None,
        status_lost_after: Optional[float] = None,
    ):
        """
        Initialize the watchdog.

        Args:
            probe: Power-presence probe, queried once per tick.
            executor: One-shot shutdown action.
            timer: Countdown, created full.
            status_lost_after: Seconds of consecutive probe failures before the
                status service is reported as lost.
        """
        self.probe = probe or StatusProbe()
        self.executor = executor or ShutdownExecutor()
        self.timer = timer or WatchdogTimer.from_seconds(
            field_default("GRACE_PERIOD_SECONDS"),
            field_default("TICK_INTERVAL_SECONDS"),
        )
        if status_lost_after is None:
            status_lost_after = field_default("STATUS_LOST_AFTER_SECONDS")
        self.status_lost_after = status_lost_after
        self.ticks = 0
        self.last_tick: Optional[TickResult] = None
        self.shutdown_result: Optional[ShutdownResult] = None
        self.is_disconnected = False
        self._failing_since: Optional[float] = None
        self._terminated = False
        self._should_stop = asyncio.Event()

    @classmethod
    def from_settings(cls, config: Settings) -> "ShutdownWatchdog":
        """Wire a watchdog and its collaborators from settings."""
        client = PiSugarClient(
            host=config.STATUS_HOST,
            port=config.STATUS_PORT,
            timeout=config.PROBE_TIMEOUT,
        )
        executor = ShutdownExecutor(
            command=config.SHUTDOWN_COMMAND,
            timeout=config.SHUTDOWN_TIMEOUT,
            dry_run=config.DRY_RUN,
        )
        timer = WatchdogTimer.from_seconds(config.GRACE_PERIOD_SECONDS, config.TICK_INTERVAL_SECONDS)
        return cls(
            probe=StatusProbe(client),
            executor=executor,
            timer=timer,
            status_lost_after=config.STATUS_LOST_AFTER_SECONDS,
        )

    @property
    def state(self) -> WatchdogState:
        if self._terminated:
            return WatchdogState.TERMINAL
        if self.timer.is_full:
            return WatchdogState.FULL
        return WatchdogState.COUNTING

    @property
    def terminated(self) -> bool:
        return self._terminated

    @property
    def remaining(self) -> int:
        return self.timer.remaining

    @property
    def remaining_seconds(self) -> float:
        return self.timer.remaining_seconds

    def stop(self) -> None:
        """
        Ask the loop to exit.

        Interrupts the wait between ticks. A stop requested before run() makes
        run() return without ticking.
        """
        self._should_stop.set()

    async def _wait_next_tick(self) -> None:
        try:
            await asyncio.wait_for(self._should_stop.wait(), timeout=self.timer.tick_interval)
        except asyncio.TimeoutError:
            pass

    async def run(self) -> Optional[ShutdownResult]:
        """
        Tick until the grace period runs out or stop() is called.

        Returns:
            The shutdown result, or None if the loop was stopped first.
        """
        if self._terminated:
            logger.warning("Watchdog already terminated, not starting again.")
            return self.shutdown_result

        logger.info(
            "Starting shutdown watchdog: grace period %ss, tick %ss",
            self.timer.grace_period,
            self.timer.tick_interval,
        )
        while not self._should_stop.is_set():
            try:
                await self.tick()
            except Exception:
                logger.exception("An unexpected error occurred in the watchdog loop.")

            if self._terminated:
                break

            await self._wait_next_tick()

        if not self._terminated:
            logger.info("Shutdown watchdog stopped.")
        return self.shutdown_result

    async def tick(self) -> TickResult:
        """Probe once, update the countdown and shut down if it ran out."""
        if self._terminated:
            logger.debug("Tick ignored, watchdog already terminated.")
            return self.last_tick

        self.ticks += 1
        outcome = await self._probe()
        self._track_status_service(outcome)

        if outcome.power_state == PowerState.UNPLUGGED:
            self.timer.decrement()
            logger.warning(
                "Power is not plugged in, shutting down in %g seconds",
                self.timer.remaining_seconds,
                extra=self._log_fields(outcome),
            )
        else:
            self.timer.reset()
            if outcome.is_failure:
                logger.warning(
                    "Status service %s (%s), assuming power is plugged in",
                    outcome.status.value,
                    outcome.error,
                    extra=self._log_fields(outcome),
                )
            else:
                logger.info("Power is plugged in", extra=self._log_fields(outcome))

        if self.timer.expired:
            self._terminated = True
            logger.error(
                "Power has not been plugged in for %g seconds, shutting down",
                self.timer.grace_period,
                extra=self._log_fields(outcome),
            )
            self.shutdown_result = await self._shutdown()

        self.last_tick = TickResult(
            tick=self.ticks,
            outcome=outcome,
            remaining=self.timer.remaining,
            remaining_seconds=self.timer.remaining_seconds,
            state=self.state,
        )
        return self.last_tick

    async def _probe(self) -> ProbeOutcome:
        try:
            return await self.probe.query()
        except Exception as e:
            logger.exception("Probe raised unexpectedly.")
            return ProbeOutcome(status=ProbeStatus.UNAVAILABLE, error=f"unexpected error: {e}")

    async def _shutdown(self) -> ShutdownResult:
        try:
            return await self.executor.execute()
        except Exception as e:
            logger.exception("Shutdown action raised unexpectedly.")
            return ShutdownResult(
                status=ShutdownStatus.FAILED,
                command=str(getattr(self.executor, "command", "unknown")),
                error_message=str(e),
            )

    def _track_status_service(self, outcome: ProbeOutcome) -> None:
        """Report the status service as lost after prolonged probe failures."""
        now = time.monotonic()
        if not outcome.is_failure:
            if self.is_disconnected:
                logger.info("Status service reachable again.")
            self.is_disconnected = False
            self._failing_since = None
            return

        if self._failing_since is None:
            self._failing_since = now
        if not self.is_disconnected and now - self._failing_since >= self.status_lost_after:
            self.is_disconnected = True
            logger.critical(
                "Status service unreachable for %.0f seconds; power loss cannot be detected.",
                now - self._failing_since,
            )

    def _log_fields(self, outcome: ProbeOutcome) -> dict:
        return {
            "tick": self.ticks,
            "power_state": outcome.power_state.value,
            "probe_status": outcome.status.value,
            "remaining_seconds": self.timer.remaining_seconds,
            "watchdog_state": self.state.value,
        }
