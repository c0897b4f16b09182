"""
Local poweroff execution with logging and error handling.

Runs the configured shutdown command on this machine exactly once. The
command is never retried: once it has been invoked the watchdog has no
further responsibility, so a failure is reported and the process exits.
"""

import asyncio
import logging
import shlex
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from ..config import field_default

logger = logging.getLogger(__name__)


class ShutdownStatus(Enum):
    """Shutdown operation status."""
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"
    SKIPPED = "skipped"  # dry run


class ShutdownActionFailed(Exception):
    """The shutdown command could not be started or reported failure."""
    pass


@dataclass
class ShutdownResult:
    """Result of a shutdown operation."""

    status: ShutdownStatus
    command: str
    exit_code: Optional[int] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    execution_time: Optional[float] = None
    error_message: Optional[str] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)

    @property
    def success(self) -> bool:
        """Whether the shutdown was initiated (or skipped in a dry run)."""
        return self.status in (ShutdownStatus.SUCCESS, ShutdownStatus.SKIPPED)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            'status': self.status.value,
            'command': self.command,
            'exit_code': self.exit_code,
            'stdout': self.stdout,
            'stderr': self.stderr,
            'execution_time': self.execution_time,
            'error_message': self.error_message,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'success': self.success,
        }


class ShutdownExecutor:
    """
    Powers off the local system.

    The executor is one-shot: the first call to execute() runs the command,
    later calls return the first result without running anything.
    """

    def __init__(
        self,
        command: Optional[str] = None,
        timeout: Optional[float] = None,
        dry_run: Optional[bool] = None,
    ):
        self.command = command if command is not None else field_default("SHUTDOWN_COMMAND")
        self.timeout = timeout if timeout is not None else field_default("SHUTDOWN_TIMEOUT")
        self.dry_run = dry_run if dry_run is not None else field_default("DRY_RUN")
        self._result: Optional[ShutdownResult] = None

    @property
    def invoked(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> Optional[ShutdownResult]:
        return self._result

    async def execute(self) -> ShutdownResult:
        """
        Run the shutdown command once.

        Returns:
            Shutdown operation result. Failures are returned, not raised.
        """
        if self._result is not None:
            logger.warning("Shutdown already invoked (%s), not running it again", self._result.status.value)
            return self._result

        if self.dry_run:
            logger.warning("DRY RUN: Would execute '%s'", self.command)
            self._result = ShutdownResult(
                status=ShutdownStatus.SKIPPED,
                command=f"DRY RUN: {self.command}",
                exit_code=0,
                stdout="Dry run - command not executed",
                execution_time=0.0,
            )
            return self._result

        try:
            self._result = await self._run()
        except ShutdownActionFailed as e:
            self._result = ShutdownResult(
                status=ShutdownStatus.FAILED,
                command=self.command,
                error_message=str(e),
            )

        if self._result.success:
            logger.info("Shutdown initiated: '%s'", self.command)
        else:
            logger.error(
                "Shutdown action failed (%s): %s",
                self._result.status.value,
                self._result.error_message,
                extra={"shutdown": self._result.to_dict()},
            )
        return self._result

    async def _run(self) -> ShutdownResult:
        argv = shlex.split(self.command)
        if not argv:
            raise ShutdownActionFailed("Shutdown command is empty")

        logger.info("Executing shutdown command: %s", self.command)
        start = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ShutdownActionFailed(f"Could not start '{argv[0]}': {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            return ShutdownResult(
                status=ShutdownStatus.TIMEOUT,
                command=self.command,
                execution_time=time.monotonic() - start,
                error_message=f"Command timed out after {self.timeout}s",
            )

        exit_code = proc.returncode
        return ShutdownResult(
            status=ShutdownStatus.SUCCESS if exit_code == 0 else ShutdownStatus.FAILED,
            command=self.command,
            exit_code=exit_code,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
            execution_time=time.monotonic() - start,
            error_message=None if exit_code == 0 else f"Command exited with code {exit_code}",
        )
