import asyncio
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from click.testing import CliRunner

from autopoweroff.pisugar.models import ProbeOutcome, ProbeStatus
from autopoweroff.shutdown.executor import ShutdownExecutor, ShutdownResult, ShutdownStatus


def plugged() -> ProbeOutcome:
    return ProbeOutcome(status=ProbeStatus.PLUGGED, raw="battery_power_plugged: true\n")


def unplugged() -> ProbeOutcome:
    return ProbeOutcome(status=ProbeStatus.UNPLUGGED, raw="battery_power_plugged: false\n")


def unavailable() -> ProbeOutcome:
    return ProbeOutcome(status=ProbeStatus.UNAVAILABLE, error="[Errno 111] Connection refused")


def malformed() -> ProbeOutcome:
    return ProbeOutcome(status=ProbeStatus.MALFORMED, raw="", error="empty reply")


class ScriptedProbe:
    """Probe returning a fixed sequence of outcomes."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def query(self) -> ProbeOutcome:
        self.calls += 1
        if not self.outcomes:
            raise AssertionError("probe queried more often than scripted")
        return self.outcomes.pop(0)


@pytest.fixture
def mock_executor():
    """Executor that records calls instead of powering off."""
    executor = MagicMock(spec=ShutdownExecutor)
    executor.command = "poweroff"
    executor.execute = AsyncMock(
        return_value=ShutdownResult(status=ShutdownStatus.SUCCESS, command="poweroff", exit_code=0)
    )
    return executor


@pytest.fixture
def cli_runner():
    return CliRunner()


@asynccontextmanager
async def status_server(reply: bytes | None, hang: bool = False):
    """
    Minimal PiSugar-style server on an ephemeral port.

    Yields ``(port, received)`` where ``received`` collects request lines.
    With ``hang=True`` the server never answers until the context exits.
    """
    received = []
    release = asyncio.Event()

    async def handle(reader, writer):
        received.append(await reader.readline())
        if hang:
            await release.wait()
        try:
            if reply is not None:
                writer.write(reply)
                await writer.drain()
        except ConnectionError:
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield port, received
    finally:
        release.set()
        server.close()
        await server.wait_closed()


@pytest_asyncio.fixture
async def closed_port():
    """A local port with nothing listening on it."""
    server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    server.close()
    await server.wait_closed()
    return port
