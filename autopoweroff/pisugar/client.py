"""
PiSugar status service client.

The PiSugar server speaks a plain-text line protocol on a local TCP port:
the client writes one command such as ``get battery_power_plugged`` and the
server answers with ``battery_power_plugged: true`` before closing. Each
command uses its own short-lived connection; nothing is reused between calls.
"""

import asyncio
import logging

from ..config import field_default
from .models import BatteryStatus

logger = logging.getLogger(__name__)

MAX_RESPONSE_BYTES = 4096


class PiSugarError(Exception):
    """Base exception for PiSugar client errors."""
    pass


class PiSugarConnectionError(PiSugarError):
    """Exception for connection errors (refused, reset, unreachable)."""
    pass


class PiSugarTimeoutError(PiSugarConnectionError):
    """The service did not answer within the read timeout."""
    pass


class PiSugarResponseError(PiSugarError):
    """The service answered with something that could not be parsed."""
    pass


class PiSugarClient:
    """
    An asynchronous client for the PiSugar status service.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the PiSugar client.

        Args:
            host: The status service address.
            port: The status service port.
            timeout: Upper bound in seconds for a whole exchange.
        """
        self.host = host if host is not None else field_default("STATUS_HOST")
        self.port = port if port is not None else field_default("STATUS_PORT")
        self.timeout = timeout if timeout is not None else field_default("PROBE_TIMEOUT")

    async def request(self, command: str) -> str:
        """
        Send one command and return the full reply.

        Args:
            command: The command line to send, without the trailing newline.

        Returns:
            The decoded reply text.

        Raises:
            PiSugarTimeoutError: If connecting or reading exceeded the timeout.
            PiSugarConnectionError: If the connection failed.
        """
        try:
            return await asyncio.wait_for(self._exchange(command), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise PiSugarTimeoutError(
                f"No reply to '{command}' from {self.host}:{self.port} within {self.timeout}s"
            ) from e
        except OSError as e:
            raise PiSugarConnectionError(
                f"Failed to send '{command}' to {self.host}:{self.port}: {e}"
            ) from e

    async def _exchange(self, command: str) -> str:
        reader, writer = await asyncio.open_connection(self.host, self.port)
        try:
            writer.write(f"{command}\n".encode())
            await writer.drain()
            if writer.can_write_eof():
                writer.write_eof()
            chunks = []
            received = 0
            while received < MAX_RESPONSE_BYTES:
                data = await reader.read(MAX_RESPONSE_BYTES - received)
                if not data:
                    break
                chunks.append(data)
                received += len(data)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass
        text = b"".join(chunks).decode("utf-8", errors="replace")
        logger.debug("PiSugar reply to '%s': %r", command, text)
        return text

    async def get_power_plugged(self) -> bool:
        """
        Ask whether external power is connected.

        Raises:
            PiSugarConnectionError: If the service could not be reached.
            PiSugarResponseError: If the reply had no value.
        """
        reply = await self.request("get battery_power_plugged")
        return _field_value(reply, "battery_power_plugged") == "true"

    async def get_battery_level(self) -> float:
        """
        Read the battery charge in percent.

        Raises:
            PiSugarConnectionError: If the service could not be reached.
            PiSugarResponseError: If the reply was not a number.
        """
        reply = await self.request("get battery")
        value = _field_value(reply, "battery")
        try:
            return float(value)
        except ValueError as e:
            raise PiSugarResponseError(f"Invalid battery level in reply: {reply!r}") from e

    async def get_battery_status(self) -> BatteryStatus:
        """Read both the battery level and the plug state."""
        level = await self.get_battery_level()
        plugged = await self.get_power_plugged()
        return BatteryStatus(level=level, plugged=plugged)


def _field_value(reply: str, field: str) -> str:
    """Extract the value from a ``field: value`` reply."""
    for line in reply.splitlines():
        name, sep, value = line.partition(":")
        if sep and name.strip() == field:
            value = value.strip()
            if value:
                return value
    raise PiSugarResponseError(f"No '{field}' value in reply: {reply!r}")
