"""Socket clients used by the agent sink."""

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import urlparse

from emfkit.core.constants import DEFAULT_AGENT_HOST, DEFAULT_AGENT_PORT

logger = logging.getLogger(__name__)

SUPPORTED_PROTOCOLS = ("tcp", "udp")


@dataclass(frozen=True)
class Endpoint:
    """Address of a CloudWatch agent listener."""

    host: str
    port: int
    protocol: str


DEFAULT_ENDPOINT = Endpoint(DEFAULT_AGENT_HOST, DEFAULT_AGENT_PORT, "tcp")


def parse_endpoint(endpoint: str | None) -> Endpoint:
    """Parse an endpoint such as ``tcp://127.0.0.1:25888``.

    Missing or malformed endpoints fall back to the default TCP endpoint.
    """
    if not endpoint:
        return DEFAULT_ENDPOINT

    try:
        parsed = urlparse(endpoint)
        port = parsed.port
    except ValueError:
        logger.warning("Failed to parse the provided agent endpoint %s", endpoint)
        return DEFAULT_ENDPOINT

    if not parsed.hostname or not port or parsed.scheme not in SUPPORTED_PROTOCOLS:
        logger.warning("Failed to parse the provided agent endpoint %s", endpoint)
        return DEFAULT_ENDPOINT

    return Endpoint(host=parsed.hostname, port=port, protocol=parsed.scheme)


class TcpClient:
    """Sends messages over a lazily opened, reused TCP connection."""

    def __init__(self, endpoint: Endpoint) -> None:
        self._endpoint = endpoint
        self._writer: asyncio.StreamWriter | None = None
        self._lock: asyncio.Lock | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def _get_lock(self) -> asyncio.Lock:
        """Get or create the send lock (lazy to avoid event loop issues).

        Connections and locks belong to one event loop; a client reused from
        another loop (e.g. successive ``asyncio.run`` calls) starts over.
        """
        loop = asyncio.get_running_loop()
        if self._lock is None or self._loop is not loop:
            self._discard_writer()
            self._lock = asyncio.Lock()
            self._loop = loop
        return self._lock

    def _discard_writer(self) -> None:
        """Drop a connection opened on a previous event loop."""
        writer, self._writer = self._writer, None
        if writer is None or self._loop is None:
            return
        # A closed loop can no longer run the transport's close callbacks.
        if self._loop.is_closed():
            logger.debug("TcpClient dropped a connection from a closed event loop")
            return
        writer.transport.abort()

    async def _connect(self) -> asyncio.StreamWriter:
        _, writer = await asyncio.open_connection(
            self._endpoint.host, self._endpoint.port
        )
        logger.debug("TcpClient connected to %s", self._endpoint)
        return writer

    async def send_message(self, message: bytes) -> None:
        """Write a message, reconnecting once if the connection was dropped."""
        async with self._get_lock():
            for attempt in range(2):
                if self._writer is None or self._writer.is_closing():
                    self._writer = await self._connect()
                try:
                    self._writer.write(message)
                    await self._writer.drain()
                    return
                except (ConnectionError, OSError):
                    await self.close()
                    if attempt == 1:
                        raise
                    logger.debug("TcpClient write failed, reconnecting")

    async def close(self) -> None:
        """Close the connection if one is open."""
        writer, self._writer = self._writer, None
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError):
            logger.debug("TcpClient connection closed with an error")


class _DatagramSender(asyncio.DatagramProtocol):
    def __init__(self) -> None:
        self.error: Exception | None = None

    def error_received(self, exc: Exception) -> None:
        self.error = exc


class UdpClient:
    """Sends each message as a single UDP datagram."""

    def __init__(self, endpoint: Endpoint) -> None:
        self._endpoint = endpoint

    async def send_message(self, message: bytes) -> None:
        loop = asyncio.get_running_loop()
        transport, protocol = await loop.create_datagram_endpoint(
            _DatagramSender,
            remote_addr=(self._endpoint.host, self._endpoint.port),
        )
        try:
            transport.sendto(message)
        finally:
            transport.close()
        if protocol.error is not None:
            logger.warning("UdpClient failed to send: %s", protocol.error)

    async def close(self) -> None:
        """Nothing to release; each datagram uses its own transport."""
