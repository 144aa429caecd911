"""Sink that forwards payloads to a CloudWatch agent over TCP or UDP."""

import logging

from emfkit.adapters.sinks.connections import (
    Endpoint,
    TcpClient,
    UdpClient,
    parse_endpoint,
)
from emfkit.core.context import MetricsContext
from emfkit.core.encoding.emf import LogSerializer
from emfkit.core.ports import SerializerPort

logger = logging.getLogger(__name__)


class AgentSink:
    """Sends serialized payloads to a local agent.

    The agent reads the target log group and stream from the ``_aws``
    metadata of each payload.

    Args:
        log_group_name: Log group to write to; empty omits it.
        log_stream_name: Optional log stream.
        endpoint: Agent endpoint such as "tcp://127.0.0.1:25888" or
            "udp://127.0.0.1:25888".
        serializer: Encoder for contexts (default: LogSerializer).
    """

    name = "AgentSink"

    def __init__(
        self,
        log_group_name: str,
        log_stream_name: str | None = None,
        endpoint: str | None = None,
        serializer: SerializerPort | None = None,
    ) -> None:
        self.log_group_name = log_group_name
        self.log_stream_name = log_stream_name
        self.serializer = serializer or LogSerializer()
        self.endpoint: Endpoint = parse_endpoint(endpoint)
        self.client: TcpClient | UdpClient = (
            UdpClient(self.endpoint)
            if self.endpoint.protocol == "udp"
            else TcpClient(self.endpoint)
        )

    async def accept(self, context: MetricsContext) -> None:
        """Serialize the context and send each payload, newline-terminated.

        Raises:
            OSError: If the agent cannot be reached.
        """
        if self.log_group_name:
            context.meta["LogGroupName"] = self.log_group_name
        if self.log_stream_name:
            context.meta["LogStreamName"] = self.log_stream_name

        events = self.serializer.serialize(context)
        logger.debug("Sending %d events to %s", len(events), self.endpoint)
        for event in events:
            await self.client.send_message((event + "\n").encode("utf-8"))

    async def close(self) -> None:
        await self.client.close()
