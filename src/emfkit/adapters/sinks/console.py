"""Sink that writes payloads to stdout for log-based collection."""

import sys
from typing import TextIO

from emfkit.core.context import MetricsContext
from emfkit.core.encoding.emf import LogSerializer
from emfkit.core.ports import SerializerPort


class ConsoleSink:
    """Writes each serialized payload as one line to a stream.

    Used where a platform collects stdout into CloudWatch Logs (Lambda,
    local development).

    Args:
        serializer: Encoder for contexts (default: LogSerializer).
        stream: Stream to write to. Defaults to ``sys.stdout`` at write time.
    """

    name = "ConsoleSink"

    def __init__(
        self,
        serializer: SerializerPort | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.serializer = serializer or LogSerializer()
        self._stream = stream

    async def accept(self, context: MetricsContext) -> None:
        """Serialize the context and print every payload."""
        stream = self._stream or sys.stdout
        for event in self.serializer.serialize(context):
            stream.write(event + "\n")
        stream.flush()

    async def close(self) -> None:
        pass
