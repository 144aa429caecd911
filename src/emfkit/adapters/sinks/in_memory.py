"""In-memory sink for tests and local inspection."""

from emfkit.core.context import MetricsContext
from emfkit.core.encoding.emf import LogSerializer
from emfkit.core.ports import SerializerPort


class InMemorySink:
    """Keeps every accepted context and its serialized payloads in lists.

    Suitable for tests where no transport is wanted.
    """

    name = "InMemorySink"

    def __init__(self, serializer: SerializerPort | None = None) -> None:
        self.serializer = serializer or LogSerializer()
        self.contexts: list[MetricsContext] = []
        self.events: list[str] = []

    async def accept(self, context: MetricsContext) -> None:
        """Store the context and its serialized payloads."""
        self.contexts.append(context)
        self.events.extend(self.serializer.serialize(context))

    async def close(self) -> None:
        pass
