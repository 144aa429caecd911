"""Environment for local development, selected only by override."""

from emfkit.adapters.environment.base import BaseEnvironment
from emfkit.adapters.sinks.console import ConsoleSink
from emfkit.core.ports import SinkPort


class LocalEnvironment(BaseEnvironment):
    """Prints payloads to stdout. Never auto-detected."""

    async def probe(self) -> bool:
        return False

    def _create_sink(self) -> SinkPort:
        return ConsoleSink()
