"""Fallback environment that ships payloads to a CloudWatch agent."""

from emfkit.adapters.environment.base import BaseEnvironment
from emfkit.adapters.sinks.agent import AgentSink
from emfkit.core.ports import SinkPort


class DefaultEnvironment(BaseEnvironment):
    """Used when no other environment is detected."""

    async def probe(self) -> bool:
        return True

    def _create_sink(self) -> SinkPort:
        return AgentSink(
            self.get_log_group_name(),
            self.config.log_stream_name,
            endpoint=self.config.agent_endpoint,
        )
