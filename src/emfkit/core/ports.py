"""Port interfaces for serializers, sinks and runtime environments.

These protocols define the contracts that adapters must implement.
The core depends only on these interfaces, not concrete implementations.
"""

from typing import Protocol, runtime_checkable

from emfkit.core.context import MetricsContext


@runtime_checkable
class SerializerPort(Protocol):
    """Port for turning a context into wire-format strings.

    Examples: LogSerializer.
    """

    def serialize(self, context: MetricsContext) -> list[str]:
        """Encode the context into one or more complete payloads."""
        ...


@runtime_checkable
class SinkPort(Protocol):
    """Port for delivering a flushed context.

    Adapters implementing this protocol serialize the context and transport
    the payloads. Examples: ConsoleSink, AgentSink, InMemorySink.
    """

    name: str

    async def accept(self, context: MetricsContext) -> None:
        """Serialize and deliver the context."""
        ...

    async def close(self) -> None:
        """Release any connection held by the sink."""
        ...


@runtime_checkable
class EnvironmentPort(Protocol):
    """Port for a runtime environment the library can detect.

    Examples: LambdaEnvironment, ECSEnvironment, EC2Environment.
    """

    async def probe(self) -> bool:
        """Return True if the process is running in this environment."""
        ...

    def get_name(self) -> str:
        """Return the service name, used for the ServiceName dimension."""
        ...

    def get_type(self) -> str:
        """Return the service type, used for the ServiceType dimension."""
        ...

    def get_log_group_name(self) -> str:
        """Return the log group name; empty means omit it from payloads."""
        ...

    def configure_context(self, context: MetricsContext) -> None:
        """Add environment-specific properties or dimensions to the context."""
        ...

    def get_sink(self) -> SinkPort:
        """Return the sink that delivers payloads in this environment."""
        ...
