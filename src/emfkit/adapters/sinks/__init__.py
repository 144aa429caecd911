"""Sink adapters implementing SinkPort."""

from emfkit.adapters.sinks.agent import AgentSink
from emfkit.adapters.sinks.connections import (
    Endpoint,
    TcpClient,
    UdpClient,
    parse_endpoint,
)
from emfkit.adapters.sinks.console import ConsoleSink
from emfkit.adapters.sinks.in_memory import InMemorySink

__all__ = [
    "AgentSink",
    "ConsoleSink",
    "Endpoint",
    "InMemorySink",
    "TcpClient",
    "UdpClient",
    "parse_endpoint",
]
