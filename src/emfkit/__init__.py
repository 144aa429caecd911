"""emfkit - CloudWatch Embedded Metric Format instrumentation.

Record metrics, dimensions and properties into a context and flush them as
EMF log lines to stdout or a CloudWatch agent.
"""

from emfkit.adapters.environment import (
    DefaultEnvironment,
    EC2Environment,
    ECSEnvironment,
    EnvironmentDetector,
    LambdaEnvironment,
    LocalEnvironment,
)
from emfkit.adapters.sinks import AgentSink, ConsoleSink, InMemorySink
from emfkit.core.config import Configuration, get_config
from emfkit.core.context import MetricsContext
from emfkit.core.encoding.emf import LogSerializer, serialize
from emfkit.core.exceptions import (
    DimensionSetExceededError,
    EmfError,
    InvalidDimensionError,
    InvalidMetricError,
    InvalidNamespaceError,
    InvalidTimestampError,
)
from emfkit.core.logger import MetricsLogger
from emfkit.core.models import MetricValues, StorageResolution, Unit
from emfkit.core.ports import EnvironmentPort, SerializerPort, SinkPort
from emfkit.factory import create_metrics_logger
from emfkit.scope import metric_scope

__all__ = [
    # Core
    "Configuration",
    "MetricValues",
    "MetricsContext",
    "MetricsLogger",
    "StorageResolution",
    "Unit",
    "get_config",
    # Encoding
    "LogSerializer",
    "serialize",
    # Errors
    "DimensionSetExceededError",
    "EmfError",
    "InvalidDimensionError",
    "InvalidMetricError",
    "InvalidNamespaceError",
    "InvalidTimestampError",
    # Ports
    "EnvironmentPort",
    "SerializerPort",
    "SinkPort",
    # Sinks
    "AgentSink",
    "ConsoleSink",
    "InMemorySink",
    # Environments
    "DefaultEnvironment",
    "EC2Environment",
    "ECSEnvironment",
    "EnvironmentDetector",
    "LambdaEnvironment",
    "LocalEnvironment",
    # Entry points
    "create_metrics_logger",
    "metric_scope",
]
