"""Fluent recording API over a MetricsContext."""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from emfkit.core.context import MetricsContext
from emfkit.core.models import DimensionSet, PropertyValue, StorageResolution, Unit
from emfkit.core.ports import EnvironmentPort

logger = logging.getLogger(__name__)

EnvironmentProvider = Callable[[], Awaitable[EnvironmentPort]]


class MetricsLogger:
    """Records metrics into a context and flushes it to the environment's sink.

    Every recording method returns the logger so calls can be chained:

        ```python
        metrics.put_dimensions({"Operation": "Checkout"}).put_metric(
            "Latency", 120, Unit.MILLISECONDS
        )
        await metrics.flush()
        ```

    Args:
        resolve_environment: Coroutine function returning the environment
            that supplies default dimensions and the sink.
        context: Context to record into (default: a new empty context).
    """

    def __init__(
        self,
        resolve_environment: EnvironmentProvider,
        context: MetricsContext | None = None,
    ) -> None:
        self.resolve_environment = resolve_environment
        self.context = context or MetricsContext.empty()
        self.flush_preserve_dimensions = self.context.config.flush_preserve_dimensions

    async def flush(self) -> None:
        """Send the current context to the sink and start a new one.

        The new context keeps namespace, properties and timestamp. Custom
        dimensions are kept unless ``flush_preserve_dimensions`` is False.
        """
        environment = await self.resolve_environment()
        logger.debug("Resolved environment %s", type(environment).__name__)
        self._configure_context_for_environment(environment)
        sink = environment.get_sink()

        # The next window starts even if the sink fails.
        context = self.context
        self.context = context.create_copy_with_context(self.flush_preserve_dimensions)
        await sink.accept(context)

    def _configure_context_for_environment(self, environment: EnvironmentPort) -> None:
        if not self.context.has_default_dimensions():
            default_dimensions = {
                "ServiceName": environment.get_name(),
                "ServiceType": environment.get_type(),
            }
            log_group_name = environment.get_log_group_name()
            if log_group_name:
                default_dimensions = {"LogGroup": log_group_name, **default_dimensions}
            self.context.set_default_dimensions(default_dimensions)
        environment.configure_context(self.context)

    def set_property(self, key: str, value: PropertyValue) -> "MetricsLogger":
        """Set a property on the published metrics.

        Properties are searchable in the log event but are not charged as
        metrics, which suits high-cardinality values such as request ids.
        """
        self.context.set_property(key, value)
        return self

    def put_dimensions(self, dimensions: DimensionSet) -> "MetricsLogger":
        """Add a dimension set; see MetricsContext.put_dimensions()."""
        self.context.put_dimensions(dimensions)
        return self

    def set_dimensions(
        self, *dimension_sets: DimensionSet, use_default: bool = False
    ) -> "MetricsLogger":
        """Overwrite all dimension sets on this logger."""
        self.context.set_dimensions(dimension_sets, use_default)
        return self

    def reset_dimensions(self, use_default: bool) -> "MetricsLogger":
        """Clear all custom dimension sets."""
        self.context.reset_dimensions(use_default)
        return self

    def set_namespace(self, namespace: str) -> "MetricsLogger":
        self.context.set_namespace(namespace)
        return self

    def set_timestamp(self, timestamp: datetime | int | float) -> "MetricsLogger":
        self.context.set_timestamp(timestamp)
        return self

    def put_metric(
        self,
        key: str,
        value: float,
        unit: Unit | str | None = None,
        storage_resolution: StorageResolution | int = StorageResolution.STANDARD,
    ) -> "MetricsLogger":
        """Record a metric value; see MetricsContext.put_metric()."""
        self.context.put_metric(key, value, unit, storage_resolution)
        return self

    def new(self) -> "MetricsLogger":
        """Create a logger that shares this logger's context data.

        The two loggers can then be flushed independently.
        """
        return MetricsLogger(
            self.resolve_environment, self.context.create_copy_with_context()
        )
