"""The mutable aggregate that buffers metrics until they are flushed."""

import logging
import time
from collections.abc import Iterable, Mapping
from datetime import datetime

from emfkit.core import validation
from emfkit.core.config import Configuration, get_config
from emfkit.core.models import (
    DimensionSet,
    MetricValues,
    PropertyValue,
    StorageResolution,
    Unit,
)

logger = logging.getLogger(__name__)


class MetricsContext:
    """Metrics, dimensions and properties recorded for one unit of work.

    A context is owned by a single caller at a time. Use ``empty()`` to start
    a fresh context and ``create_copy_with_context()`` to derive an
    independently flushable child after a flush.

    Attributes:
        namespace: Namespace for every metric in the context.
        properties: Searchable metadata emitted at the top level of payloads.
        metrics: Metric name to accumulated values, in insertion order.
        meta: Entries emitted verbatim inside the ``_aws`` object.
        should_use_default_dimensions: Merge default dimensions on read.
    """

    def __init__(
        self,
        namespace: str | None = None,
        properties: Mapping[str, PropertyValue] | None = None,
        dimensions: Iterable[DimensionSet] | None = None,
        default_dimensions: DimensionSet | None = None,
        should_use_default_dimensions: bool = True,
        timestamp: datetime | int | float | None = None,
        config: Configuration | None = None,
    ) -> None:
        self.config = config or get_config()
        self.namespace: str = namespace or self.config.namespace
        validation.validate_namespace(self.namespace)
        self.properties: dict[str, PropertyValue] = dict(properties or {})
        self.dimensions: list[DimensionSet] = list(dimensions or [])
        self.default_dimensions: DimensionSet = dict(default_dimensions or {})
        self.should_use_default_dimensions = should_use_default_dimensions
        self.metrics: dict[str, MetricValues] = {}
        self.metric_name_and_resolution_map: dict[str, StorageResolution] = {}
        self.timestamp: datetime | int | float | None = timestamp
        self.meta: dict[str, PropertyValue] = {
            "Timestamp": self._timestamp_millis(timestamp)
        }

    @classmethod
    def empty(cls, config: Configuration | None = None) -> "MetricsContext":
        """Create a new context with no metrics, dimensions or properties."""
        return cls(config=config)

    @staticmethod
    def _timestamp_millis(timestamp: datetime | int | float | None) -> int:
        if timestamp is None:
            return int(time.time() * 1000)
        return validation.convert_timestamp(timestamp)

    def set_namespace(self, namespace: str) -> None:
        """Replace the namespace after validating it."""
        validation.validate_namespace(namespace)
        self.namespace = namespace

    def set_property(self, key: str, value: PropertyValue) -> None:
        """Set a property, overwriting any previous value for the key.

        A property that shares a key with a dimension produces ambiguous
        output, so the collision is logged as a warning.
        """
        if any(key in dimension_set for dimension_set in self.dimensions) or (
            key in self.default_dimensions
        ):
            logger.warning(
                "Property %s collides with a dimension of the same name; "
                "the emitted value is ambiguous",
                key,
            )
        self.properties[key] = value

    def set_timestamp(self, timestamp: datetime | int | float) -> None:
        """Set the timestamp used by every subsequent flush of this context."""
        validation.validate_timestamp(timestamp)
        self.timestamp = timestamp
        self.meta["Timestamp"] = validation.convert_timestamp(timestamp)

    def set_default_dimensions(self, dimensions: DimensionSet) -> None:
        """Replace the default dimension set.

        Default dimensions are merged into every custom dimension set when
        ``get_dimensions()`` is called, not when dimensions are recorded.
        """
        logger.debug("Received default dimensions: %s", dimensions)
        self.default_dimensions = dict(dimensions)

    def has_default_dimensions(self) -> bool:
        return bool(self.default_dimensions)

    def put_dimensions(self, dimension_set: DimensionSet) -> None:
        """Add a dimension set.

        An existing set with the same dimension names is removed first, so the
        most recent values win and the set moves to the end of the list.
        """
        validation.validate_dimension_set(dimension_set)
        incoming = {str(k): str(v) for k, v in dimension_set.items()}
        incoming_keys = set(incoming)
        self.dimensions = [
            existing for existing in self.dimensions if set(existing) != incoming_keys
        ]
        self.dimensions.append(incoming)

    def set_dimensions(
        self,
        dimension_sets: Iterable[DimensionSet],
        use_default: bool = False,
    ) -> None:
        """Replace all custom dimension sets.

        Args:
            dimension_sets: The new dimension sets; each one is validated.
            use_default: Whether default dimensions are merged on read.
        """
        dimension_sets = list(dimension_sets)
        for dimension_set in dimension_sets:
            validation.validate_dimension_set(dimension_set)
        self.should_use_default_dimensions = use_default
        self.dimensions = [
            {str(k): str(v) for k, v in dimension_set.items()}
            for dimension_set in dimension_sets
        ]

    def reset_dimensions(self, use_default: bool) -> None:
        """Remove all custom dimension sets."""
        self.should_use_default_dimensions = use_default
        self.dimensions = []

    def get_dimensions(self) -> list[DimensionSet]:
        """Return the dimension sets to emit, with default dimensions merged in.

        Environment detection may supply defaults after dimensions were
        recorded.
        """
        if not self.should_use_default_dimensions:
            return [dict(dimension_set) for dimension_set in self.dimensions]

        if not self.dimensions:
            return [dict(self.default_dimensions)] if self.default_dimensions else []

        return [
            {**self.default_dimensions, **custom} for custom in self.dimensions
        ]

    def put_metric(
        self,
        key: str,
        value: float,
        unit: Unit | str | None = None,
        storage_resolution: StorageResolution | int = StorageResolution.STANDARD,
    ) -> None:
        """Record a metric sample.

        Samples for a name already in the context are appended. A name keeps
        the storage resolution of its first write.

        Raises:
            InvalidMetricError: If the sample fails validation or its
                resolution conflicts with an earlier write.
        """
        validation.validate_metric(
            key, value, unit, storage_resolution, self.metric_name_and_resolution_map
        )
        metric = self.metrics.get(key)
        if metric is not None:
            metric.add_value(value)
        else:
            self.metrics[key] = MetricValues(value, unit, storage_resolution)
        self.metric_name_and_resolution_map[key] = StorageResolution(
            storage_resolution
        )

    def create_copy_with_context(
        self, preserve_dimensions: bool = True
    ) -> "MetricsContext":
        """Create an independently flushable child context.

        The child shares namespace, properties, default dimensions and
        timestamp but starts with no metrics.

        Args:
            preserve_dimensions: Copy the custom dimension sets into the child.
        """
        new_properties = dict(self.properties)
        dimensions = (
            [dict(dimension_set) for dimension_set in self.dimensions]
            if preserve_dimensions
            else []
        )
        child = MetricsContext(
            namespace=self.namespace,
            properties=new_properties,
            dimensions=dimensions,
            default_dimensions=self.default_dimensions,
            should_use_default_dimensions=self.should_use_default_dimensions,
            timestamp=self.timestamp,
            config=self.config,
        )
        return child
