"""Embedded Metric Format encoder for metrics contexts.

A context is encoded as one or more JSON log lines. Each line repeats the
namespace, dimensions and properties and carries a bounded share of the
recorded metrics, so that no line exceeds ``max_metrics_per_event`` metric
definitions and no definition carries more than ``max_values_per_metric``
values.
"""

import heapq
import json
from typing import Any

from emfkit.core import constants
from emfkit.core.context import MetricsContext
from emfkit.core.models import StorageResolution


class LogSerializer:
    """Serializes a MetricsContext into EMF JSON strings.

    Args:
        max_metrics_per_event: Metric definitions allowed in one payload.
        max_values_per_metric: Values allowed in one metric definition.
        max_dimensions_per_set: Dimension names emitted for each dimension set.
    """

    def __init__(
        self,
        max_metrics_per_event: int = constants.MAX_METRICS_PER_EVENT,
        max_values_per_metric: int = constants.MAX_VALUES_PER_METRIC,
        max_dimensions_per_set: int = constants.MAX_DIMENSIONS_PER_SET,
    ) -> None:
        self.max_metrics_per_event = max_metrics_per_event
        self.max_values_per_metric = max_values_per_metric
        self.max_dimensions_per_set = max_dimensions_per_set

    def serialize(self, context: MetricsContext) -> list[str]:
        """Encode the context into EMF payloads.

        Args:
            context: The context to encode. It is only read.

        Returns:
            List of newline-free JSON strings. An empty context yields a single
            payload with no metrics.
        """
        dimension_keys: list[list[str]] = []
        dimension_properties: dict[str, str] = {}
        for dimension_set in context.get_dimensions():
            dimension_keys.append(list(dimension_set)[: self.max_dimensions_per_set])
            dimension_properties.update(dimension_set)

        extraction_disabled = context.config.disable_metric_extraction

        def create_body() -> dict[str, Any]:
            body: dict[str, Any] = {**dimension_properties, **context.properties}
            if not extraction_disabled:
                body["_aws"] = {
                    **_aws_meta(context),
                    "CloudWatchMetrics": [
                        {
                            "Dimensions": dimension_keys,
                            "Metrics": [],
                            "Namespace": context.namespace,
                        }
                    ],
                }
            return body

        event_batches: list[str] = []
        current_body = create_body()
        metrics_in_body = 0

        # Max-heap on remaining value count; insertion index breaks ties so that
        # equally sized metrics keep their recording order.
        remaining: list[tuple[int, int, str, int]] = []
        for index, (key, metric) in enumerate(context.metrics.items()):
            remaining.append((-len(metric.values), index, key, 0))
        heapq.heapify(remaining)
        held_aside: list[tuple[int, int, str, int]] = []

        while remaining:
            neg_left, index, key, offset = heapq.heappop(remaining)
            metric = context.metrics[key]
            end = offset + min(-neg_left, self.max_values_per_metric)
            chunk = metric.values[offset:end]

            current_body[key] = chunk[0] if len(metric.values) == 1 else chunk
            if not extraction_disabled:
                definition: dict[str, Any] = {"Name": key, "Unit": metric.unit}
                if metric.storage_resolution == StorageResolution.HIGH:
                    definition["StorageResolution"] = int(metric.storage_resolution)
                current_body["_aws"]["CloudWatchMetrics"][0]["Metrics"].append(
                    definition
                )
            metrics_in_body += 1

            # A partially drained metric waits for the next payload so it is
            # never picked twice in the same one.
            left = len(metric.values) - end
            if left > 0:
                held_aside.append((-left, index, key, end))

            if metrics_in_body == self.max_metrics_per_event or not remaining:
                event_batches.append(_dumps(current_body))
                current_body = create_body()
                metrics_in_body = 0
                for entry in held_aside:
                    heapq.heappush(remaining, entry)
                held_aside = []

        if not event_batches or metrics_in_body > 0:
            event_batches.append(_dumps(current_body))

        return event_batches


def _aws_meta(context: MetricsContext) -> dict[str, Any]:
    meta: dict[str, Any] = {}
    for key, value in context.meta.items():
        if key in ("LogGroupName", "LogStreamName") and not value:
            continue
        meta[key] = value
    return meta


def _dumps(body: dict[str, Any]) -> str:
    return json.dumps(body, separators=(",", ":"))


_default_serializer = LogSerializer()


def serialize(context: MetricsContext) -> list[str]:
    """Encode a context with the default limits."""
    return _default_serializer.serialize(context)
