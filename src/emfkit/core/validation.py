"""Validation of names, values and timestamps before they enter a context.

Each function returns None when the input is acceptable and raises one of
the errors from ``emfkit.core.exceptions`` otherwise.
"""

import math
import re
import time
from collections.abc import Mapping
from datetime import datetime, timezone

from emfkit.core import constants
from emfkit.core.exceptions import (
    DimensionSetExceededError,
    InvalidDimensionError,
    InvalidMetricError,
    InvalidNamespaceError,
    InvalidTimestampError,
)
from emfkit.core.models import StorageResolution, Unit

_NAMESPACE_PATTERN = re.compile(constants.VALID_NAMESPACE_REGEX)
_UNIT_NAMES = frozenset(unit.value for unit in Unit)
_RESOLUTION_VALUES = frozenset(resolution.value for resolution in StorageResolution)


def _is_printable_ascii(value: str) -> bool:
    return all(" " <= char <= "~" for char in value)


def validate_dimension_set(
    dimension_set: Mapping[str, str],
    max_size: int = constants.MAX_DIMENSION_SET_SIZE,
) -> None:
    """Validate a single dimension set.

    Args:
        dimension_set: Mapping of dimension name to dimension value.
        max_size: Maximum number of dimensions allowed in the set.

    Raises:
        DimensionSetExceededError: If the set holds more than max_size entries.
        InvalidDimensionError: If any name or value is not acceptable.
    """
    if len(dimension_set) > max_size:
        raise DimensionSetExceededError(
            f"Maximum number of dimensions per dimension set allowed are {max_size}"
        )

    for raw_key, raw_value in dimension_set.items():
        key = str(raw_key)
        value = str(raw_value)

        if not _is_printable_ascii(key):
            raise InvalidDimensionError(f"Dimension key {key} has invalid characters")
        if not _is_printable_ascii(value):
            raise InvalidDimensionError(
                f"Dimension value {value} has invalid characters"
            )
        if not key.strip():
            raise InvalidDimensionError(
                f"Dimension key {key!r} must include at least one non-whitespace character"
            )
        if not value.strip():
            raise InvalidDimensionError(
                f"Dimension value {value!r} must include at least one non-whitespace character"
            )
        if len(key) > constants.MAX_DIMENSION_NAME_LENGTH:
            raise InvalidDimensionError(
                f"Dimension key {key} must not exceed maximum length "
                f"{constants.MAX_DIMENSION_NAME_LENGTH}"
            )
        if len(value) > constants.MAX_DIMENSION_VALUE_LENGTH:
            raise InvalidDimensionError(
                f"Dimension value {value} must not exceed maximum length "
                f"{constants.MAX_DIMENSION_VALUE_LENGTH}"
            )
        if key.startswith(":"):
            raise InvalidDimensionError(f"Dimension key {key} cannot start with ':'")


def validate_namespace(namespace: str) -> None:
    """Validate a metric namespace.

    Raises:
        InvalidNamespaceError: If the namespace is empty, too long, or uses
            characters outside ``[a-zA-Z0-9._#:/-]``.
    """
    if not isinstance(namespace, str) or not namespace.strip():
        raise InvalidNamespaceError(
            f"Namespace must include at least one non-whitespace character: {namespace!r}"
        )
    if len(namespace) > constants.MAX_NAMESPACE_LENGTH:
        raise InvalidNamespaceError(
            f"Namespace must not exceed maximum length {constants.MAX_NAMESPACE_LENGTH}"
        )
    if not _NAMESPACE_PATTERN.match(namespace):
        raise InvalidNamespaceError(
            f"Namespace contains invalid characters: {namespace}"
        )


def validate_metric(
    key: str,
    value: float,
    unit: Unit | str | None = None,
    storage_resolution: StorageResolution | int | None = None,
    metric_name_and_resolution_map: Mapping[str, StorageResolution] | None = None,
) -> None:
    """Validate a metric sample before it is recorded.

    Args:
        key: Metric name.
        value: Sample value.
        unit: Optional CloudWatch unit, as a Unit member or its string name.
        storage_resolution: Optional storage resolution (1 or 60).
        metric_name_and_resolution_map: Resolutions already assigned to metric
            names in the owning context.

    Raises:
        InvalidMetricError: If any part of the metric is not acceptable, or if
            the resolution conflicts with an earlier write of the same name.
    """
    if not isinstance(key, str) or not key.strip():
        raise InvalidMetricError(
            f"Metric key {key!r} must include at least one non-whitespace character"
        )
    if len(key) > constants.MAX_METRIC_NAME_LENGTH:
        raise InvalidMetricError(
            f"Metric key {key} must not exceed maximum length "
            f"{constants.MAX_METRIC_NAME_LENGTH}"
        )
    if key in constants.RESERVED_METRIC_NAMES:
        raise InvalidMetricError(f"Metric key {key} is reserved")

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidMetricError(f"Metric value {value!r} is not a number")
    if not math.isfinite(value):
        raise InvalidMetricError(f"Metric value {value} is not a finite number")
    if value < constants.MIN_METRIC_VALUE or value > constants.MAX_METRIC_VALUE:
        raise InvalidMetricError(
            f"Metric value {value} must be between {constants.MIN_METRIC_VALUE} "
            f"and {constants.MAX_METRIC_VALUE}"
        )

    if unit is not None:
        unit_name = unit.value if isinstance(unit, Unit) else unit
        if unit_name not in _UNIT_NAMES:
            raise InvalidMetricError(f"Metric unit {unit} is not valid")

    if storage_resolution is None:
        return
    if (
        isinstance(storage_resolution, bool)
        or storage_resolution not in _RESOLUTION_VALUES
    ):
        raise InvalidMetricError(
            f"Metric resolution {storage_resolution} is not valid"
        )
    if metric_name_and_resolution_map and key in metric_name_and_resolution_map:
        if metric_name_and_resolution_map[key] != storage_resolution:
            raise InvalidMetricError(
                f"Resolution for metric {key} is already set. A single log event "
                "cannot have a metric with two different resolutions."
            )


def _to_epoch_millis(timestamp: datetime | int | float) -> float:
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return timestamp.timestamp() * 1000
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        raise InvalidTimestampError(f"Timestamp {timestamp!r} is not a valid instant")
    if not math.isfinite(timestamp):
        raise InvalidTimestampError(f"Timestamp {timestamp} is not a valid instant")
    return float(timestamp)


def validate_timestamp(timestamp: datetime | int | float) -> None:
    """Validate a timestamp given as a datetime or epoch milliseconds.

    Naive datetimes are interpreted as UTC.

    Raises:
        InvalidTimestampError: If the timestamp is not a valid instant or falls
            outside the window ``[now - 14 days, now + 2 hours]``.
    """
    millis = _to_epoch_millis(timestamp)
    if millis <= 0:
        raise InvalidTimestampError(f"Timestamp {timestamp!r} is not a valid instant")

    now_millis = time.time() * 1000
    earliest = now_millis - constants.MAX_TIMESTAMP_PAST_AGE_SECONDS * 1000
    latest = now_millis + constants.MAX_TIMESTAMP_FUTURE_AGE_SECONDS * 1000
    if millis < earliest:
        raise InvalidTimestampError(
            f"Timestamp {timestamp} must not be older than 14 days"
        )
    if millis > latest:
        raise InvalidTimestampError(
            f"Timestamp {timestamp} must not be newer than 2 hours"
        )


def convert_timestamp(timestamp: datetime | int | float) -> int:
    """Return epoch milliseconds for a datetime or numeric timestamp."""
    return int(_to_epoch_millis(timestamp))
