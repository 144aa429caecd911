"""Core domain models for recorded metrics."""

from enum import Enum, IntEnum
from typing import Any


class StorageResolution(IntEnum):
    """Granularity, in seconds, at which CloudWatch stores a metric."""

    STANDARD = 60
    HIGH = 1


class Unit(str, Enum):
    """CloudWatch metric units."""

    SECONDS = "Seconds"
    MICROSECONDS = "Microseconds"
    MILLISECONDS = "Milliseconds"
    BYTES = "Bytes"
    KILOBYTES = "Kilobytes"
    MEGABYTES = "Megabytes"
    GIGABYTES = "Gigabytes"
    TERABYTES = "Terabytes"
    BITS = "Bits"
    KILOBITS = "Kilobits"
    MEGABITS = "Megabits"
    GIGABITS = "Gigabits"
    TERABITS = "Terabits"
    PERCENT = "Percent"
    COUNT = "Count"
    BYTES_PER_SECOND = "Bytes/Second"
    KILOBYTES_PER_SECOND = "Kilobytes/Second"
    MEGABYTES_PER_SECOND = "Megabytes/Second"
    GIGABYTES_PER_SECOND = "Gigabytes/Second"
    TERABYTES_PER_SECOND = "Terabytes/Second"
    BITS_PER_SECOND = "Bits/Second"
    KILOBITS_PER_SECOND = "Kilobits/Second"
    MEGABITS_PER_SECOND = "Megabits/Second"
    GIGABITS_PER_SECOND = "Gigabits/Second"
    TERABITS_PER_SECOND = "Terabits/Second"
    COUNT_PER_SECOND = "Count/Second"
    NONE = "None"


# JSON-compatible values that may be attached to a payload as properties.
PropertyValue = str | int | float | bool | None | list[Any] | dict[str, Any]

DimensionSet = dict[str, str]


class MetricValues:
    """Accumulated samples for a single metric name.

    Attributes:
        values: Samples in the order they were recorded.
        unit: CloudWatch unit name (e.g., "Seconds").
        storage_resolution: Resolution fixed at the first write.
    """

    def __init__(
        self,
        value: float,
        unit: Unit | str | None = None,
        storage_resolution: StorageResolution | int = StorageResolution.STANDARD,
    ) -> None:
        self.values: list[float] = [value]
        self.unit = _unit_name(unit)
        self.storage_resolution = StorageResolution(storage_resolution)

    def add_value(self, value: float) -> None:
        """Append a sample."""
        self.values.append(value)

    def __repr__(self) -> str:
        return (
            f"MetricValues(values={self.values!r}, unit={self.unit!r}, "
            f"storage_resolution={self.storage_resolution.name})"
        )


def _unit_name(unit: Unit | str | None) -> str:
    if unit is None:
        return Unit.NONE.value
    if isinstance(unit, Unit):
        return unit.value
    return str(unit)
