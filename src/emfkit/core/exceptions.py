"""Exceptions raised when recorded data violates format constraints."""


class EmfError(Exception):
    """Base class for all emfkit errors."""


class DimensionSetExceededError(EmfError):
    """A dimension set holds more dimensions than allowed."""


class InvalidDimensionError(EmfError, ValueError):
    """A dimension name or value fails character-set, length or emptiness checks."""


class InvalidMetricError(EmfError, ValueError):
    """A metric name, value, unit or storage resolution is not valid."""


class InvalidNamespaceError(EmfError, ValueError):
    """A namespace fails length, character-set or emptiness checks."""


class InvalidTimestampError(EmfError, ValueError):
    """A timestamp is unparsable or outside the accepted window."""
