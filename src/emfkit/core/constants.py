"""Limits and defaults for the Embedded Metric Format."""

MAX_DIMENSION_SET_SIZE = 30
MAX_DIMENSION_NAME_LENGTH = 250
MAX_DIMENSION_VALUE_LENGTH = 1024
MAX_METRIC_NAME_LENGTH = 1024

# Top-level payload key that carries the metric directive.
RESERVED_METRIC_NAMES = frozenset({"_aws"})

MAX_NAMESPACE_LENGTH = 256
VALID_NAMESPACE_REGEX = r"^[a-zA-Z0-9._#:/-]+$"

# Largest magnitude CloudWatch accepts for a metric value.
MAX_METRIC_VALUE = 2.3485425827738332e108
MIN_METRIC_VALUE = -MAX_METRIC_VALUE

# Serializer limits
MAX_METRICS_PER_EVENT = 100
MAX_VALUES_PER_METRIC = 100
# Dimension names emitted per set; sets may store more (up to MAX_DIMENSION_SET_SIZE).
MAX_DIMENSIONS_PER_SET = 10

# Timestamps outside [now - 14 days, now + 2 hours] are rejected.
MAX_TIMESTAMP_PAST_AGE_SECONDS = 14 * 24 * 60 * 60
MAX_TIMESTAMP_FUTURE_AGE_SECONDS = 2 * 60 * 60

DEFAULT_NAMESPACE = "aws-embedded-metrics"
DEFAULT_AGENT_HOST = "127.0.0.1"
DEFAULT_AGENT_PORT = 25888
DEFAULT_EC2_METADATA_ENDPOINT = "http://169.254.169.254"
