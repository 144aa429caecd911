"""Library configuration, loaded from ``AWS_EMF_*`` environment variables."""

import os
from dataclasses import dataclass

from emfkit.core.constants import DEFAULT_EC2_METADATA_ENDPOINT, DEFAULT_NAMESPACE

ENV_VAR_PREFIX = "AWS_EMF"


@dataclass
class Configuration:
    """Settings shared by loggers, contexts, environments and sinks.

    Attributes:
        debug_logging_enabled: Attach a stderr handler to the emfkit logger.
        service_name: Value of the ServiceName default dimension.
        service_type: Value of the ServiceType default dimension.
        log_group_name: Target log group; an empty string omits it from output.
        log_stream_name: Target log stream (agent sinks only).
        agent_endpoint: CloudWatch agent endpoint, e.g. "tcp://127.0.0.1:25888".
        ec2_metadata_endpoint: Base URL of the EC2 instance metadata service.
        namespace: Namespace used when a context does not set one.
        environment: Environment override ("Local", "Lambda", "Agent", "EC2",
            "ECS"); empty means auto-detect.
        disable_metric_extraction: Emit payloads without the ``_aws`` directive.
        flush_preserve_dimensions: Keep custom dimensions across flushes.
    """

    debug_logging_enabled: bool = False
    service_name: str | None = None
    service_type: str | None = None
    log_group_name: str | None = None
    log_stream_name: str | None = None
    agent_endpoint: str | None = None
    ec2_metadata_endpoint: str = DEFAULT_EC2_METADATA_ENDPOINT
    namespace: str = DEFAULT_NAMESPACE
    environment: str = ""
    disable_metric_extraction: bool = False
    flush_preserve_dimensions: bool = True

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Configuration":
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Configuration with every ``AWS_EMF_<KEY>`` variable applied.
        """
        env = os.environ if environ is None else environ

        def get(key: str) -> str | None:
            return env.get(f"{ENV_VAR_PREFIX}_{key}")

        def get_bool(key: str, fallback: bool) -> bool:
            value = get(key)
            if not value:
                return fallback
            return value.lower() == "true"

        return cls(
            debug_logging_enabled=get_bool("ENABLE_DEBUG_LOGGING", False),
            service_name=get("SERVICE_NAME") or env.get("SERVICE_NAME"),
            service_type=get("SERVICE_TYPE") or env.get("SERVICE_TYPE"),
            log_group_name=get("LOG_GROUP_NAME"),
            log_stream_name=get("LOG_STREAM_NAME"),
            agent_endpoint=get("AGENT_ENDPOINT"),
            ec2_metadata_endpoint=get("EC2_METADATA_ENDPOINT")
            or DEFAULT_EC2_METADATA_ENDPOINT,
            namespace=get("NAMESPACE") or DEFAULT_NAMESPACE,
            environment=get("ENVIRONMENT") or "",
            disable_metric_extraction=get_bool("DISABLE_METRIC_EXTRACTION", False),
            flush_preserve_dimensions=get_bool("FLUSH_PRESERVE_DIMENSIONS", True),
        )


_config: Configuration | None = None


def get_config() -> Configuration:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = Configuration.from_env()
    return _config


def reset_config() -> None:
    """Forget the cached configuration so the next get_config() reloads it."""
    global _config
    _config = None
