"""Base class for runtime environments."""

import logging

from emfkit.core.config import Configuration, get_config
from emfkit.core.context import MetricsContext
from emfkit.core.ports import SinkPort

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


class BaseEnvironment:
    """Shared behaviour for environment adapters.

    Subclasses override ``probe()``, ``_create_sink()`` and whichever of the
    name, type and log group lookups differ from the configured defaults.
    """

    def __init__(self, config: Configuration | None = None) -> None:
        self.config = config or get_config()
        self._sink: SinkPort | None = None

    async def probe(self) -> bool:
        return False

    def get_name(self) -> str:
        if not self.config.service_name:
            logger.debug("Unknown ServiceName.")
            return UNKNOWN
        return self.config.service_name

    def get_type(self) -> str:
        if not self.config.service_type:
            logger.debug("Unknown ServiceType.")
            return UNKNOWN
        return self.config.service_type

    def get_log_group_name(self) -> str:
        # An explicitly empty log group is honored rather than defaulted.
        if self.config.log_group_name == "":
            return ""
        return self.config.log_group_name or f"{self.get_name()}-metrics"

    def configure_context(self, context: MetricsContext) -> None:
        """Add nothing by default."""

    def get_sink(self) -> SinkPort:
        """Return the environment's sink, creating it on first use."""
        if self._sink is None:
            self._sink = self._create_sink()
        return self._sink

    def _create_sink(self) -> SinkPort:
        raise NotImplementedError

    @staticmethod
    def _add_property(context: MetricsContext, key: str, value: str | None) -> None:
        if value:
            context.set_property(key, value)
