"""Amazon ECS environment, including FireLens (fluent-bit) sidecars."""

import logging
import os
import socket
from typing import Any

import httpx

from emfkit.adapters.environment.base import UNKNOWN, BaseEnvironment
from emfkit.adapters.sinks.agent import AgentSink
from emfkit.core.config import Configuration
from emfkit.core.constants import DEFAULT_AGENT_PORT
from emfkit.core.context import MetricsContext
from emfkit.core.ports import SinkPort

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 1.0


def format_image_name(image_name: str | None) -> str | None:
    """Shorten an image reference to its last path segment.

    ``<account>.dkr.ecr.<region>.amazonaws.com/app:latest`` becomes ``app:latest``.
    """
    if image_name:
        return image_name.split("/")[-1]
    return image_name


class ECSEnvironment(BaseEnvironment):
    """Detected from ``ECS_CONTAINER_METADATA_URI``.

    Args:
        config: Library configuration.
        transport: Optional httpx transport, used to stub the metadata endpoint.
    """

    def __init__(
        self,
        config: Configuration | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(config)
        self._transport = transport
        self.metadata: dict[str, Any] | None = None
        self.fluent_bit_endpoint: str | None = None

    async def probe(self) -> bool:
        metadata_uri = os.environ.get("ECS_CONTAINER_METADATA_URI")
        if not metadata_uri:
            return False

        fluent_host = os.environ.get("FLUENT_HOST")
        if fluent_host and not self.config.agent_endpoint:
            self.fluent_bit_endpoint = f"tcp://{fluent_host}:{DEFAULT_AGENT_PORT}"
            logger.debug(
                "Using FluentBit configuration. Endpoint: %s", self.fluent_bit_endpoint
            )

        try:
            async with httpx.AsyncClient(
                timeout=REQUEST_TIMEOUT_SECONDS, transport=self._transport
            ) as client:
                response = await client.get(metadata_uri)
                response.raise_for_status()
                self.metadata = response.json()
            logger.debug("Successfully collected ECS Container metadata.")
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("Failed to collect ECS Container metadata: %s", e)

        # The environment variable alone identifies ECS, metadata or not.
        return True

    def get_name(self) -> str:
        if self.config.service_name:
            return self.config.service_name
        image = format_image_name((self.metadata or {}).get("Image"))
        return image or UNKNOWN

    def get_type(self) -> str:
        return "AWS::ECS::Container"

    def get_log_group_name(self) -> str:
        # FireLens routes logs through its own configuration.
        if self.fluent_bit_endpoint:
            return ""
        return self.config.log_group_name or self.get_name()

    def configure_context(self, context: MetricsContext) -> None:
        metadata = self.metadata or {}
        labels = metadata.get("Labels") or {}
        self._add_property(context, "containerId", socket.gethostname())
        self._add_property(context, "createdAt", metadata.get("CreatedAt"))
        self._add_property(context, "startedAt", metadata.get("StartedAt"))
        self._add_property(context, "image", metadata.get("Image"))
        self._add_property(context, "cluster", labels.get("com.amazonaws.ecs.cluster"))
        self._add_property(
            context, "taskArn", labels.get("com.amazonaws.ecs.task-arn")
        )

        # FireLens needs no LogGroup dimension.
        if self.fluent_bit_endpoint:
            context.set_default_dimensions(
                {
                    "ServiceName": self.config.service_name or self.get_name(),
                    "ServiceType": self.config.service_type or self.get_type(),
                }
            )

    def _create_sink(self) -> SinkPort:
        return AgentSink(
            self.get_log_group_name(),
            endpoint=self.fluent_bit_endpoint or self.config.agent_endpoint,
        )
