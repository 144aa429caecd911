"""Amazon EC2 environment, detected through the instance metadata service."""

import logging
from typing import Any

import httpx

from emfkit.adapters.environment.base import UNKNOWN, BaseEnvironment
from emfkit.adapters.sinks.agent import AgentSink
from emfkit.core.config import Configuration
from emfkit.core.context import MetricsContext
from emfkit.core.ports import SinkPort

logger = logging.getLogger(__name__)

TOKEN_PATH = "/latest/api/token"
IDENTITY_DOCUMENT_PATH = "/latest/dynamic/instance-identity/document"
TOKEN_TTL_HEADER = "X-aws-ec2-metadata-token-ttl-seconds"
TOKEN_HEADER = "X-aws-ec2-metadata-token"
TOKEN_TTL_SECONDS = "21600"
REQUEST_TIMEOUT_SECONDS = 1.0


class EC2Environment(BaseEnvironment):
    """Detected when the instance identity document can be fetched.

    Args:
        config: Library configuration.
        transport: Optional httpx transport, used to stub the metadata service.
    """

    def __init__(
        self,
        config: Configuration | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(config)
        self._transport = transport
        self.metadata: dict[str, Any] | None = None

    async def probe(self) -> bool:
        try:
            self.metadata = await self._fetch_identity_document()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("EC2 metadata unavailable: %s", e)
            return False
        return bool(self.metadata)

    async def _fetch_identity_document(self) -> dict[str, Any]:
        base_url = self.config.ec2_metadata_endpoint.rstrip("/")
        async with httpx.AsyncClient(
            base_url=base_url,
            timeout=REQUEST_TIMEOUT_SECONDS,
            transport=self._transport,
        ) as client:
            token_response = await client.put(
                TOKEN_PATH, headers={TOKEN_TTL_HEADER: TOKEN_TTL_SECONDS}
            )
            token_response.raise_for_status()
            response = await client.get(
                IDENTITY_DOCUMENT_PATH,
                headers={TOKEN_HEADER: token_response.text},
            )
            response.raise_for_status()
            document: dict[str, Any] = response.json()
            return document

    def get_type(self) -> str:
        if self.metadata:
            return "AWS::EC2::Instance"
        # Only reachable when probe() was not called first.
        return UNKNOWN

    def configure_context(self, context: MetricsContext) -> None:
        if not self.metadata:
            return
        self._add_property(context, "imageId", self.metadata.get("imageId"))
        self._add_property(context, "instanceId", self.metadata.get("instanceId"))
        self._add_property(
            context, "instanceType", self.metadata.get("instanceType")
        )
        self._add_property(context, "privateIP", self.metadata.get("privateIp"))
        self._add_property(
            context, "availabilityZone", self.metadata.get("availabilityZone")
        )

    def _create_sink(self) -> SinkPort:
        return AgentSink(
            self.get_log_group_name(),
            self.config.log_stream_name,
            endpoint=self.config.agent_endpoint,
        )
