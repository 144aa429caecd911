"""Shared test fixtures for all test modules."""

import pytest

from emfkit.adapters.sinks.in_memory import InMemorySink
from emfkit.core.config import Configuration, reset_config
from emfkit.core.context import MetricsContext
from emfkit.factory import reset_detector

# Variables read by configuration loading and environment detection.
_ENVIRONMENT_VARIABLES = [
    "AWS_EMF_ENABLE_DEBUG_LOGGING",
    "AWS_EMF_SERVICE_NAME",
    "AWS_EMF_SERVICE_TYPE",
    "AWS_EMF_LOG_GROUP_NAME",
    "AWS_EMF_LOG_STREAM_NAME",
    "AWS_EMF_AGENT_ENDPOINT",
    "AWS_EMF_EC2_METADATA_ENDPOINT",
    "AWS_EMF_NAMESPACE",
    "AWS_EMF_ENVIRONMENT",
    "AWS_EMF_DISABLE_METRIC_EXTRACTION",
    "AWS_EMF_FLUSH_PRESERVE_DIMENSIONS",
    "SERVICE_NAME",
    "SERVICE_TYPE",
    "AWS_LAMBDA_FUNCTION_NAME",
    "AWS_EXECUTION_ENV",
    "AWS_LAMBDA_FUNCTION_MEMORY_SIZE",
    "AWS_LAMBDA_FUNCTION_VERSION",
    "AWS_LAMBDA_LOG_STREAM_NAME",
    "_X_AMZN_TRACE_ID",
    "ECS_CONTAINER_METADATA_URI",
    "FLUENT_HOST",
]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch):
    """Clear emfkit-related variables and process-wide caches around each test."""
    for name in _ENVIRONMENT_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    reset_detector()
    yield
    reset_config()
    reset_detector()


@pytest.fixture
def config() -> Configuration:
    """Configuration pinned to the local environment."""
    return Configuration(environment="Local")


@pytest.fixture
def context(config: Configuration) -> MetricsContext:
    """Fresh empty context bound to the test configuration."""
    return MetricsContext.empty(config=config)


class StubEnvironment:
    """Environment double that records into an InMemorySink."""

    def __init__(
        self,
        name: str = "test-service",
        service_type: str = "test-type",
        log_group_name: str = "test-log-group",
    ) -> None:
        self.name = name
        self.service_type = service_type
        self.log_group_name = log_group_name
        self.sink = InMemorySink()
        self.configured: list[MetricsContext] = []

    async def probe(self) -> bool:
        return True

    def get_name(self) -> str:
        return self.name

    def get_type(self) -> str:
        return self.service_type

    def get_log_group_name(self) -> str:
        return self.log_group_name

    def configure_context(self, context: MetricsContext) -> None:
        self.configured.append(context)

    def get_sink(self) -> InMemorySink:
        return self.sink


@pytest.fixture
def stub_environment() -> StubEnvironment:
    """Environment double with an in-memory sink."""
    return StubEnvironment()


@pytest.fixture
def resolve_stub(stub_environment: StubEnvironment):
    """Coroutine function resolving to the stub environment."""

    async def _resolve() -> StubEnvironment:
        return stub_environment

    return _resolve
