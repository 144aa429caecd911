"""AWS Lambda environment."""

import os

from emfkit.adapters.environment.base import UNKNOWN, BaseEnvironment
from emfkit.adapters.sinks.console import ConsoleSink
from emfkit.core.context import MetricsContext
from emfkit.core.ports import SinkPort


class LambdaEnvironment(BaseEnvironment):
    """Detected from ``AWS_LAMBDA_FUNCTION_NAME``; Lambda collects stdout."""

    async def probe(self) -> bool:
        return bool(os.environ.get("AWS_LAMBDA_FUNCTION_NAME"))

    def get_name(self) -> str:
        return os.environ.get("AWS_LAMBDA_FUNCTION_NAME") or UNKNOWN

    def get_type(self) -> str:
        return "AWS::Lambda::Function"

    def get_log_group_name(self) -> str:
        return self.get_name()

    def configure_context(self, context: MetricsContext) -> None:
        self._add_property(
            context, "executionEnvironment", os.environ.get("AWS_EXECUTION_ENV")
        )
        self._add_property(
            context, "memorySize", os.environ.get("AWS_LAMBDA_FUNCTION_MEMORY_SIZE")
        )
        self._add_property(
            context, "functionVersion", os.environ.get("AWS_LAMBDA_FUNCTION_VERSION")
        )
        self._add_property(
            context, "logStreamId", os.environ.get("AWS_LAMBDA_LOG_STREAM_NAME")
        )
        self._add_property(context, "traceId", _sampled_trace_id())

    def _create_sink(self) -> SinkPort:
        return ConsoleSink()


def _sampled_trace_id() -> str | None:
    """Return the X-Ray trace header only for sampled traces."""
    trace_id = os.environ.get("_X_AMZN_TRACE_ID")
    if trace_id and "Sampled=1" in trace_id:
        return trace_id
    return None
