"""Record a few metrics and flush them as EMF lines.

Run with:
    AWS_EMF_ENVIRONMENT=Local AWS_EMF_SERVICE_NAME=checkout python examples/basic_usage.py

With the Local environment each payload is printed to stdout. Without an
override the environment is detected and payloads go to the CloudWatch agent
at tcp://127.0.0.1:25888 unless running on Lambda.
"""

import asyncio

from emfkit import StorageResolution, Unit, create_metrics_logger, metric_scope


async def main() -> None:
    metrics = create_metrics_logger()
    metrics.set_namespace("Checkout")
    metrics.put_dimensions({"Operation": "PlaceOrder"})
    metrics.set_property("OrderId", "o-1234")
    metrics.put_metric("Latency", 42.5, Unit.MILLISECONDS)
    metrics.put_metric("ItemsInCart", 3, Unit.COUNT, StorageResolution.HIGH)

    # 250 samples are spread over three payloads of at most 100 values each
    for i in range(250):
        metrics.put_metric("QueueDepth", i, Unit.COUNT)

    await metrics.flush()


@metric_scope
def handle_event(event: dict, metrics) -> str:
    """Sync handler: the decorator injects `metrics` and flushes on return."""
    metrics.put_dimensions({"Source": event["source"]})
    metrics.put_metric("EventsHandled", 1, Unit.COUNT)
    return "handled"


if __name__ == "__main__":
    asyncio.run(main())
    handle_event({"source": "cli"})
