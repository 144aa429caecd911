"""Plain ASGI application instrumented with EMFMetricsMiddleware.

Run with:
    AWS_EMF_ENVIRONMENT=Local uvicorn examples.asgi_example:app

Every request prints one EMF line with RequestCount, Latency and the
handler's own metrics. /health is excluded.
"""

from emfkit import Unit
from emfkit.adapters.frameworks.asgi import EMFMetricsMiddleware


async def orders_app(scope, receive, send):
    if scope["type"] != "http":
        return

    if scope["path"] == "/health":
        body = b"ok"
    else:
        metrics = scope["state"]["metrics"]
        metrics.put_metric("OrdersListed", 20, Unit.COUNT)
        body = b'{"orders": []}'

    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [(b"content-type", b"application/json")],
        }
    )
    await send({"type": "http.response.body", "body": body})


app = EMFMetricsMiddleware(
    orders_app,
    namespace="OrdersService",
    exclude_paths=["/health"],
)
