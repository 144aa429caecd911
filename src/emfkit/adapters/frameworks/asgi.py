"""ASGI middleware that records EMF metrics for every HTTP request.

Framework-agnostic: works with any ASGI server or framework (Starlette,
FastAPI, Django ASGI) without depending on one.
"""

import fnmatch
import logging
import time
import uuid
from collections.abc import Callable, Coroutine
from typing import Any

from emfkit.core.exceptions import InvalidDimensionError
from emfkit.core.logger import MetricsLogger
from emfkit.core.models import Unit
from emfkit.core.validation import validate_dimension_set
from emfkit.factory import create_metrics_logger

logger = logging.getLogger(__name__)

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


def _extract_request_id(scope: Scope, header_name: str = "X-Request-ID") -> str:
    """Extract a request ID from the ASGI headers, or generate a UUID.

    Args:
        scope: ASGI scope dictionary containing request metadata.
        header_name: Header to look for (case-insensitive).
    """
    header_bytes = header_name.lower().encode()
    headers: list[tuple[bytes, bytes]] = scope.get("headers", [])
    for name, value in headers:
        if name.lower() == header_bytes:
            return value.decode("utf-8", errors="replace")
    return str(uuid.uuid4())


def _route_template(scope: Scope) -> str | None:
    """Return the matched route template, e.g. "/orders/{order_id}".

    Routers such as Starlette store the matched route in ``scope["route"]``.
    Returns None when no usable template is available.
    """
    template = getattr(scope.get("route"), "path", None)
    if not isinstance(template, str):
        return None
    try:
        validate_dimension_set({"Route": template})
    except InvalidDimensionError:
        return None
    return template


class EMFMetricsMiddleware:
    """Wraps an ASGI app and flushes one MetricsLogger per HTTP request.

    Each request records ``RequestCount`` (Count) and ``Latency``
    (Milliseconds) under a ``Method`` dimension, plus a ``Route`` dimension
    when the router exposes the matched route template. The raw path, status
    code and request id are properties, so distinct URLs do not create
    distinct metric series. Handlers can add their own metrics
    through ``scope["state"]["metrics"]``.
    """

    def __init__(
        self,
        app: ASGIApp,
        logger_factory: Callable[[], MetricsLogger] = create_metrics_logger,
        exclude_paths: list[str] | None = None,
        namespace: str | None = None,
        request_id_header: str = "X-Request-ID",
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application to wrap.
            logger_factory: Callable returning a fresh MetricsLogger.
            exclude_paths: Paths to skip. Supports exact matches and wildcard
                patterns (e.g., "/internal/*").
            namespace: Namespace for the request metrics (optional).
            request_id_header: Header carrying the request id.
        """
        self.app = app
        self.logger_factory = logger_factory
        self.exclude_paths = exclude_paths or []
        self.namespace = namespace
        self.request_id_header = request_id_header
        self.request_count_name = "RequestCount"
        self.latency_name = "Latency"

    def _path_excluded(self, path: str) -> bool:
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.exclude_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or self._path_excluded(scope["path"]):
            await self.app(scope, receive, send)
            return

        metrics = self.logger_factory()
        if self.namespace:
            metrics.set_namespace(self.namespace)
        scope.setdefault("state", {})["metrics"] = metrics

        start_time = time.perf_counter()
        status: dict[str, int | None] = {"code": None}

        async def wrapped_send(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                status["code"] = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, wrapped_send)
        except Exception:
            status["code"] = 500
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            await self._record(scope, metrics, status["code"] or 0, duration_ms)

    async def _record(
        self,
        scope: Scope,
        metrics: MetricsLogger,
        status_code: int,
        duration_ms: float,
    ) -> None:
        try:
            dimensions = {"Method": scope["method"]}
            route = _route_template(scope)
            if route is not None:
                dimensions["Route"] = route
            metrics.put_dimensions(dimensions)
            metrics.set_property("Path", scope["path"])
            metrics.set_property("StatusCode", status_code)
            metrics.set_property(
                "RequestId", _extract_request_id(scope, self.request_id_header)
            )
            metrics.put_metric(self.request_count_name, 1, Unit.COUNT)
            metrics.put_metric(self.latency_name, duration_ms, Unit.MILLISECONDS)
            await metrics.flush()
        except Exception:
            logger.exception("Failed to record request metrics")
