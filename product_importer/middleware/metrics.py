# product_importer/middleware/metrics.py
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from typing import Callable

logger = logging.getLogger(__name__)


def new_metrics() -> dict:
    return {
        "requests": 0,
        "total_response_ms": 0.0,
        "cache_hits": 0,
        "cache_misses": 0,
    }


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    In-process request counters on app.state.metrics:
      - total requests
      - total response time (ms)
    Catalog cache hits/misses are written to the same dict by the catalog routes.
    app.state is not ready in __init__, so the dict is created lazily.
    """

    def __init__(self, app, dispatch: Callable = None):
        super().__init__(app, dispatch=dispatch)

    async def dispatch(self, request: Request, call_next):
        metrics = getattr(request.app.state, "metrics", None)
        if metrics is None:
            metrics = request.app.state.metrics = new_metrics()

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        metrics["requests"] = metrics.get("requests", 0) + 1
        metrics["total_response_ms"] = metrics.get("total_response_ms", 0.0) + elapsed_ms
        logger.debug(
            "%s %s -> %s in %.1fms",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )

        return response
