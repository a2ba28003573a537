"""FastAPI middleware for request tracing and metrics"""

import logging
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from billing_core.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an ID for log correlation.

    A caller-supplied X-Request-ID (e.g. from the front end's save action)
    is kept so one user action can be followed across requests.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP latency per route template and log server errors"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        # /v1/job-orders/{record_id} rather than one label per record
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).observe(duration)

        if response.status_code >= 500:
            logging.error(
                "Request failed",
                extra={
                    "request_id": getattr(request.state, "request_id", "unknown"),
                    "endpoint": endpoint,
                    "status": response.status_code,
                },
            )

        return response
