"""Request context middleware: request IDs, route latency and access logs"""

import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from armada_ledger.infrastructure.observability.logging import log_request
from armada_ledger.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"


def route_template(request: Request) -> str:
    """Matched route path (e.g. /v1/units/{unit_id}); 'unmatched' for unknown paths"""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Carry the caller's X-Request-ID through, or mint one, and echo it back"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Observe latency per route template and write one access log line per request"""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - started

        endpoint = route_template(request)
        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).observe(duration)
        log_request(
            getattr(request.state, "request_id", None),
            request.method,
            endpoint,
            response.status_code,
            duration * 1000,
            request.headers.get("X-User-ID"),
        )
        return response
