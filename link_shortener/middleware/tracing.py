"""Custom tracing middleware for the link shortener."""

import time

from fastapi import Request
from opentelemetry.trace import SpanKind
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from link_shortener.core.telemetry import get_meter, get_tracer

tracer = get_tracer("link_shortener.middleware")
meter = get_meter("link_shortener.middleware")

request_counter = meter.create_counter(
    name="link_shortener.http.requests",
    description="Number of HTTP requests",
    unit="1",
)

request_duration = meter.create_histogram(
    name="link_shortener.http.duration",
    description="Duration of HTTP requests",
    unit="ms",
)


class TracingMiddleware(BaseHTTPMiddleware):
    """Middleware that adds a server span and request metrics for each request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        method = request.method
        path = request.url.path

        attributes = {
            "http.method": method,
            "http.path": path,
            "http.flavor": request.scope.get("http_version", ""),
            "http.host": request.headers.get("host", ""),
        }
        with tracer.start_as_current_span(
            f"{method} {path}",
            attributes=attributes,
            kind=SpanKind.SERVER,
        ) as span:
            response = await call_next(request)

            attributes["http.status_code"] = response.status_code
            span.set_attribute("http.status_code", response.status_code)

            duration_ms = (time.perf_counter() - start_time) * 1000
            request_counter.add(1, attributes)
            request_duration.record(duration_ms, attributes)

            return response
