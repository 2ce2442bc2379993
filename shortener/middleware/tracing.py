"""Custom tracing middleware for URL Shortener application."""

import time

from fastapi import Request
from opentelemetry.trace import SpanKind
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from shortener.core.telemetry import get_meter, get_tracer

# Get tracer and meter from OpenTelemetry
tracer = get_tracer("url_shortener.middleware")
meter = get_meter("url_shortener.middleware")

# Create metrics for middleware
request_counter = meter.create_counter(
    name="url_shortener.http.requests",
    description="Number of HTTP requests",
    unit="1",
)

request_duration = meter.create_histogram(
    name="url_shortener.http.duration",
    description="Duration of HTTP requests",
    unit="ms",
)


class TracingMiddleware(BaseHTTPMiddleware):
    """Middleware that adds custom spans and metrics for each request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process the request and add tracing/metrics."""
        start_time = time.perf_counter()

        path = request.url.path
        method = request.method

        attributes = {
            "http.method": method,
            "http.path": path,
            "http.host": request.headers.get("host", ""),
            "http.user_agent": request.headers.get("user-agent", ""),
        }
        with tracer.start_as_current_span(
            f"{method} {path}",
            attributes=attributes,
            kind=SpanKind.SERVER,
        ) as span:
            response = await call_next(request)
            span.set_attribute("http.status_code", response.status_code)

            metric_attributes = {
                "http.method": method,
                "http.status_code": response.status_code,
            }
            request_counter.add(1, metric_attributes)
            request_duration.record((time.perf_counter() - start_time) * 1000, metric_attributes)

            return response
