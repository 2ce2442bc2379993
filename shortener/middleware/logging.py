"""
Request logging middleware for FastAPI using Loguru.

Every request gets an id, echoed in the ``X-Request-ID`` response header,
bound to the log records emitted while it is handled and used as the
correlation id of error responses.
"""

import time
import uuid

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"


def client_ip_from(request: Request) -> str:
    """Client address, preferring the first hop of X-Forwarded-For."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of each request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.perf_counter()
        with logger.contextualize(request_id=request_id):
            try:
                response = await call_next(request)
            except Exception as exc:
                # Rendered here so the response still carries the request id
                from shortener.api.errors import global_exception_handler
                response = await global_exception_handler(request, exc)

            process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
            response.headers[REQUEST_ID_HEADER] = request_id

            logger.log(
                "REQUEST",
                f"{request.method} {request.url.path} {response.status_code} {process_time_ms}ms",
                client_ip=client_ip_from(request),
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                process_time_ms=process_time_ms,
            )
        return response
