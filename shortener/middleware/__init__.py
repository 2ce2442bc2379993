"""HTTP middleware for the URL shortener application."""

from shortener.middleware.logging import RequestLoggingMiddleware
from shortener.middleware.tracing import TracingMiddleware

__all__ = ["RequestLoggingMiddleware", "TracingMiddleware"]
