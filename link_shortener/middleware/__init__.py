"""HTTP middleware for request logging and tracing."""

from link_shortener.middleware.logging import RequestLoggingMiddleware, add_logging_middleware
from link_shortener.middleware.tracing import TracingMiddleware

__all__ = ["RequestLoggingMiddleware", "TracingMiddleware", "add_logging_middleware"]
