"""
Non-blocking request logging middleware for FastAPI using Loguru.

Each request gets an ``X-Request-ID`` and is logged at the custom
``REQUEST`` level from a separate task, so logging never delays the
response.
"""

import asyncio
import time
import uuid
from typing import Any, Dict, Set

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from link_shortener.core.rate_limit.identity import client_identity


# Strong references to in-flight log tasks
_log_tasks: Set[asyncio.Task] = set()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every request without impacting request latency.

    Reuses an incoming ``X-Request-ID`` header, otherwise generates one,
    and echoes it on the response.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = time.perf_counter() - start_time

        response.headers["X-Request-ID"] = request_id

        log_record = {
            "request_id": request_id,
            "client_ip": client_identity(request.scope),
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time * 1000, 2)
        }
        if request.query_params:
            log_record["query_params"] = dict(request.query_params)

        task = asyncio.create_task(_write_log_record(log_record))
        _log_tasks.add(task)
        task.add_done_callback(_log_tasks.discard)

        return response


async def _write_log_record(log_record: Dict[str, Any]) -> None:
    try:
        logger.log(
            "REQUEST",
            "{method} {path} {status_code} {process_time_ms}ms {client_ip} {request_id}",
            **log_record
        )
    except Exception as e:
        # Logging must never break the application
        logger.error(f"Error writing request log: {e}")


def add_logging_middleware(app) -> None:
    """Add the request logging middleware to the FastAPI application."""
    app.add_middleware(RequestLoggingMiddleware)
    logger.info("Request logging middleware added")
