"""Main application module.

This module initializes the FastAPI application, includes routes,
and configures middleware and exception handlers.
"""

import time

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from link_shortener.api.routes import api_router
from link_shortener.core.config import settings
from link_shortener.core.logging import setup_logging
from link_shortener.core.rate_limit import setup_rate_limiting
from link_shortener.core.telemetry import instrument_app, setup_telemetry
from link_shortener.db.base import engine, init_models
from link_shortener.middleware.logging import add_logging_middleware
from link_shortener.middleware.tracing import TracingMiddleware
from link_shortener.scheduler.scheduler import scheduler_service
from link_shortener.services.clicks import click_tracker

# Setup logging
logger = setup_logging()

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# Setup rate limiting
if settings.RATE_LIMIT_ENABLED:
    setup_rate_limiting(app)
else:
    logger.info("Rate limiting is disabled in settings")

if settings.OTEL_ENABLED:
    app.add_middleware(TracingMiddleware)

# Outside the rate limiter so rejected requests are logged too
if settings.REQUEST_LOGGING_ENABLED:
    add_logging_middleware(app)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router)


# Add exception handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None)
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # Pydantic error contexts can hold exception instances
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed information."""
    logger.warning(f"Request validation error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=422,
        content={"detail": "Validation error", "errors": jsonable_errors(exc)}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler to catch and log all unhandled exceptions."""
    error_id = f"error-{time.time()}"

    logger.opt(exception=exc).error(
        f"Unhandled exception in {request.method} {request.url.path}",
        error_id=error_id,
        url=str(request.url),
        method=request.method,
        client_host=request.client.host if request.client else None
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error occurred",
            "error_id": error_id,
            "message": str(exc) if settings.DEBUG else "Internal server error"
        }
    )


# Add startup and shutdown event handlers
@app.on_event("startup")
async def startup_event():
    """Run startup tasks."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT.value}")

    if settings.DB_CREATE_TABLES:
        await init_models(engine)

    setup_telemetry()
    instrument_app(engine)

    if settings.SCHEDULER_ENABLED:
        try:
            scheduler_service.start()
        except Exception as e:
            logger.opt(exception=e).critical("Scheduler could not be started")


@app.on_event("shutdown")
async def shutdown_event():
    """Run cleanup tasks."""
    logger.info(f"Shutting down {settings.APP_NAME}")

    # Let in-flight click increments finish before the engine goes away
    await click_tracker.drain()

    if scheduler_service.is_running:
        scheduler_service.shutdown()

    await engine.dispose()


def run() -> None:
    """Run the application with uvicorn."""
    uvicorn.run(
        "link_shortener.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
