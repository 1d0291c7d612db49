"""FastAPI application factory."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import load_config
from core.errors import InvalidFormat, MissingNumericBackend, TimestampOutOfRange
from core.health import (
    HealthChecker,
    check_event_loop,
    create_backend_check,
    create_codec_check,
)
from internal.logging import get_logger, LogLevel, StructuredLogger
from pikaid.engine import detect_capabilities, select_converter
from utils.crash import create_async_handler
from service.routes import health, ids

VERSION = "1.0.0"


def create_app(config=None, converter=None):
    """Create and configure the FastAPI application."""
    config = config or load_config()

    StructuredLogger.configure(min_level=LogLevel.parse(config.logging.level))
    logger_instance = get_logger()

    capabilities = detect_capabilities(config.codec.backends)
    if converter is None and capabilities.preferred():
        converter = select_converter(capabilities)

    def resolve():
        # raises MissingNumericBackend when nothing configured is usable
        return converter or select_converter(capabilities)

    def get_app_capabilities():
        return capabilities

    health_checker = HealthChecker()
    health_checker.register("event_loop", check_event_loop, critical=True)
    health_checker.register("backend", create_backend_check(resolve, get_app_capabilities), critical=True)
    health_checker.register("codec", create_codec_check(get_app_capabilities), critical=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger_instance.info("Application starting", version=VERSION)
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(create_async_handler(logger_instance))

        try:
            backend = resolve().name
        except MissingNumericBackend as exc:
            logger_instance.error("No numeric backend, minting will fail", error=exc)
        else:
            logger_instance.info("Application started successfully", backend=backend)

        yield

        logger_instance.info("Application shutdown complete")

    app = FastAPI(
        title="pikaid",
        version=VERSION,
        description="compact sortable identifier service",
        lifespan=lifespan,
    )

    ids.init(resolve)
    health.init(health_checker, resolve)

    app.include_router(ids.router)
    app.include_router(health.router)

    @app.exception_handler(InvalidFormat)
    async def invalid_format(request: Request, exc: InvalidFormat):
        logger_instance.debug("Rejected identifier", path=request.url.path)
        return JSONResponse(status_code=422, content={"detail": str(exc), "error": "InvalidFormat"})

    @app.exception_handler(TimestampOutOfRange)
    async def timestamp_out_of_range(request: Request, exc: TimestampOutOfRange):
        logger_instance.error("Clock outside identifier range", error=exc, **exc.context)
        return JSONResponse(status_code=500, content={"detail": str(exc), "error": "TimestampOutOfRange"})

    @app.exception_handler(MissingNumericBackend)
    async def missing_backend(request: Request, exc: MissingNumericBackend):
        logger_instance.error("Numeric backend unavailable", error=exc)
        return JSONResponse(status_code=503, content={"detail": str(exc), "error": "MissingNumericBackend"})

    return app
