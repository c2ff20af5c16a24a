import logging
import math
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlink_app.api.v1 import admin, redirect, stats, urls
from shortlink_app.background import BackgroundTasks, PeriodicTask
from shortlink_app.cache import CacheBackend, CacheFactory
from shortlink_app.config import Settings, get_settings
from shortlink_app.database.connection import create_engine, init_db
from shortlink_app.exceptions import (
    ExhaustedRetriesError,
    InvalidInputError,
    RateLimitExceeded,
    StoreError,
    UrlNotFoundError,
)
from shortlink_app.hit_processor.click_recorder import ClickRecorder
from shortlink_app.logging_config import REQUEST_ID_HEADER, request_id_var, setup_logging
from shortlink_app.ratelimit import RateLimiter, RateLimitRegistry
from shortlink_app.services.cleanup_service import CleanupService
from shortlink_app.storage import SQLAlchemyUrlStore

logger = logging.getLogger("shortlink_app.main")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = create_engine(settings)
        await init_db(engine)
        store = SQLAlchemyUrlStore(engine)
        cache = await CacheFactory.create(CacheBackend(settings.cache_backend), settings)
        background_tasks = BackgroundTasks()

        click_recorder = ClickRecorder(
            store,
            max_queue_size=settings.click_queue_size,
            batch_size=settings.click_batch_size
        )
        click_recorder.start()

        rate_limiters = RateLimitRegistry()
        rate_limiters.add(RateLimiter(
            "redirect", settings.redirect_rate_per_second, settings.redirect_burst
        ))
        rate_limiters.add(RateLimiter(
            "shorten", settings.shorten_rate_per_second, settings.shorten_burst
        ))

        periodic = [
            PeriodicTask(
                "rate-limit-sweep",
                settings.rate_limit_sweep_interval_seconds,
                rate_limiters.sweep
            )
        ]
        cleanup = CleanupService(store, cache, max_age_days=settings.cleanup_max_age_days)
        if cleanup.enabled:
            periodic.append(
                PeriodicTask("expired-cleanup", settings.cleanup_interval_seconds, cleanup.purge_expired)
            )
        for task in periodic:
            task.start()

        app.state.settings = settings
        app.state.store = store
        app.state.cache = cache
        app.state.background_tasks = background_tasks
        app.state.click_recorder = click_recorder
        app.state.rate_limiters = rate_limiters
        logger.info("%s started (%s)", settings.app_name, settings.environment)

        yield

        logger.info("Shutting down, flushing pending work")
        for task in periodic:
            await task.stop()
        await click_recorder.stop(timeout=settings.shutdown_timeout_seconds)
        await background_tasks.drain(timeout=settings.shutdown_timeout_seconds)
        await cache.close()
        await store.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="A URL shortener service built with FastAPI",
        debug=settings.debug,
        lifespan=lifespan
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Tag logs with the caller's X-Request-ID (or a fresh one) and echo it back"""
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})

    @app.exception_handler(UrlNotFoundError)
    async def not_found_handler(request: Request, exc: UrlNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)})

    @app.exception_handler(ExhaustedRetriesError)
    async def exhausted_retries_handler(request: Request, exc: ExhaustedRetriesError):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"error": str(exc)}
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error("Store error on %s %s: %s", request.method, request.url.path, exc.__cause__ or exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"}
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"error": str(exc)},
            headers={"Retry-After": str(max(1, math.ceil(exc.retry_after)))}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Invalid request"
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})

    @app.get("/")
    async def read_root():
        """Root endpoint with API information"""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "docs": "/docs",
            "redoc": "/redoc"
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint; 503 when the store is unreachable"""
        if not await request.app.state.store.ping():
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "environment": settings.environment}
            )
        return {"status": "healthy", "environment": settings.environment}

    ######## Include routers
    # Fixed paths first; redirect's "/{code}" would otherwise shadow them
    app.include_router(urls.router)
    app.include_router(stats.router)
    app.include_router(admin.router)
    app.include_router(redirect.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    # The server stops accepting and drains in-flight requests, then the lifespan shutdown runs
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        timeout_graceful_shutdown=math.ceil(settings.shutdown_timeout_seconds)
    )
