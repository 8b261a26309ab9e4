from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import redis.asyncio as redis
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hostel_allocation.api.v1.router import router as api_v1_router
from hostel_allocation.config.settings import Settings, get_settings
from hostel_allocation.core.logging import configure_logging, get_logger
from hostel_allocation.core.middleware import register_middlewares
from hostel_allocation.core.rate_limiting import RateLimiter
from hostel_allocation.db import Database
from hostel_allocation.services.payment import PaystackGateway

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    redis_client: Optional[redis.Redis] = None,
    gateway: Optional[PaystackGateway] = None,
) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures logging, middleware and exception handlers.
    - Builds the database, Redis client, rate limiter and payment gateway
      in the lifespan unless they are passed in, and disposes them on
      shutdown.
    - Includes the versioned API router under /api/v1.

    Serve with ``uvicorn hostel_allocation.main:create_app --factory``.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned_database = database is None
        owned_redis = redis_client is None
        owned_gateway = gateway is None

        app.state.settings = settings
        if database is None:
            engine_options = None
            if not settings.is_sqlite():
                engine_options = {"pool_size": settings.DB_POOL_SIZE, "max_overflow": settings.DB_POOL_OVERFLOW}
            app.state.database = Database(settings.DATABASE_URL, settings.DATABASE_ECHO, engine_options)
        else:
            app.state.database = database
        if not settings.is_production():
            # Development and demo only; production schemas come from migrations
            app.state.database.create_all()

        client = redis_client or redis.from_url(settings.REDIS_URL, decode_responses=True)
        app.state.rate_limiter = (
            RateLimiter(client, settings.RATE_LIMIT_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS)
            if settings.RATE_LIMIT_ENABLED
            else None
        )
        app.state.gateway = gateway or PaystackGateway.from_settings(settings)
        if app.state.gateway.demo_mode:
            logger.warning("Paystack secret key not configured, payments run in demo mode")

        logger.info("Application started", extra={"environment": settings.ENVIRONMENT})
        try:
            yield
        finally:
            if owned_gateway:
                app.state.gateway.close()
            if owned_redis:
                await client.aclose()
            if owned_database:
                app.state.database.dispose()
            logger.info("Application stopped")

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    @app.get("/health", tags=["Health"])
    def health() -> dict:
        return {"status": "ok"}

    return app
