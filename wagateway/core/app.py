"""
FastAPI application factory for wagateway.

``create_app`` wires settings, middleware, exception handlers and routers;
async resources (logging, the persistent aiohttp session) live in the
lifespan.
"""

import time
from contextlib import asynccontextmanager

import aiohttp
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wagateway import __version__
from wagateway.api.middleware import (
    ApiKeyMiddleware,
    ErrorHandlerMiddleware,
    RequestLoggingMiddleware,
    register_exception_handlers,
)
from wagateway.api.routes import health_router, messages_router, webhook_router
from wagateway.auth.api_key import ApiKeyValidator
from wagateway.core.config.settings import Settings, get_settings
from wagateway.core.logging.logger import get_app_logger, setup_app_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown of process-wide resources."""
    settings: Settings = app.state.settings

    setup_app_logging(settings)
    logger = get_app_logger()

    logger.info(f"🚀 Starting wagateway v{__version__}")
    logger.info(f"📊 Environment: {settings.environment}")
    logger.info(f"📱 Phone number id: {settings.phone_number_id}")
    logger.info(f"📝 Log level: {settings.log_level}")
    if not settings.effective_app_secret:
        logger.warning("⚠️ Webhook signature checking is disabled")

    # Persistent HTTP session with connection pooling for the WhatsApp API
    connector = aiohttp.TCPConnector(
        limit=100,
        keepalive_timeout=30,
        enable_cleanup_closed=True,
    )
    session = aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=settings.request_timeout),
    )
    app.state.http_session = session
    app.state.started_at = time.monotonic()
    logger.info("✅ Persistent HTTP session created - connections: 100, keepalive: 30s")

    logger.info("=== AVAILABLE ENDPOINTS ===")
    logger.info(f"🏥 Health Check: {settings.api_prefix}/health")
    logger.info(f"🔗 Webhook: {settings.api_prefix}/webhook")
    logger.info(f"📨 Messages: {settings.api_prefix}/messages/...")
    logger.info("============================")

    try:
        yield
    finally:
        await session.close()
        logger.info("🌐 Persistent HTTP session closed cleanly")
        logger.info("✅ wagateway shutdown completed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use; read from the environment when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="wagateway",
        description="WhatsApp Cloud API webhook receiver and messaging gateway",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.settings = settings

    # Added inner first: the last one added is the outermost
    app.add_middleware(
        ApiKeyMiddleware,
        validator=ApiKeyValidator(settings.api_key_hashes),
        api_prefix=settings.api_prefix,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_router, prefix=settings.api_prefix)
    app.include_router(webhook_router, prefix=settings.api_prefix)
    app.include_router(messages_router, prefix=settings.api_prefix)

    return app
