"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cryptofolio import __version__
from cryptofolio.api.routers import (
    assets_router,
    coins_router,
    exchanges_router,
    portfolio_router,
    settings_router,
)
from cryptofolio.app_context import get_app_context, set_app_context
from cryptofolio.config.logging_config import setup_logging
from cryptofolio.config.settings import get_settings
from cryptofolio.core.exceptions import AppError, ErrorKind

logger = logging.getLogger(__name__)

# HTTP status per error kind; anything unlisted is a 400
ERROR_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.AUTHORIZATION_DENIED: 403,
    ErrorKind.OFFLINE: 503,
    ErrorKind.TRANSIENT: 503,
    ErrorKind.RETRY_EXHAUSTED: 503,
    ErrorKind.MISSING_CREDENTIALS: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    context = get_app_context()
    app.state.context = context
    await context.start()
    yield
    # Shutdown
    await context.close()
    set_app_context(None)


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Crypto portfolio tracking and valuation",
    version=__version__,
    lifespan=lifespan,
)

# Include routers
app.include_router(portfolio_router)
app.include_router(exchanges_router)
app.include_router(assets_router)
app.include_router(settings_router)
app.include_router(coins_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    status_code = ERROR_STATUS.get(exc.kind, 400)
    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
