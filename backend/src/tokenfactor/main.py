"""
FastAPI application entry point.

This is the main application that ties together all components:
- API routes for assets and the exchange
- Database lifecycle management
- Translation of domain errors into HTTP responses
- Error handling and logging
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tokenfactor import __version__
from tokenfactor.api.dependencies import Services
from tokenfactor.api.routes import admin, assets, exchange, health, ledger
from tokenfactor.config import get_settings
from tokenfactor.exceptions import (
    AlreadyExists,
    AlreadySettled,
    ArithmeticOverflow,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAsset,
    InvalidRecipient,
    NotAuthorized,
    NotFound,
    TenureTooShort,
    TokenFactorError,
    TransferRejected,
)
from tokenfactor.infrastructure.database import close_db

logger = logging.getLogger(__name__)

# HTTP status for each domain error
ERROR_STATUS: dict[type[TokenFactorError], int] = {
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidAsset: status.HTTP_404_NOT_FOUND,
    AlreadyExists: status.HTTP_409_CONFLICT,
    AlreadySettled: status.HTTP_409_CONFLICT,
    NotAuthorized: status.HTTP_403_FORBIDDEN,
    InsufficientAllowance: status.HTTP_402_PAYMENT_REQUIRED,
    InsufficientBalance: status.HTTP_402_PAYMENT_REQUIRED,
    TenureTooShort: 422,
    InvalidRecipient: 422,
    TransferRejected: 422,
    ArithmeticOverflow: 422,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Logs the configuration on startup and releases database
    connections on shutdown.
    """
    settings = get_settings()

    logger.info(f"Starting tokenfactor v{__version__}")
    logger.info(f"Collection: {settings.nft_name} ({settings.nft_symbol})")
    logger.info(f"Settlement currency: {settings.token_name} ({settings.token_symbol})")
    logger.info(f"Debug mode: {settings.debug}")

    yield  # Application runs here

    # Shutdown
    logger.info("Shutting down tokenfactor")
    close_db()


def create_app(services: Services | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        services: Pre-built services; built from settings on first request if None

    Returns:
        Configured FastAPI instance ready to serve requests.
    """
    settings = get_settings()

    app = FastAPI(
        title="tokenfactor API",
        description=(
            "Invoice factoring asset registry.\n\n"
            "Creates tokenized invoice assets, tracks their settlement, derives "
            "every financial figure and trades assets against their reserve amount."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    if services is not None:
        app.state.services = services

    # Register routers
    app.include_router(health.router)
    app.include_router(assets.router, prefix="/api/v1")
    app.include_router(exchange.router, prefix="/api/v1")
    app.include_router(ledger.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    @app.exception_handler(TokenFactorError)
    async def domain_exception_handler(request: Request, exc: TokenFactorError):
        """Map a rejected domain operation to its HTTP status."""
        status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
        logger.warning(f"{request.method} {request.url.path} rejected: {type(exc).__name__}: {exc}")
        return JSONResponse(
            status_code=status_code,
            content={
                "error": type(exc).__name__,
                "detail": str(exc),
            },
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all exception handler for unhandled errors."""
        logger.exception(f"Unhandled error: {exc}")

        # Don't expose internal errors in production
        if settings.debug:
            detail = str(exc)
        else:
            detail = "An internal error occurred"

        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": detail,
            },
        )

    return app


def configure_logging() -> None:
    """Configure root logging from settings."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )


# Create the application instance
configure_logging()
app = create_app()


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tokenfactor.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
