"""
Auth Manager

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from auth_manager.api.deps import get_password_hasher, get_token_issuer
from auth_manager.api.error_handlers import register_error_handlers
from auth_manager.api.middleware.correlation_id import CorrelationIdMiddleware
from auth_manager.api.routes import router as api_router
from auth_manager.config import get_settings
from auth_manager.database import close_db, init_db
from auth_manager.logging_config import configure_logging, get_logger
from auth_manager.schemas.common import HealthResponse

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks. Startup aborts if the token signing key
    is missing or malformed.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s (%s)", settings.project_name, settings.version, settings.environment)
    issuer = get_token_issuer()
    get_password_hasher()
    logger.info("Token issuer ready (%s, %d min)", issuer.algorithm, issuer.access_token_expire_minutes)

    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    Auth Manager

    Registers players and publishers and issues signed access tokens.

    - **POST /api/auth/register/player**: create a player account
    - **POST /api/auth/register/publisher**: create a publisher account
    - **POST /api/auth/authenticate**: exchange credentials for a bearer token
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(CorrelationIdMiddleware)
register_error_handlers(app)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(status="healthy", version=settings.version)


app.include_router(api_router, prefix=settings.api_prefix)


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "auth_manager.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
