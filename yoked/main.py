import structlog
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from scalar_fastapi import get_scalar_api_reference
from sqlalchemy.exc import SQLAlchemyError

from yoked.config.settings import settings
from yoked.core.observability import capture_exception, init_observability
from yoked.core.security import TokenConfig, TokenService
from yoked.domains.auth.router import router as auth_router
from yoked.domains.programs.exercises_router import exercises_router
from yoked.domains.programs.router import router as programs_router
from yoked.domains.programs.sessions_router import sessions_router
from yoked.domains.users.router import router as users_router
from yoked.domains.workouts.router import router as workouts_router

logger = structlog.get_logger(__name__)


async def seed_catalog_if_empty():
    """Seed the exercise catalogue and starter program if none exist."""
    from yoked.config.database import AsyncSessionLocal
    from yoked.scripts.seed_catalog import seed_catalog

    async with AsyncSessionLocal() as session:
        seeded_count = await seed_catalog(session, clear_existing=False)
        if seeded_count:
            logger.info("catalog_seeded", count=seeded_count)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    # Startup
    logger.info("app_starting", app_name=settings.APP_NAME, environment=settings.APP_ENV)

    from yoked.config.database import close_db, init_db

    try:
        await init_db()
        logger.info("database_initialized")
    except Exception as e:
        logger.error("database_init_failed", error=str(e), type=type(e).__name__)
        # Re-raise in production to prevent unhealthy startup
        if settings.is_production:
            raise

    if settings.SEED_CATALOG:
        try:
            await seed_catalog_if_empty()
        except Exception as e:
            logger.warning("catalog_seed_failed", error=str(e), type=type(e).__name__)

    yield
    # Shutdown
    logger.info("app_shutting_down", app_name=settings.APP_NAME)
    await close_db()


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Hide storage failures behind a generic 503."""
    logger.error(
        "database_error",
        path=request.url.path,
        method=request.method,
        type=type(exc).__name__,
    )
    capture_exception(exc, extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Service temporarily unavailable"},
    )


def create_app(token_config: TokenConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        token_config: Signing configuration; built from settings when omitted
    """
    # Initialize observability (GlitchTip/Sentry)
    init_observability()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Yoked fitness API: programs, session logging and weight progression",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
        # Disable automatic trailing slash redirects - they lose Authorization headers
        redirect_slashes=False,
    )

    app.state.token_service = TokenService(token_config or TokenConfig.from_settings(settings))

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
    )

    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    # Include routers
    app.include_router(auth_router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["Authentication"])
    app.include_router(users_router, prefix=f"{settings.API_V1_PREFIX}/users", tags=["Users"])
    app.include_router(programs_router, prefix=f"{settings.API_V1_PREFIX}/programs", tags=["Programs"])
    app.include_router(exercises_router, prefix=f"{settings.API_V1_PREFIX}/exercises", tags=["Exercises"])
    app.include_router(sessions_router, prefix=f"{settings.API_V1_PREFIX}/sessions", tags=["Sessions"])
    app.include_router(workouts_router, prefix=f"{settings.API_V1_PREFIX}/workouts", tags=["Workouts"])

    # Health check endpoint
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.APP_ENV,
        }

    # Scalar API Reference - Modern API documentation
    @app.get("/reference", include_in_schema=False)
    async def scalar_html():
        return get_scalar_api_reference(
            openapi_url=app.openapi_url,
            title=f"{settings.APP_NAME} - API Reference",
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "yoked.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
