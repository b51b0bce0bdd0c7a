"""FastAPI application factory.

Creates and configures the FastAPI application with all routers,
middleware, and exception handlers.

API Versioning:
    All API endpoints are versioned under /api/v1/ prefix.
    The health check endpoint remains unversioned at /health.

Serve with::

    uvicorn --factory lemon.presentation.api.app:create_app
"""

import logging
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from lemon.application.services import UserService
from lemon.infrastructure.mail import create_mail_sender
from lemon.infrastructure.persistence.sqlalchemy import (
    Base,
    UserRepositorySQLAlchemy,
)
from lemon.presentation.api.dependencies import (
    create_captcha_validator,
    create_db_engine,
    create_jwt_service,
    create_permission_evaluator,
    create_remember_me_service,
    create_session_maker,
    get_password_service,
)
from lemon.presentation.api.exception_handlers import (
    ErrorNormalizer,
    setup_exception_handlers,
)
from lemon.presentation.api.responses import json_response_class
from lemon.presentation.api.routers import auth_router, context_router, users_router
from lemon.presentation.api.security import API_V1_PREFIX, AuthenticationFailureHandler
from lemon_auth.persistence.sqlalchemy import (
    AuthBase,
    UserCredentialRepositorySQLAlchemy,
)
from lemon_config.settings import Settings, get_settings


@lru_cache(maxsize=None)
def _configure_logging(log_level_str: str) -> None:
    """Configure application logging.

    Sets up logging for the lemon packages with:
    - Console output with timestamps and module names
    - Configurable log level for lemon modules (from settings)
    - WARNING level for noisy third-party libraries
    """
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt=date_format,
        stream=sys.stdout,
        force=True,  # Override any existing config
    )

    logging.getLogger("lemon").setLevel(log_level)
    logging.getLogger("lemon_auth").setLevel(log_level)

    # Quiet down noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

OPENAPI_TAGS = [
    {
        "name": "Authentication",
        "description": """Signup, login and session management.

**Signup & Login:**
- Sign up with email/password (CAPTCHA checked when configured)
- Login to obtain JWT tokens, optionally with a remember-me cookie
- Refresh tokens before expiry

**Security:**
- Passwords are securely hashed (bcrypt)
- Unknown emails and wrong passwords fail the same way
- Account lockout after failed attempts
""",
    },
    {
        "name": "Users",
        "description": """User lookup, profile updates, email verification
and email change. Emails are only shown to the user themself and to admins.
""",
    },
    {
        "name": "Context",
        "description": "Public client configuration and the current user.",
    },
    {
        "name": "Health",
        "description": "Service health monitoring endpoints.",
    },
    {
        "name": "Info",
        "description": "API information and discovery.",
    },
]


async def _init_database_schema(engine: AsyncEngine) -> None:
    """Initialize database schema (if not existent) and verify connectivity."""
    logger.info("Initializing database schema...")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await conn.run_sync(AuthBase.metadata.create_all)
    except ConnectionRefusedError:
        logger.critical("Could not connect to the database.")
        raise SystemExit(1) from None

    logger.info("Database schema initialized successfully")


async def _seed_admin(app: FastAPI) -> None:
    """Create the configured admin account on first start."""
    settings: Settings = app.state.settings
    if not settings.admin_email or settings.admin_password is None:
        return

    password_provider = app.dependency_overrides.get(
        get_password_service,
        get_password_service,
    )
    async with app.state.session_maker() as session:
        service = UserService(
            user_repository=UserRepositorySQLAlchemy(session),
            credential_repository=UserCredentialRepositorySQLAlchemy(session),
            password_service=password_provider(),
            permission_evaluator=app.state.permission_evaluator,
        )
        await service.ensure_admin(
            settings.admin_email,
            settings.admin_password.get_secret_value(),
        )
        await session.commit()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Starting %s API v%s...", app.state.settings.app_name, API_VERSION)
    engine: AsyncEngine = app.state.engine
    await _init_database_schema(engine)
    await _seed_admin(app)
    yield

    # Shutdown - dispose the application's engine and its connection pool
    logger.info("Shutting down %s API...", app.state.settings.app_name)
    await engine.dispose()
    logger.info("Database connections closed")


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all endpoints.

    Returns
    -------
    APIRouter with all v1 endpoints mounted.
    """
    v1_router = APIRouter()

    v1_router.include_router(context_router, prefix="/context", tags=["Context"])
    v1_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
    v1_router.include_router(users_router, prefix="/users", tags=["Users"])

    return v1_router


def _configure_components(app: FastAPI, settings: Settings) -> None:
    """Build the database engine and default components from ``settings``.

    Request dependencies read them from ``app.state``; each one can still
    be replaced through ``app.dependency_overrides``.
    """
    engine = create_db_engine(settings)
    app.state.engine = engine
    app.state.session_maker = create_session_maker(engine)

    app.state.jwt_service = create_jwt_service(settings)
    app.state.remember_me_service = create_remember_me_service(settings)
    app.state.captcha_validator = create_captcha_validator(settings)
    app.state.permission_evaluator = create_permission_evaluator()
    app.state.mail_sender = create_mail_sender(settings)


def _configure_cors(app: FastAPI, settings: Settings) -> None:
    if not settings.cors_origins:
        logger.info("CORS not configured (no allowed origins)")
        return

    logger.info("Configuring CORS for origins: %s", ", ".join(settings.cors_origins))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=settings.cors_methods,
        allow_headers=settings.cors_headers,
        expose_headers=settings.cors_expose_headers,
        max_age=settings.cors_max_age,
    )


def create_app(
    settings: Settings | None = None,
    auth_failure_handler: AuthenticationFailureHandler | None = None,
    error_normalizer: ErrorNormalizer | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    settings
        Optional settings override for testing.
    auth_failure_handler
        Replaces the default handler answering failed logins.
    error_normalizer
        Replaces the default exception-to-payload registry.

    Returns
    -------
    Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    _configure_logging(settings.log_level)

    if settings.json_prefix_enabled:
        logger.info("Configuring JSON vulnerability prefix")
    else:
        logger.info("JSON vulnerability prefix disabled")
    response_class = json_response_class(settings.json_prefix_enabled)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="User management and authentication.",
        version=API_VERSION,
        docs_url="/docs" if settings.api_debug else None,
        redoc_url="/redoc" if settings.api_debug else None,
        openapi_url="/openapi.json" if settings.api_debug else None,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
        default_response_class=response_class,
    )

    app.state.settings = settings
    app.state.json_response_class = response_class
    _configure_components(app, settings)

    if auth_failure_handler is None:
        logger.info("Configuring AuthenticationFailureHandler")
        auth_failure_handler = AuthenticationFailureHandler(settings.auth_failure_url)
    app.state.auth_failure_handler = auth_failure_handler

    _configure_cors(app, settings)

    setup_exception_handlers(app, error_normalizer, response_class=response_class)

    app.include_router(create_v1_router(), prefix=API_V1_PREFIX)

    # Health check endpoint (unversioned - always accessible)
    @app.get("/health", tags=["Health"])
    async def health_check() -> dict:
        """Health check endpoint.

        Unversioned for load balancer/monitoring compatibility.
        """
        return {
            "status": "healthy",
            "version": API_VERSION,
            "api_versions": ["v1"],
        }

    @app.get("/", tags=["Info"])
    async def root() -> dict:
        """API root endpoint with version information."""
        return {
            "name": f"{settings.app_name} API",
            "version": API_VERSION,
            "docs": "/docs" if settings.api_debug else None,
            "api_base": API_V1_PREFIX,
            "endpoints": {
                "health": "/health",
                "context": f"{API_V1_PREFIX}/context",
                "auth": f"{API_V1_PREFIX}/auth",
                "users": f"{API_V1_PREFIX}/users",
            },
        }

    return app
