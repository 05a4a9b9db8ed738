"""Inkwell Blog API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, TypeVar

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.auth.dependencies import set_auth_service_getter
from src.auth.router import router as auth_router
from src.auth.service import AuthService
from src.comments.dependencies import set_comment_service_getter
from src.comments.router import router as comments_router
from src.comments.service import CommentService
from src.config import get_settings
from src.core.context import get_request_id
from src.core.database import init_cassandra, shutdown_cassandra
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware
from src.health.router import router as health_router
from src.likes.dependencies import set_like_service_getter
from src.likes.router import router as likes_router
from src.likes.service import LikeService
from src.posts.dependencies import set_post_service_getter
from src.posts.router import router as posts_router
from src.posts.service import PostService
from src.taxonomy.dependencies import set_taxonomy_service_getter
from src.taxonomy.router import router_categories, router_tags
from src.taxonomy.service import TaxonomyService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)

T = TypeVar("T")


# Application state for dependency injection
class AppState:
    """Application state container."""

    cassandra_session: Any = None
    auth_service: AuthService | None = None
    taxonomy_service: TaxonomyService | None = None
    comment_service: CommentService | None = None
    like_service: LikeService | None = None
    post_service: PostService | None = None


app_state = AppState()


def _require(service: T | None, name: str) -> T:
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name} not available",
        )
    return service


def get_auth_service() -> AuthService:
    """Get AuthService instance from app state."""
    return _require(app_state.auth_service, "AuthService")


def get_taxonomy_service() -> TaxonomyService:
    """Get TaxonomyService instance from app state."""
    return _require(app_state.taxonomy_service, "TaxonomyService")


def get_comment_service() -> CommentService:
    """Get CommentService instance from app state."""
    return _require(app_state.comment_service, "CommentService")


def get_like_service() -> LikeService:
    """Get LikeService instance from app state."""
    return _require(app_state.like_service, "LikeService")


def get_post_service() -> PostService:
    """Get PostService instance from app state."""
    return _require(app_state.post_service, "PostService")


def init_services(session: Any, keyspace: str) -> None:
    """Build every service on top of one Cassandra session."""
    app_state.auth_service = AuthService(session=session, keyspace=keyspace)
    app_state.taxonomy_service = TaxonomyService(session=session, keyspace=keyspace)
    app_state.comment_service = CommentService(
        session=session,
        keyspace=keyspace,
        auth_service=app_state.auth_service,
    )
    app_state.like_service = LikeService(
        session=session,
        keyspace=keyspace,
        auth_service=app_state.auth_service,
    )
    app_state.post_service = PostService(
        session=session,
        keyspace=keyspace,
        auth_service=app_state.auth_service,
        taxonomy_service=app_state.taxonomy_service,
        comment_service=app_state.comment_service,
        like_service=app_state.like_service,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        app_state.cassandra_session = init_cassandra()
        init_services(app_state.cassandra_session, settings.cassandra_keyspace)
        logger.info("services_initialized")
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    logger.info("shutting_down_application")
    shutdown_cassandra()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # debug stays off so Starlette never renders tracebacks in responses
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Inkwell blogging platform - API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Render HTTP errors in the common error envelope."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "message": str(exc.detail)
                if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                else "Internal server error",
                "status_code": exc.status_code,
                "request_id": _get_request_id_safe(request),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Render validation errors as field/message pairs."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "message": "Validation error",
                "status_code": 422,
                "request_id": _get_request_id_safe(request),
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Log unhandled exceptions and return a generic 500."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "message": "An unexpected error occurred. Please try again later.",
                "status_code": 500,
                "request_id": _get_request_id_safe(request),
            },
        )

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(router_tags)
    app.include_router(router_categories)
    app.include_router(posts_router)
    app.include_router(comments_router)
    app.include_router(likes_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Inkwell API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


set_auth_service_getter(get_auth_service)
set_taxonomy_service_getter(get_taxonomy_service)
set_comment_service_getter(get_comment_service)
set_like_service_getter(get_like_service)
set_post_service_getter(get_post_service)


app = create_app()
