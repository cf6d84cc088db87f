"""
Threat Intelligence Dashboard API

A FastAPI backend that keeps threat actors, indicators of compromise,
incidents and threat feeds in JSON files or a document store, and serves the
browser dashboard that lists, filters and edits them.
"""
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import router
from .api.routes import configure_rate_limits, limiter
from .db import create_db_engine
from .errors import ApiError, UnauthorizedError
from .pages import router as pages_router
from .services.catalog import build_registry
from .utils.config import Settings, get_settings

settings = get_settings()

# Configure logging
log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"

openapi_tags = [
    {"name": "Health", "description": "Health check and statistics endpoints"},
    {"name": "Auth", "description": "Registration and bearer token issuance"},
    {"name": "Threat Actors", "description": "Known threat actors and APT groups"},
    {"name": "Indicators", "description": "Indicators of compromise"},
    {"name": "Incidents", "description": "Security incidents"},
    {"name": "Threat Feeds", "description": "Threat intelligence feeds and sources"},
]


def _error_response(status_code: int, error: str, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Route every failure through a JSON ``{error, message}`` body."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = [str(p) for p in first.get("loc", ()) if p != "body" and not isinstance(p, int)]
        if not loc:
            message = "Request body is missing or is not valid JSON"
        else:
            message = f"Invalid value for field '{loc[-1]}': {first.get('msg', 'invalid')}"
        return _error_response(400, "Validation error", message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _error_response(
                404,
                "Endpoint not found",
                f"The requested resource {request.url.path} was not found on this server.",
            )
        return _error_response(
            exc.status_code, "Request error", str(exc.detail), getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(500, "Internal Server Error", "Something went wrong!")


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application around an explicit settings object.

    The store registry is created here and held on ``app.state`` so every
    request handler receives the same store handles.
    """
    app_settings = app_settings or settings

    engine = None
    if app_settings.storage_backend == "document":
        engine = create_db_engine(app_settings.database_url, echo=app_settings.debug)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        logger.info(f"Starting {app_settings.app_name} v{app_settings.app_version}")
        logger.info(f"Storage backend: {app_settings.storage_backend}")
        if app_settings.auth_enabled and app_settings.secret_key == Settings.model_fields["secret_key"].default:
            logger.warning("Using the default JWT secret - set SECRET_KEY for production")
        yield
        if engine is not None:
            engine.dispose()
        logger.info("Shutting down application")

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        description="""
        API for recording and searching threat intelligence.

        ## Resources
        - **Threat actors**: APT groups, their origin, motivation and TTPs
        - **Indicators**: IPs, domains, URLs and hashes with confidence and TLP
        - **Incidents**: severity, status and an append-only timeline
        - **Threat feeds**: intelligence sources and their reliability

        List endpoints accept `search`, per-resource filters, `limit` and `offset`
        and return `{data, meta: {total, limit, offset, hasMore}}`.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    app.state.settings = app_settings
    app.state.engine = engine
    app.state.registry = build_registry(app_settings, engine)
    app.state.started_at = time.monotonic()

    # Configure rate limiting
    configure_rate_limits(app_settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routes
    app.include_router(router, prefix=app_settings.api_prefix)

    # Frontend pages and assets
    app.include_router(pages_router)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "threatboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
