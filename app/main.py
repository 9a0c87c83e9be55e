# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the TrackFlow API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   poetry run uvicorn app.main:app --reload
#   poetry run python -m app.main
# =============================================================================

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.auth import routes as auth_routes
from app.config import Settings, get_settings
from app.envelope import EnvelopeRoute, register_exception_handlers
from app.routers import health, users
from lib.database import init_db, make_engine, make_session_factory

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(app_settings: Settings) -> None:
    """
    Configure the root logger.

    Console output always; a rotating file as well when LOG_FILE is set.
    Calling this again after the root logger has handlers does nothing.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if app_settings.LOG_FILE:
        handlers.append(
            RotatingFileHandler(
                app_settings.LOG_FILE,
                maxBytes=app_settings.LOG_MAX_BYTES,
                backupCount=app_settings.LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=logging.DEBUG if app_settings.DEBUG else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: create missing tables
    - Shutdown: release pooled database connections
    """
    app_settings: Settings = app.state.settings

    # Startup
    logger.info(f"Starting TrackFlow API in {app_settings.ENVIRONMENT} mode")
    init_db(app.state.engine)

    yield

    # Shutdown
    logger.info("Shutting down TrackFlow API")
    app.state.engine.dispose()


async def request_logger(request: Request, call_next):
    """
    Log one line per request.

    Reuses an incoming X-Request-ID or mints one, and echoes it on the
    response. The envelope code and handler outcome come from the
    envelope boundary via request.state.
    """
    request_id = request.headers.get("X-Request-ID", str(uuid4()))
    request.state.request_id = request_id
    start = time.perf_counter()

    response = await call_next(request)

    elapsed_ms = (time.perf_counter() - start) * 1000.0
    response.headers["X-Request-ID"] = request_id

    client = request.client.host if request.client else "-"
    code = getattr(request.state, "response_code", None)
    outcome = getattr(request.state, "handler_outcome", None)
    logger.info(
        f"{request.method} {response.status_code} {request.url.path} "
        f"code={code} outcome={getattr(outcome, 'value', outcome)} "
        f"- {client} - {elapsed_ms:.1f}ms [{request_id}]"
    )
    return response


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """
    Build a configured application.

    Args:
        app_settings: Settings to use (defaults to the environment's)

    Returns:
        FastAPI app with its own database engine on app.state
    """
    app_settings = app_settings or get_settings()
    setup_logging(app_settings)

    app = FastAPI(
        title="TrackFlow API",
        description="""
## User Accounts API

Every response has the same shape:

```json
{"code": 0, "message": "success", "data": {}}
```

`code` is 0 on success and a non-zero error code otherwise. Check `code`,
not the HTTP status.

| Code | Meaning |
|------|---------|
| 0 | Success |
| 400 | Invalid parameters |
| 401 | Unauthorized (missing, expired or invalid token) |
| 403 | Forbidden |
| 404 | Not found |
| 500 | Internal error |
| 501 | Database error |
| 502 | Business error (e.g. email already registered) |

Protected routes expect `Authorization: Bearer <token>`.
""",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "User",
                "description": "Registration, login and user listing",
            },
            {
                "name": "Auth",
                "description": "Routes that require a valid token",
            },
            {
                "name": "Health",
                "description": "API health and readiness checks",
            },
        ],
    )
    app.router.route_class = EnvelopeRoute

    # Database handle owned by this app instance
    engine = make_engine(app_settings.DATABASE_URL, echo=app_settings.DATABASE_ECHO)
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    # =========================================================================
    # Middleware
    # =========================================================================

    app.middleware("http")(request_logger)

    # CORS middleware - allows cross-origin requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list if app_settings.is_production else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    register_exception_handlers(app)

    # =========================================================================
    # Routers
    # =========================================================================

    app.include_router(users.router, prefix="/api")
    app.include_router(auth_routes.router, prefix="/api")
    app.include_router(health.router, tags=["Health"])

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint - returns a greeting and the server time."""
        return {
            "message": "Hello from TrackFlow API",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    logger.info(f"Starting server on http://{_settings.API_HOST}:{_settings.PORT}")
    uvicorn.run(
        "app.main:app",
        host=_settings.API_HOST,
        port=_settings.PORT,
        reload=_settings.is_development,
    )
