"""
Contact API — FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error handling
       and the database lifecycle in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (`uvicorn contacts_api.main:app`) or `contacts-api`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → CORS           │
    │                                                     │
    │  Routes:      GET /   GET /ping   /api/contacts/... │
    │                                                     │
    │  Exception Handlers:                                │
    │   bad body → 400 │ ContactsAPIError → 500 │ * → 500 │
    │                                                     │
    │  app.state.contact_store ← built in lifespan        │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Build the engine, prove the database answers (fatal otherwise)
    3. Optionally create missing tables
    4. Publish the ContactStore on app.state

    Shutdown:
    1. Drop the store handle
    2. Dispose the engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from contacts_api import __version__
from contacts_api.config import Settings, settings as default_settings
from contacts_api.database import (
    build_engine,
    build_session_factory,
    create_schema,
    verify_connection,
)
from contacts_api.exceptions import ContactsAPIError, DatabaseUnavailableError
from contacts_api.middleware.logging import RequestLoggingMiddleware
from contacts_api.middleware.request_id import RequestIDMiddleware, request_id_var
from contacts_api.routes import contacts, health
from contacts_api.services.contact_store import ContactStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure logging for the whole process.

    Called once during startup, before anything else logs.
    Format: 2024-01-15T12:00:00 [INFO] contacts_api.main: message
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the database on startup and close it on shutdown.

    If a store was injected through create_app() it is used as-is and its
    owner stays responsible for the engine.

    A database that cannot be reached is fatal: DatabaseUnavailableError
    propagates, the ASGI server aborts startup and the process exits
    non-zero rather than serving requests against a dead store.
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("Contact API %s starting up...", __version__)

    engine = None
    if app.state.contact_store is None:
        engine = build_engine(app_settings)
        try:
            await verify_connection(engine)
            if app_settings.db_auto_create:
                await create_schema(engine)
        except (SQLAlchemyError, OSError) as e:
            logger.error("Failed to connect to the database: %s", e)
            await engine.dispose()
            raise DatabaseUnavailableError(
                context={"error_type": type(e).__name__},
            ) from e
        app.state.contact_store = ContactStore(build_session_factory(engine))
        logger.info("Database connected")

    logger.info("Server ready at http://%s:%d", app_settings.host, app_settings.port)

    yield

    logger.info("Contact API shutting down...")
    if engine is not None:
        app.state.contact_store = None
        await engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def current_request_id(request: Request) -> str:
    """
    The ID RequestIDMiddleware assigned to this request.

    The catch-all handler runs outside that middleware, after the context
    var has been reset; request.state lives on the scope and survives.
    """
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the centralized handlers for everything routes do not map.

    Handler hierarchy:
        RequestValidationError → 400 {"message": "Invalid request body"}
        ContactsAPIError       → 500 generic message, context logged only
        Exception (fallback)   → 500 generic message, stack trace logged only
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Body is not a JSON object or a field has the wrong type."""
        rid = current_request_id(request)
        logger.warning("[%s] Invalid request body: %s", rid, exc.errors())
        return JSONResponse(status_code=400, content={"message": "Invalid request body"})

    @app.exception_handler(ContactsAPIError)
    async def handle_app_error(request: Request, exc: ContactsAPIError):
        rid = current_request_id(request)
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = current_request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        # Sent by ServerErrorMiddleware, so RequestIDMiddleware never sees it
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": rid,
            },
            headers={"X-Request-ID": rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    store: Optional[ContactStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Overrides the environment-derived settings.
        store: A ready ContactStore. When given, the lifespan skips building
               an engine; tests use this to run against their own database.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Contact API",
        description="Create, read, update and delete contacts.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.contact_store = store

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(contacts.router)

    return app


# uvicorn expects `contacts_api.main:app` to be importable
app = create_app()


def run() -> None:
    """Console entry point: serve `app` on the configured host and port."""
    import uvicorn

    uvicorn.run(
        "contacts_api.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )
