"""
FastAPI application factory.

Uses lifespan context manager (preferred over on_event decorators in FastAPI 0.93+)
to handle startup/shutdown tasks cleanly.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.database import STORE_ERRORS, is_transient_store_error
from app.routers import bookings, categories, health, items
from app.schemas.common import ErrorResponse
from app.services.errors import CatalogBookingError, TransientStoreFailure
from app.settings import settings

# ── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    logger.info("Starting Catalog & Booking API [env=%s]", settings.environment)

    # Verify DB connectivity on startup (fail fast)
    from app.database import check_db_connection

    if not check_db_connection():
        logger.error("Database is not reachable on startup — check DATABASE_URL")
    else:
        logger.info("Database connection verified")

    yield  # ── Application runs here ──

    logger.info("Shutting down Catalog & Booking API")


# ── Error rendering ───────────────────────────────────────────────────────────
def _error_response(exc: CatalogBookingError) -> JSONResponse:
    body = ErrorResponse(error=exc.code, message=exc.message, details=exc.details or None)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


async def handle_domain_error(request: Request, exc: CatalogBookingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s → %s: %s", request.method, request.url.path, exc.code, exc.message)
    return _error_response(exc)


async def handle_store_error(request: Request, exc: Exception) -> JSONResponse:
    """Store failures that escaped a service unwrapped (e.g. read-only endpoints)."""
    if not is_transient_store_error(exc):
        logger.error(
            "%s %s → store error", request.method, request.url.path, exc_info=exc
        )
        body = ErrorResponse(error="StoreError", message="Internal store error")
        return JSONResponse(status_code=500, content=body.model_dump(mode="json"))
    logger.warning("%s %s → store unavailable: %s", request.method, request.url.path, exc)
    return _error_response(TransientStoreFailure("Store unavailable, please retry"))


# ── App factory ───────────────────────────────────────────────────────────────
def create_app() -> FastAPI:
    app = FastAPI(
        title="Catalog & Booking API",
        description=(
            "Catalog management with five pricing kinds, three-level tax "
            "inheritance, and conflict-free time-slot booking."
        ),
        version="1.0.0",
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )

    # ── CORS ──────────────────────────────────────────────────────────────────
    # Dev: allow all origins. Staging/prod: explicit allowlist from ALLOWED_ORIGINS env var.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Errors ────────────────────────────────────────────────────────────────
    app.add_exception_handler(CatalogBookingError, handle_domain_error)
    for error_class in STORE_ERRORS:
        app.add_exception_handler(error_class, handle_store_error)

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(categories.router)
    app.include_router(items.router)
    app.include_router(bookings.router)

    return app


app = create_app()
