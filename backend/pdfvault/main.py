"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models  # noqa: F401  (registers tables on Base.metadata)
from .api import auth_router, files_router, folders_router, users_router
from .core.config import ConfigurationError, settings
from .core.logging_config import setup_logging
from .database import DATABASE_URL, Base, engine, get_db
from .exceptions import VaultException
from .middleware.exception_handler import request_validation_handler, vault_exception_handler
from .middleware.request_context import RequestContextMiddleware

VERSION = "1.0.0"

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


if not settings.skip_db_init:
    logger.info(f"Initialising database: {_mask_url(DATABASE_URL)}")
    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the PDF Vault API."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        problems = settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    for problem in problems:
        logger.warning(f"CONFIG: {problem}")

    yield  # App runs here


app = FastAPI(
    title="PDF Vault API",
    description=(
        "Organise PDF documents in per-user folder trees. Folder and file "
        "metadata is stored locally; every folder and file is mirrored in "
        "remote cloud storage.\n\n"
        "**Authentication:** send a `Bearer` token in the `Authorization` "
        "header, or rely on the `access_token` cookie set at login."
    ),
    version=VERSION,
    lifespan=lifespan,
)

# Middleware stack: CORS wraps request context.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

# Register exception handlers
app.add_exception_handler(VaultException, vault_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

logger.info(
    "PDF Vault API started | env=%s | db=%s | remote=%s",
    settings.environment.value,
    "PostgreSQL" if DATABASE_URL.startswith("postgresql") else "SQLite",
    settings.remote_api_url,
)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(folders_router)
app.include_router(files_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "PDF Vault API",
        "version": VERSION,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check returning database status and uptime.

    Never raises. Returns degraded status on DB failure so load balancers
    can still probe without receiving 5xx.
    """
    db_status = "ok"
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": VERSION,
    }
