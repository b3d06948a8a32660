"""Enrollment API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map EnrollmentError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and mailer constructed on startup via lifespan and injected
      through dependencies (get_db, get_mailer)

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Three error handler layers: EnrollmentError (domain), RequestValidationError
      (Pydantic), Exception (catch-all); never leaks internal details
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from enrollment.api.error_handlers import register_error_handlers
from enrollment.api.routes import auth, health, registration
from enrollment.config import get_settings
from enrollment.infrastructure.database import close_db, init_db
from enrollment.infrastructure.mailer import build_mailer
from enrollment.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.mailer = build_mailer(settings)
    logger.info("Enrollment API started")
    yield
    logger.info("Enrollment API shutting down")
    await close_db()


app = FastAPI(
    title="Enrollment API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(registration.router)
app.include_router(auth.router)

register_error_handlers(app)
