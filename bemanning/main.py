# bemanning/main.py
"""
FastAPI-applikationen: schema-API, hälsokontroll och middleware.

Starta med `uvicorn bemanning.main:app`.
"""

import platform
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bemanning.core.config import APP_VERSION, CORS_ORIGINS, IS_PRODUCTION
from bemanning.core.logging_config import get_logger, setup_logging
from bemanning.core.request_logging import REQUEST_ID_HEADER, RequestLoggingMiddleware
from bemanning.core.sentry_config import init_sentry
from bemanning.database.database import create_tables, get_db
from bemanning.routes.schedule_api import router as schedule_api_router

# Loggning först, allt nedan kan logga
setup_logging()
logger = get_logger(__name__)

sentry_enabled = init_sentry()

SERVICE_NAME = "bemanning"


def cors_settings() -> dict:
    """Strikt i produktion (bara CORS_ORIGINS), tillåtande i utveckling."""
    if not IS_PRODUCTION:
        logger.info("CORS configured for development (permissive)")
        return {"allow_origins": ["*"], "allow_methods": ["*"]}

    if not CORS_ORIGINS:
        logger.warning("Production mode without CORS_ORIGINS, cross-origin requests will be blocked")
    logger.info(f"CORS configured for production with origins: {CORS_ORIGINS}")
    return {"allow_origins": CORS_ORIGINS, "allow_methods": ["GET", "POST", "PUT"]}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Application starting up",
        extra={
            "extra_fields": {
                "version": APP_VERSION,
                "production": IS_PRODUCTION,
                "python_version": platform.python_version(),
                "sentry": sentry_enabled,
            }
        },
    )
    try:
        create_tables()
    except SQLAlchemyError:
        logger.exception("Could not create state tables")
        raise
    logger.info("State tables ready")

    yield

    logger.info("Application shutting down")


app = FastAPI(
    title="Bemanning",
    description="Schemaläggning för restaurangpersonal med HRF/Kommunal-regler för semester och vila",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
    **cors_settings(),
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(schedule_api_router)


@app.get("/health", tags=["health"])
async def health_check(db: Session = Depends(get_db)):
    """200 om tjänsten och databasen svarar, annars 503."""
    body = {"service": SERVICE_NAME, "version": APP_VERSION}
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.error("Health check failed: database unreachable", exc_info=True)
        return JSONResponse(status_code=503, content={**body, "status": "unhealthy", "database": "disconnected"})
    return {**body, "status": "healthy", "database": "connected"}
