"""
FastAPI Application Factory

Creates the read-only reporting API consumed by dashboards and BI tools.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
import structlog

from gravity_books.config import get_settings
from gravity_books.database.connection import init_database, close_database
from gravity_books.exceptions import (
    DataAccessError,
    InvalidRangeError,
    MissingCalendarRangeError,
)
from gravity_books.serving.api.middleware import RequestLoggingMiddleware
from gravity_books.serving.api.routes import health_router, reports_router, views_router

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


def create_api_app(engine: Optional[Engine] = None) -> FastAPI:
    """
    Create and configure FastAPI application.
    
    Args:
        engine: Database engine to serve from. When omitted the configured
            database is connected at startup and disposed at shutdown.
    
    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_engine = app.state.engine is None
        if owns_engine:
            app.state.engine = init_database()
        logger.info("Starting Gravity Books reporting API", environment=settings.app_env)
        yield
        if owns_engine:
            close_database()
            app.state.engine = None
    
    app = FastAPI(
        title="Gravity Books Reporting API",
        description="Calendar-backed daily order metrics and visualization views",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.engine = engine
    
    app.add_middleware(RequestLoggingMiddleware)
    
    @app.exception_handler(InvalidRangeError)
    async def invalid_range_handler(request: Request, exc: InvalidRangeError) -> JSONResponse:
        return _error_response(422, exc)
    
    @app.exception_handler(MissingCalendarRangeError)
    async def missing_calendar_handler(request: Request, exc: MissingCalendarRangeError) -> JSONResponse:
        return _error_response(404, exc)
    
    @app.exception_handler(DataAccessError)
    async def data_access_handler(request: Request, exc: DataAccessError) -> JSONResponse:
        logger.error("Data access failed", path=request.url.path, error=str(exc))
        return _error_response(503, exc)
    
    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])
    app.include_router(views_router, prefix="/api/v1/views", tags=["Views"])
    
    return app
