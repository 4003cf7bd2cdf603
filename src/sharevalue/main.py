"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from sharevalue.config.settings import get_settings
from sharevalue.config.logging_config import setup_logging
from sharevalue.repositories.sqlalchemy.database import init_db
from sharevalue.api.routers import (
    valuation_router,
    holding_router,
    scenarios_router,
    refresh_router,
)
from sharevalue.app_context import get_app_context, set_app_context
from sharevalue.core.exceptions import AppError, NotFoundError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    init_db()
    context = get_app_context()
    context.start()
    yield
    # Shutdown
    await context.stop()
    context.close()
    set_app_context(None)


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Live value of a share holding in USD and GBP, with what-if scenarios",
    version=settings.app_version,
    lifespan=lifespan,
)

# Include routers
app.include_router(valuation_router)
app.include_router(holding_router)
app.include_router(scenarios_router)
app.include_router(refresh_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    status_code = 404 if isinstance(exc, NotFoundError) else 400
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
