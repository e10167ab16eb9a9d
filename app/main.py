"""
Main FastAPI application for the tag stats service.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.exceptions import (
    TagStatsAppException, UpstreamError, InvalidQueryParametersError,
)
from app.core.logging_config import setup_logging, log_info, log_warning, log_error
from app.core.http_client import close_http_client
from app.middleware.request_logging import request_id_ctx, RequestLoggingMiddleware
from app.services.tag_import_service import get_tag_import_service

# -----------------------------------------------------------------------------
# Startup / Shutdown
# -----------------------------------------------------------------------------
setup_logging()


async def run_startup_import() -> None:
    """Populate the snapshot once at startup; failures leave the service running with no data."""
    try:
        result = await get_tag_import_service().import_all()
        log_info("Startup tag import completed", tag_count=result.tag_count)
    except TagStatsAppException as exc:
        log_warning(
            f"Startup tag import failed, tag queries return empty pages until the next import: {exc}",
            error_type=type(exc).__name__,
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    log_info("Starting up Tag Stats Service...")
    if settings.import_on_startup:
        await run_startup_import()
    else:
        log_info("Startup tag import disabled (IMPORT_ON_STARTUP=false)")
    yield
    log_info("Shutting down Tag Stats Service...")
    try:
        await close_http_client()
    except Exception as exc:
        log_warning(f"Failed to close HTTP client: {exc}")


# -----------------------------------------------------------------------------
# App Initialization
# -----------------------------------------------------------------------------
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Cached Stack Overflow tag statistics with percentage-of-total ranking",
    openapi_url=f"{settings.api_v1_prefix}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# -----------------------------------------------------------------------------
# Middleware Configuration
# -----------------------------------------------------------------------------
app.add_middleware(GZipMiddleware, minimum_size=1024)
app.add_middleware(RequestLoggingMiddleware)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add X-Process-Time header."""
    start_time = time.time()
    response = await call_next(request)
    response.headers["X-Process-Time"] = str(time.time() - start_time)
    return response

# -----------------------------------------------------------------------------
# Exception Handlers
# -----------------------------------------------------------------------------
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors."""
    request_id = request_id_ctx.get()
    sanitized_errors = [
        {
            "loc": err.get("loc"),
            "msg": err.get("msg"),
            "type": err.get("type")
        }
        for err in exc.errors()
    ]

    log_warning(
        "Request validation failed",
        request_id=request_id,
        path=request.url.path,
        method=request.method,
        errors=sanitized_errors,
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": sanitized_errors,
            "request_id": request_id
        },
    )


@app.exception_handler(TagStatsAppException)
async def tag_stats_exception_handler(request: Request, exc: TagStatsAppException):
    request_id = request_id_ctx.get()

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, InvalidQueryParametersError):
        status_code = status.HTTP_400_BAD_REQUEST
        log_warning(str(exc), request_id=request_id, path=request.url.path)
    elif isinstance(exc, UpstreamError):
        status_code = status.HTTP_502_BAD_GATEWAY
        log_error(exc, request_id=request_id)
    else:
        log_error(exc, request_id=request_id)

    message = (
        "An unexpected internal error occurred."
        if settings.environment == "production" and status_code == 500
        else str(exc)
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "message": message, "request_id": request_id},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    request_id = request_id_ctx.get()
    log_error(exc, request_id=request_id)
    msg = (
        "An unexpected error occurred. Please try again later."
        if settings.environment == "production"
        else str(exc)
    )
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "message": msg, "request_id": request_id},
    )

# -----------------------------------------------------------------------------
# API Routers
# -----------------------------------------------------------------------------
app.include_router(api_router, prefix=settings.api_v1_prefix)


# -----------------------------------------------------------------------------
# Entry Point
# -----------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.app_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
