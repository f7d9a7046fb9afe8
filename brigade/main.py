"""
Main FastAPI application for the Chef Brigade journal service.
"""
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from brigade.api.dependencies import close_record_store
from brigade.api.v1.api import api_router
from brigade.core.config import settings
from brigade.core.database import init_db
from brigade.core.exceptions import (
    BrigadeAppException, EntryNotFoundError, InsufficientTierError,
    UnauthorizedError, UserNotFoundError, ValidationError,
)
from brigade.core.logging_config import setup_logging, log_info, log_warning, log_error
from brigade.middleware.request_logging import request_id_ctx, RequestLoggingMiddleware

# -----------------------------------------------------------------------------
# Startup / Shutdown
# -----------------------------------------------------------------------------
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    log_info("Starting up Chef Brigade journal service...")
    try:
        init_db()
        log_info("Database initialization completed!")
        log_info(f"Journal record store backend: {settings.record_store_backend}")
    except Exception as exc:
        log_error(exc)
        raise
    yield
    log_info("Shutting down Chef Brigade journal service...")
    close_record_store()


# -----------------------------------------------------------------------------
# App Initialization
# -----------------------------------------------------------------------------
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Reflection journal with streaks, mood tracking and daily leadership prompts",
    openapi_url=f"{settings.api_v1_prefix}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# -----------------------------------------------------------------------------
# Middleware Configuration
# -----------------------------------------------------------------------------
cors_origins = settings.cors_origins or []
if settings.enable_cors:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
        max_age=3600,
    )
    log_info(f"CORS enabled for origins: {cors_origins}")
else:
    log_info("CORS disabled")

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
    """Handle FastAPI request validation errors with detailed logging."""
    request_id = request_id_ctx.get()
    errors = [
        {"loc": err.get("loc"), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    log_warning(
        "Request validation failed",
        request_id=request_id,
        path=request.url.path,
        method=request.method,
        errors=errors,
        event="validation_error"
    )
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "message": errors, "request_id": request_id},
    )


@app.exception_handler(BrigadeAppException)
async def brigade_app_exception_handler(request: Request, exc: BrigadeAppException):
    request_id = request_id_ctx.get()

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, (UserNotFoundError, EntryNotFoundError)):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, UnauthorizedError):
        status_code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(exc, InsufficientTierError):
        status_code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, ValidationError):
        status_code = 422

    if status_code >= 500:
        log_error(exc, request_id=request_id)
    else:
        log_warning(f"{type(exc).__name__}: {exc}", request_id=request_id, path=request.url.path)

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


@app.get("/")
async def root():
    return {"service": settings.app_name, "version": settings.app_version, "docs": "/docs"}
