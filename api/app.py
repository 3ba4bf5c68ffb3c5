# api/app.py
"""
FastAPI application factory
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from api.v1.router import api_router
from core.config import get_settings
from core.exceptions import ConfigurationError, FieldScanError, InputError, OwnerNotFound, StoreError

logger = logging.getLogger(__name__)

ERROR_STATUS = [
    (InputError, 400),
    (OwnerNotFound, 404),
    (ConfigurationError, 503),
    (StoreError, 500),
]

async def handle_fieldscan_error(request: Request, exc: FieldScanError) -> JSONResponse:
    """Map domain errors onto HTTP status codes"""
    status_code = next((code for error_type, code in ERROR_STATUS if isinstance(exc, error_type)), 500)
    logger.warning(f"{request.method} {request.url.path} failed with {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": type(exc).__name__, "detail": str(exc)},
    )

def create_app(lifespan=None) -> FastAPI:
    """Create FastAPI application"""
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(FieldScanError, handle_fieldscan_error)

    # Include routers
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "service": settings.api_title,
            "version": settings.api_version,
            "status": "healthy"
        }

    return app
