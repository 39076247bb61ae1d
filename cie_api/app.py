"""
CIE API App - FastAPI Application

This module provides the FastAPI application serving clause detection
and proposition extraction over HTTP.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cie_core.exceptions import (
    ClausalIEError,
    ConfigurationError,
    InputFormatError,
    MalformedGraphError,
    ParserUnavailableError,
)

logger = logging.getLogger(__name__)

_app: Optional[FastAPI] = None

ERROR_STATUS_CODES = [
    (InputFormatError, 400),
    (ConfigurationError, 400),
    (MalformedGraphError, 422),
    (ParserUnavailableError, 503),
]


@dataclass
class APIConfig:
    """Configuration for the API"""
    title: str = "Clausal IE API"

    description: str = "Clause-based open information extraction from dependency parses"

    version: str = "1.0.0"

    debug: bool = False

    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    cors_allow_credentials: bool = True

    cors_allow_methods: List[str] = field(default_factory=lambda: ["*"])

    cors_allow_headers: List[str] = field(default_factory=lambda: ["*"])

    api_prefix: str = "/api/v1"

    docs_url: str = "/docs"

    redoc_url: str = "/redoc"

    openapi_url: str = "/openapi.json"

    metadata: Dict[str, Any] = field(default_factory=dict)


def error_status_code(exc: ClausalIEError) -> int:
    """HTTP status for an extraction error"""
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Clausal IE API")

    app.state.initialized = True

    yield

    from cie_api.routes_extraction import shutdown_engines
    shutdown_engines()

    logger.info("Shutting down Clausal IE API")

    app.state.initialized = False


def create_app(config: Optional[APIConfig] = None) -> FastAPI:
    """Create FastAPI application"""
    global _app

    config = config or APIConfig()

    app = FastAPI(
        title=config.title,
        description=config.description,
        version=config.version,
        debug=config.debug,
        docs_url=config.docs_url,
        redoc_url=config.redoc_url,
        openapi_url=config.openapi_url,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=config.cors_allow_methods,
        allow_headers=config.cors_allow_headers,
    )

    app.state.config = config

    from cie_api.routes_extraction import router as extraction_router

    app.include_router(extraction_router, prefix=f"{config.api_prefix}/extraction", tags=["Extraction"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "name": config.title,
            "version": config.version,
            "status": "running",
            "docs": config.docs_url
        }

    @app.get("/health")
    async def health():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": config.version
        }

    @app.get("/info")
    async def info():
        """API information endpoint"""
        return {
            "title": config.title,
            "description": config.description,
            "version": config.version,
            "endpoints": {
                "graph": f"{config.api_prefix}/extraction/graph",
                "conllu": f"{config.api_prefix}/extraction/conllu",
                "text": f"{config.api_prefix}/extraction/text",
                "options": f"{config.api_prefix}/extraction/options"
            }
        }

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions"""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "message": exc.detail,
                "status_code": exc.status_code
            }
        )

    @app.exception_handler(ClausalIEError)
    async def extraction_exception_handler(request: Request, exc: ClausalIEError):
        """Handle extraction errors"""
        status_code = error_status_code(exc)
        if status_code >= 500:
            logger.error(f"Extraction error: {exc}", exc_info=True)
        else:
            logger.warning(f"Rejected request to {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status_code,
            content={
                "error": True,
                "message": exc.message,
                "error_type": type(exc).__name__,
                "status_code": status_code
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": True,
                "message": "Internal server error",
                "status_code": 500
            }
        )

    _app = app

    return app


def get_app() -> Optional[FastAPI]:
    """Get the current FastAPI application"""
    return _app
