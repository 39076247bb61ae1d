"""
CIE API - HTTP Interface

FastAPI application exposing clause and proposition extraction.

Modules:
    app: Application factory, configuration and error handling
    routes_extraction: Extraction endpoints
"""

from cie_api.app import (
    APIConfig,
    create_app,
    get_app,
    error_status_code,
)

__version__ = "1.0.0"

__all__ = [
    "APIConfig",
    "create_app",
    "get_app",
    "error_status_code",
]
