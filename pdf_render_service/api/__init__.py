"""
API sub-package for the PDF Render Service.

This package contains the FastAPI application, route definitions, form
models, API key authentication and dependency providers.

No objects are exported at this level; import `api.main.app` or the routers
from `api.routes` directly.
"""

__all__ = []
