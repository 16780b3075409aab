"""
API Routes sub-package for the PDF Render Service.

The router from `pdf_routes.py` is re-exported here for inclusion in the
main FastAPI application (`api/main.py`).
"""

from .pdf_routes import router as pdf_router

__all__ = [
    "pdf_router",
]
