"""
Components sub-package for the PDF Render Service.

This package contains the building blocks of the rendering pipeline: the
renderer (shared browser, isolated surfaces) and the decorator (element
hiding and overlays).
"""

from .renderer.playwright_manager import PlaywrightManager, RenderSurface
from .decorator.decoration_applier import DecorationApplier

__all__ = [
    "PlaywrightManager",
    "RenderSurface",
    "DecorationApplier",
]
