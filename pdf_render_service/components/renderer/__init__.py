"""
Renderer component for the PDF Render Service.

This sub-package owns the shared headless browser and hands out isolated
rendering surfaces (one browser context + page per request).
"""
from .playwright_manager import PlaywrightManager, RenderSurface

__all__ = [
    "PlaywrightManager",
    "RenderSurface",
]
