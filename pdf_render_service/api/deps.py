"""
Dependency providers for the API layer.

The `RenderingManager` (and through it the browser) is a process-wide
singleton created on first use. The provider is async so creation happens on
the event loop and cannot race between threadpool workers.
"""
from typing import Optional

from pdf_render_service.core.config import config_manager
from pdf_render_service.core.logger import get_logger
from pdf_render_service.core.manager import RenderingManager

logger = get_logger(__name__)

_rendering_manager: Optional[RenderingManager] = None


async def get_rendering_manager() -> RenderingManager:
    global _rendering_manager
    if _rendering_manager is None:
        logger.info("Creating shared RenderingManager.")
        _rendering_manager = RenderingManager(config=config_manager)
    return _rendering_manager


async def shutdown_rendering_manager() -> None:
    """Closes the shared browser, if it was ever created."""
    global _rendering_manager
    if _rendering_manager is not None:
        await _rendering_manager.close()
        _rendering_manager = None
