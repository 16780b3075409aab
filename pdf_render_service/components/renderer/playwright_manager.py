"""
Manages the shared Playwright browser and the per-request rendering surfaces.

This module provides the `PlaywrightManager` class, which owns one Playwright
driver and one launched browser for the whole process, and `RenderSurface`,
a thin wrapper around an isolated browser context + page that exposes only
the operations the rendering pipeline needs: load a URL or markup, hide
elements, inject styles, wait for network-idle and export a PDF.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from pdf_render_service.core.exceptions import ConfigurationError, InvalidSelectorError, RendererError
from pdf_render_service.core.logger import get_logger

if TYPE_CHECKING:
    from pdf_render_service.core.config import ConfigurationManager

logger = get_logger(__name__)

# Sets display:none on every element matching the selector passed as the argument.
# Returns INVALID_SELECTOR when querySelectorAll rejects the selector syntax.
INVALID_SELECTOR = -1
HIDE_ELEMENTS_SCRIPT = """(selector) => {
    let elements;
    try {
        elements = document.querySelectorAll(selector);
    } catch (e) {
        if (e.name === 'SyntaxError') return -1;
        throw e;
    }
    elements.forEach(el => el.style.display = 'none');
    return elements.length;
}"""

PDF_OPTIONS: Dict[str, Any] = {
    "format": "A4",
    "print_background": True,
    "margin": {"top": "1cm", "bottom": "1cm", "left": "1cm", "right": "1cm"},
    "landscape": False,
}


class RenderSurface:
    """
    One isolated page inside its own browser context.

    Every engine call is wrapped so failures surface as `RendererError`.
    Instances are created by `PlaywrightManager.new_surface()` and must not
    outlive that context manager.
    """

    def __init__(self, page: Page, navigation_timeout: int):
        self.page = page
        self.navigation_timeout = navigation_timeout

    async def load_url(self, url: str) -> None:
        """Navigates to `url` and waits for the load event."""
        logger.debug(f"Navigating to URL: {url} (timeout {self.navigation_timeout}ms).")
        try:
            await self.page.goto(url, wait_until="load", timeout=self.navigation_timeout)
        except Exception as e:
            logger.error(f"Navigation to '{url}' failed: {e}", exc_info=True)
            raise RendererError(f"Failed to load URL '{url}': {e}")

    async def load_markup(self, markup: str) -> None:
        """Replaces the page content with `markup` without navigating."""
        logger.debug(f"Setting page content from markup ({len(markup)} characters).")
        try:
            await self.page.set_content(markup, timeout=self.navigation_timeout)
        except Exception as e:
            logger.error(f"Setting HTML content failed: {e}", exc_info=True)
            raise RendererError(f"Failed to load HTML content: {e}")

    async def hide_elements(self, selector: str) -> int:
        """
        Hides every element currently matching `selector`.

        The selector is passed to the page as an argument, not spliced into the script.

        Returns:
            int: Number of elements hidden.

        Raises:
            InvalidSelectorError: If the selector is not valid CSS.
            RendererError: For any other engine failure (closed page, timeout).
        """
        try:
            hidden = await self.page.evaluate(HIDE_ELEMENTS_SCRIPT, selector)
        except Exception as e:
            logger.error(f"Hiding elements matching '{selector}' failed: {e}", exc_info=True)
            raise RendererError(f"Failed to hide elements matching '{selector}': {e}")
        if hidden == INVALID_SELECTOR:
            raise InvalidSelectorError(selector)
        logger.debug(f"Hid {hidden} element(s) matching '{selector}'.")
        return hidden

    async def inject_style(self, css: str) -> None:
        try:
            await self.page.add_style_tag(content=css)
        except Exception as e:
            logger.error(f"Style injection failed: {e}", exc_info=True)
            raise RendererError(f"Failed to inject style: {e}")

    async def wait_until_stable(self) -> None:
        """Blocks until the page has had no network activity for the engine's idle window."""
        try:
            await self.page.wait_for_load_state("networkidle")
        except Exception as e:
            logger.error(f"Waiting for network idle failed: {e}", exc_info=True)
            raise RendererError(f"Page did not reach network idle: {e}")

    async def export_pdf(self) -> bytes:
        """Prints the page as A4 portrait with backgrounds and 1cm margins."""
        try:
            pdf_bytes = await self.page.pdf(**PDF_OPTIONS)
        except Exception as e:
            logger.error(f"PDF export failed: {e}", exc_info=True)
            raise RendererError(f"Failed to export PDF: {e}")
        logger.debug(f"Exported PDF of {len(pdf_bytes)} bytes.")
        return pdf_bytes


class PlaywrightManager:
    """
    Owner of the process-wide Playwright browser.

    The browser is launched lazily on first use (or eagerly via `async with`
    / `ensure_started()`) and reused by every request; requests never touch it
    directly but obtain an isolated `RenderSurface` through `new_surface()`.
    An optional semaphore bounds how many browser contexts are open at once.

    Attributes:
        browser_type (str): The type of browser to launch (e.g., 'chromium').
        headless (bool): Whether the browser runs headless.
        navigation_timeout (int): Timeout in milliseconds for loading URLs and markup.
        default_timeout (int): Default timeout in milliseconds for all other page operations.
        max_concurrent_renders (int): Upper bound on open contexts; 0 means unbounded.
        playwright (Optional[Playwright]): The Playwright engine instance.
        browser (Optional[Browser]): The launched Playwright browser instance.
    """
    DEFAULT_BROWSER_TYPE = 'chromium'
    SUPPORTED_BROWSER_TYPES = ('chromium', 'firefox', 'webkit')
    DEFAULT_NAVIGATION_TIMEOUT = 30000 # Milliseconds
    DEFAULT_TIMEOUT = 30000 # Milliseconds
    DEFAULT_MAX_CONCURRENT_RENDERS = 5

    def __init__(self, config: Optional['ConfigurationManager'] = None):
        """
        Initializes the PlaywrightManager.

        Args:
            config (Optional[ConfigurationManager]): Used to read the
                `components.playwright_manager.*` settings. If None, defaults are used.

        Raises:
            ConfigurationError: If an unsupported browser type or a negative
                concurrency limit is configured.
        """
        def setting(name: str, default: Any) -> Any:
            if config is None:
                return default
            return config.get(f'components.playwright_manager.{name}', default)

        self.browser_type = setting('browser_type', self.DEFAULT_BROWSER_TYPE)
        self.headless = bool(setting('headless', True))
        self.navigation_timeout = int(setting('navigation_timeout_ms', self.DEFAULT_NAVIGATION_TIMEOUT))
        self.default_timeout = int(setting('default_timeout_ms', self.DEFAULT_TIMEOUT))
        self.max_concurrent_renders = int(setting('max_concurrent_renders', self.DEFAULT_MAX_CONCURRENT_RENDERS))

        if self.browser_type not in self.SUPPORTED_BROWSER_TYPES:
            logger.error(f"Unsupported browser type configured: {self.browser_type}")
            raise ConfigurationError(f"Unsupported browser type: {self.browser_type}. Must be 'chromium', 'firefox', or 'webkit'.")
        if self.max_concurrent_renders < 0:
            raise ConfigurationError(f"max_concurrent_renders must be >= 0, got {self.max_concurrent_renders}.")

        logger.info(
            f"PlaywrightManager configured: browser={self.browser_type}, headless={self.headless}, "
            f"max_concurrent_renders={self.max_concurrent_renders or 'unbounded'}"
        )

        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self._start_lock = asyncio.Lock()
        self._render_slots: Optional[asyncio.Semaphore] = (
            asyncio.Semaphore(self.max_concurrent_renders) if self.max_concurrent_renders > 0 else None
        )
        self._active_renders = 0

    @property
    def is_started(self) -> bool:
        return self.browser is not None

    @property
    def active_renders(self) -> int:
        """Number of rendering surfaces currently open."""
        return self._active_renders

    async def __aenter__(self) -> 'PlaywrightManager':
        await self.ensure_started()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    async def ensure_started(self) -> Browser:
        """
        Starts Playwright and launches the browser if that has not happened yet.

        Concurrent callers wait on a lock, so the browser is launched exactly once.

        Returns:
            Browser: The shared browser.

        Raises:
            RendererError: If Playwright cannot start or the browser cannot be launched.
        """
        if self.browser is not None:
            return self.browser
        async with self._start_lock:
            if self.browser is not None:
                return self.browser
            logger.debug(f"Starting Playwright and launching {self.browser_type} browser.")
            try:
                self.playwright = await async_playwright().start()
                browser_launcher = getattr(self.playwright, self.browser_type)
                self.browser = await browser_launcher.launch(headless=self.headless)
                logger.info(f"{self.browser_type} browser launched successfully.")
            except Exception as e:
                logger.error(f"Failed to initialize Playwright or launch browser {self.browser_type}: {e}", exc_info=True)
                if self.playwright:
                    try:
                        await self.playwright.stop()
                    except Exception as stop_e:
                        logger.error(f"Error stopping Playwright during startup cleanup: {stop_e}", exc_info=True)
                    self.playwright = None
                raise RendererError(f"Failed to initialize Playwright or launch browser {self.browser_type}: {e}")
            return self.browser

    async def shutdown(self) -> None:
        """Closes the browser and stops the Playwright engine."""
        logger.debug("Shutting down PlaywrightManager: closing browser and stopping Playwright.")
        if self.browser:
            try:
                await self.browser.close()
                logger.info("Browser closed successfully.")
            except Exception as e:
                logger.error(f"Error closing browser: {e}", exc_info=True)
        if self.playwright:
            try:
                await self.playwright.stop()
                logger.info("Playwright stopped successfully.")
            except Exception as e:
                logger.error(f"Error stopping Playwright: {e}", exc_info=True)

        self.browser = None
        self.playwright = None

    @asynccontextmanager
    async def new_surface(self) -> AsyncIterator[RenderSurface]:
        """
        Yields a `RenderSurface` backed by a brand-new browser context.

        Contexts share no cookies, storage or navigation state. The context is
        closed when the block exits, whether it succeeded or not.

        Raises:
            RendererError: If the browser cannot be started or the context/page cannot be created.
        """
        browser = await self.ensure_started()

        if self._render_slots is not None:
            await self._render_slots.acquire()
        self._active_renders += 1
        context: Optional[BrowserContext] = None
        try:
            try:
                context = await browser.new_context()
                page = await context.new_page()
            except Exception as e:
                logger.error(f"Failed to create browser context: {e}", exc_info=True)
                raise RendererError(f"Failed to create browser context: {e}")
            page.set_default_timeout(self.default_timeout)
            yield RenderSurface(page, navigation_timeout=self.navigation_timeout)
        finally:
            if context is not None:
                try:
                    await context.close()
                except Exception as e:
                    logger.error(f"Error closing browser context: {e}", exc_info=True)
            self._active_renders -= 1
            if self._render_slots is not None:
                self._render_slots.release()
