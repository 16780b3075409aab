import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from pdf_render_service.components.renderer.playwright_manager import (
    HIDE_ELEMENTS_SCRIPT,
    INVALID_SELECTOR,
    PDF_OPTIONS,
    PlaywrightManager,
    RenderSurface,
)
from pdf_render_service.core.exceptions import ConfigurationError, InvalidSelectorError, RendererError


# Mock ConfigurationManager for testing PlaywrightManager's config handling
class MockConfigurationManager:
    def __init__(self, settings=None):
        self.settings = settings if settings is not None else {}

    def get(self, key, default=None):
        try:
            value = self.settings
            for k_part in key.split('.'):
                value = value[k_part]
            return value
        except (KeyError, TypeError):
            return default


def playwright_settings(**values):
    return MockConfigurationManager(settings={"components": {"playwright_manager": values}})


def make_started_manager(config=None):
    """A manager whose browser is already 'launched' as a mock."""
    manager = PlaywrightManager(config=config)
    page = MagicMock()
    page.goto = AsyncMock()
    page.set_content = AsyncMock()
    page.evaluate = AsyncMock(return_value=3)
    page.add_style_tag = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    page.pdf = AsyncMock(return_value=b"%PDF-1.4 test")
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()
    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()
    manager.browser = browser
    manager.playwright = MagicMock()
    manager.playwright.stop = AsyncMock()
    return manager, browser, context, page


# --- Configuration ---

def test_playwright_manager_init_default():
    manager = PlaywrightManager(config=None)
    assert manager.browser_type == PlaywrightManager.DEFAULT_BROWSER_TYPE
    assert manager.headless is True
    assert manager.navigation_timeout == PlaywrightManager.DEFAULT_NAVIGATION_TIMEOUT
    assert manager.max_concurrent_renders == PlaywrightManager.DEFAULT_MAX_CONCURRENT_RENDERS
    assert manager.is_started is False
    assert manager.active_renders == 0


def test_playwright_manager_init_with_config():
    manager = PlaywrightManager(config=playwright_settings(
        browser_type="firefox", headless=False, navigation_timeout_ms=5000, max_concurrent_renders=0,
    ))
    assert manager.browser_type == "firefox"
    assert manager.headless is False
    assert manager.navigation_timeout == 5000
    assert manager.max_concurrent_renders == 0


def test_playwright_manager_init_invalid_browser_type_config():
    with pytest.raises(ConfigurationError) as excinfo:
        PlaywrightManager(config=playwright_settings(browser_type="explorer"))
    assert "Unsupported browser type: explorer" in str(excinfo.value)


def test_playwright_manager_init_negative_concurrency():
    with pytest.raises(ConfigurationError) as excinfo:
        PlaywrightManager(config=playwright_settings(max_concurrent_renders=-1))
    assert "max_concurrent_renders must be >= 0" in str(excinfo.value)


# --- Browser lifecycle ---

@pytest.mark.asyncio
async def test_ensure_started_launches_once_for_concurrent_callers():
    mock_browser = MagicMock()
    mock_launcher = MagicMock()
    mock_launcher.launch = AsyncMock(return_value=mock_browser)
    mock_playwright = MagicMock()
    mock_playwright.chromium = mock_launcher
    mock_starter = MagicMock()
    mock_starter.start = AsyncMock(return_value=mock_playwright)

    with patch("pdf_render_service.components.renderer.playwright_manager.async_playwright",
               return_value=mock_starter) as patched:
        manager = PlaywrightManager(config=None)
        browsers = await asyncio.gather(*(manager.ensure_started() for _ in range(5)))

    assert all(b is mock_browser for b in browsers)
    patched.assert_called_once()
    mock_launcher.launch.assert_awaited_once_with(headless=True)
    assert manager.is_started


@pytest.mark.asyncio
async def test_ensure_started_wraps_launch_failure():
    mock_launcher = MagicMock()
    mock_launcher.launch = AsyncMock(side_effect=Exception("Executable doesn't exist"))
    mock_playwright = MagicMock()
    mock_playwright.chromium = mock_launcher
    mock_playwright.stop = AsyncMock()
    mock_starter = MagicMock()
    mock_starter.start = AsyncMock(return_value=mock_playwright)

    with patch("pdf_render_service.components.renderer.playwright_manager.async_playwright",
               return_value=mock_starter):
        manager = PlaywrightManager(config=None)
        with pytest.raises(RendererError) as excinfo:
            await manager.ensure_started()

    assert "Failed to initialize Playwright or launch browser" in str(excinfo.value)
    mock_playwright.stop.assert_awaited_once()
    assert manager.playwright is None
    assert not manager.is_started


@pytest.mark.asyncio
async def test_shutdown_closes_browser_and_playwright():
    manager, browser, _, _ = make_started_manager()
    stop = manager.playwright.stop
    await manager.shutdown()
    browser.close.assert_awaited_once()
    stop.assert_awaited_once()
    assert manager.browser is None and manager.playwright is None


# --- Surfaces ---

@pytest.mark.asyncio
async def test_new_surface_uses_fresh_context_and_closes_it():
    manager, browser, context, page = make_started_manager()

    async with manager.new_surface() as surface:
        assert isinstance(surface, RenderSurface)
        assert surface.page is page
        assert manager.active_renders == 1

    browser.new_context.assert_awaited_once_with()
    page.set_default_timeout.assert_called_once_with(manager.default_timeout)
    context.close.assert_awaited_once()
    assert manager.active_renders == 0


@pytest.mark.asyncio
async def test_new_surface_closes_context_on_failure():
    manager, _, context, _ = make_started_manager()

    with pytest.raises(RendererError):
        async with manager.new_surface():
            raise RendererError("navigation failed")

    context.close.assert_awaited_once()
    assert manager.active_renders == 0


@pytest.mark.asyncio
async def test_each_surface_gets_its_own_context():
    manager, browser, _, _ = make_started_manager()
    async with manager.new_surface():
        pass
    async with manager.new_surface():
        pass
    assert browser.new_context.await_count == 2


@pytest.mark.asyncio
async def test_new_surface_wraps_context_creation_failure():
    manager, browser, _, _ = make_started_manager()
    browser.new_context.side_effect = Exception("Target closed")

    with pytest.raises(RendererError) as excinfo:
        async with manager.new_surface():
            pass
    assert "Failed to create browser context" in str(excinfo.value)
    assert manager.active_renders == 0


@pytest.mark.asyncio
async def test_concurrency_is_bounded():
    manager, _, _, _ = make_started_manager(config=playwright_settings(max_concurrent_renders=1))
    peak = 0

    async def render():
        nonlocal peak
        async with manager.new_surface():
            peak = max(peak, manager.active_renders)
            await asyncio.sleep(0.01)

    await asyncio.gather(render(), render(), render())
    assert peak == 1


# --- Surface operations ---

@pytest.mark.asyncio
async def test_surface_load_url():
    page = MagicMock()
    page.goto = AsyncMock()
    surface = RenderSurface(page, navigation_timeout=30000)

    await surface.load_url("https://example.com")

    page.goto.assert_awaited_once_with("https://example.com", wait_until="load", timeout=30000)


@pytest.mark.asyncio
async def test_surface_load_url_navigation_error():
    page = MagicMock()
    page.goto = AsyncMock(side_effect=Exception("net::ERR_NAME_NOT_RESOLVED"))
    surface = RenderSurface(page, navigation_timeout=30000)

    with pytest.raises(RendererError) as excinfo:
        await surface.load_url("http://nonexistentdomain123.com")
    assert "Failed to load URL 'http://nonexistentdomain123.com'" in str(excinfo.value)
    assert "ERR_NAME_NOT_RESOLVED" in str(excinfo.value)


@pytest.mark.asyncio
async def test_surface_load_markup():
    page = MagicMock()
    page.set_content = AsyncMock()
    surface = RenderSurface(page, navigation_timeout=1000)

    await surface.load_markup("<h1>Hi</h1>")

    page.set_content.assert_awaited_once_with("<h1>Hi</h1>", timeout=1000)


@pytest.mark.asyncio
async def test_surface_hide_elements_passes_selector_as_argument():
    page = MagicMock()
    page.evaluate = AsyncMock(return_value=2)
    surface = RenderSurface(page, navigation_timeout=1000)

    hidden = await surface.hide_elements("div[data-x='1']")

    assert hidden == 2
    page.evaluate.assert_awaited_once_with(HIDE_ELEMENTS_SCRIPT, "div[data-x='1']")


@pytest.mark.asyncio
async def test_surface_hide_elements_invalid_selector():
    page = MagicMock()
    page.evaluate = AsyncMock(return_value=INVALID_SELECTOR)
    surface = RenderSurface(page, navigation_timeout=1000)

    with pytest.raises(InvalidSelectorError) as excinfo:
        await surface.hide_elements("[[")
    assert excinfo.value.selector == "[["


@pytest.mark.asyncio
async def test_surface_hide_elements_engine_failure_is_not_a_selector_error():
    page = MagicMock()
    page.evaluate = AsyncMock(side_effect=Exception("Target page, context or browser has been closed"))
    surface = RenderSurface(page, navigation_timeout=1000)

    with pytest.raises(RendererError) as excinfo:
        await surface.hide_elements(".ads")
    assert not isinstance(excinfo.value, InvalidSelectorError)
    assert "has been closed" in str(excinfo.value)


def test_hide_script_only_swallows_syntax_errors():
    assert "e.name === 'SyntaxError'" in HIDE_ELEMENTS_SCRIPT
    assert "throw e" in HIDE_ELEMENTS_SCRIPT


@pytest.mark.asyncio
async def test_surface_wait_and_export():
    page = MagicMock()
    page.wait_for_load_state = AsyncMock()
    page.pdf = AsyncMock(return_value=b"%PDF")
    surface = RenderSurface(page, navigation_timeout=1000)

    await surface.wait_until_stable()
    pdf = await surface.export_pdf()

    page.wait_for_load_state.assert_awaited_once_with("networkidle")
    page.pdf.assert_awaited_once_with(
        format="A4",
        print_background=True,
        margin={"top": "1cm", "bottom": "1cm", "left": "1cm", "right": "1cm"},
        landscape=False,
    )
    assert pdf == b"%PDF"
    assert PDF_OPTIONS["format"] == "A4"


@pytest.mark.asyncio
async def test_surface_network_idle_timeout_is_renderer_error():
    page = MagicMock()
    page.wait_for_load_state = AsyncMock(side_effect=Exception("Timeout 30000ms exceeded."))
    surface = RenderSurface(page, navigation_timeout=1000)

    with pytest.raises(RendererError) as excinfo:
        await surface.wait_until_stable()
    assert "network idle" in str(excinfo.value)


# --- Integration (requires browser binaries) ---

@pytest.mark.integration
@pytest.mark.asyncio
async def test_playwright_manager_integration_markup_to_pdf():
    manager = PlaywrightManager(config=None)
    try:
        async with manager:
            async with manager.new_surface() as surface:
                await surface.load_markup("<html><body><h1>Example Domain</h1></body></html>")
                assert await surface.hide_elements("h1") == 1
                with pytest.raises(InvalidSelectorError):
                    await surface.hide_elements("[[")
                await surface.wait_until_stable()
                pdf = await surface.export_pdf()
            assert pdf.startswith(b"%PDF")
    except RendererError as e:
        # Expected when browser binaries are not installed.
        assert "Failed to initialize Playwright or launch browser" in str(e) or \
               "Executable doesn't exist" in str(e)
