"""Tests for PlaywrightManager class.

This module contains tests for the Playwright browser automation
integration: browser launch, context and page creation, navigation and idle
waits, viewport and user-agent emulation, and resource cleanup.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from playwright.async_api import Browser, BrowserContext, Page

from src.browser.errors import NavigationError
from src.browser.playwright_integration import PlaywrightManager
from src.models.browser_models import BrowserType, Viewport


@pytest.fixture
def manager():
    """Create a PlaywrightManager instance for testing."""
    return PlaywrightManager()


@pytest.fixture
def mock_playwright():
    """Create a mock Playwright instance."""
    playwright = AsyncMock()
    playwright.chromium = AsyncMock()
    playwright.firefox = AsyncMock()
    playwright.webkit = AsyncMock()
    return playwright


@pytest.fixture
def mock_browser():
    """Create a mock Browser instance."""
    browser = AsyncMock(spec=Browser)
    browser.new_context = AsyncMock()
    browser.close = AsyncMock()
    return browser


@pytest.fixture
def mock_context():
    """Create a mock BrowserContext instance."""
    context = AsyncMock(spec=BrowserContext)
    context.new_page = AsyncMock()
    context.close = AsyncMock()
    return context


@pytest.fixture
def mock_page():
    """Create a mock Page instance."""
    page = AsyncMock(spec=Page)
    page.url = "https://example.com"
    page.goto = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    page.set_viewport_size = AsyncMock()
    page.set_extra_http_headers = AsyncMock()
    page.evaluate = AsyncMock()
    page.close = AsyncMock()
    return page


class TestPlaywrightManagerInitialization:
    """Tests for PlaywrightManager initialization."""

    def test_init(self):
        """Test PlaywrightManager initialization."""
        manager = PlaywrightManager()
        assert manager.playwright is None
        assert manager.browsers == {}
        assert manager.contexts == {}
        assert manager.pages == {}
        assert manager.navigation_timeout_ms == 30000
        assert manager.idle_timeout_ms == 30000
        assert manager._initialized is False

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, manager):
        """Test that initialize only starts Playwright once."""
        with patch("src.browser.playwright_integration.async_playwright") as mock_async_pw:
            mock_async_pw.return_value.start = AsyncMock(return_value=AsyncMock())

            await manager.initialize()
            await manager.initialize()

            assert manager._initialized is True
            mock_async_pw.return_value.start.assert_called_once()

    @pytest.mark.asyncio
    async def test_initialize_failure(self, manager):
        """Test initialization failure handling."""
        with patch("src.browser.playwright_integration.async_playwright") as mock_async_pw:
            mock_async_pw.return_value.start = AsyncMock(
                side_effect=Exception("Initialization failed")
            )

            with pytest.raises(RuntimeError, match="Playwright initialization failed"):
                await manager.initialize()

            assert manager._initialized is False


class TestBrowserLaunch:
    """Tests for browser launch functionality."""

    @pytest.mark.asyncio
    async def test_launch_chromium(self, manager, mock_playwright, mock_browser):
        """Test launching Chromium browser."""
        manager.playwright = mock_playwright
        manager._initialized = True
        mock_playwright.chromium.launch = AsyncMock(return_value=mock_browser)

        browser = await manager.launch_browser(browser_type=BrowserType.CHROMIUM)

        assert browser is mock_browser
        assert "chromium" in manager.browsers
        mock_playwright.chromium.launch.assert_called_once_with(headless=True)

    @pytest.mark.asyncio
    async def test_launch_browser_reuse(self, manager, mock_playwright, mock_browser):
        """Test that browsers are reused when already launched."""
        manager.playwright = mock_playwright
        manager._initialized = True
        manager.browsers["chromium"] = mock_browser
        mock_playwright.chromium.launch = AsyncMock()

        browser = await manager.launch_browser(browser_type=BrowserType.CHROMIUM)

        assert browser is mock_browser
        mock_playwright.chromium.launch.assert_not_called()

    @pytest.mark.asyncio
    async def test_launch_browser_failure(self, manager, mock_playwright):
        """Test browser launch failure handling."""
        manager.playwright = mock_playwright
        manager._initialized = True
        mock_playwright.chromium.launch = AsyncMock(side_effect=Exception("Launch failed"))

        with pytest.raises(RuntimeError, match="Browser launch failed"):
            await manager.launch_browser()


class TestContextAndPages:
    """Tests for context and page creation."""

    @pytest.mark.asyncio
    async def test_create_context_mobile_viewport(self, manager, mock_browser, mock_context):
        """Test creating a context with a mobile viewport."""
        mock_browser.new_context = AsyncMock(return_value=mock_context)
        viewport = Viewport(width=375, height=667, is_mobile=True, has_touch=True)

        context = await manager.create_context(mock_browser, viewport=viewport)

        assert context is mock_context
        call_args = mock_browser.new_context.call_args[1]
        assert call_args["viewport"] == {"width": 375, "height": 667}
        assert call_args["is_mobile"] is True
        assert call_args["has_touch"] is True

    @pytest.mark.asyncio
    async def test_create_context_failure(self, manager, mock_browser):
        """Test context creation failure handling."""
        mock_browser.new_context = AsyncMock(side_effect=Exception("boom"))

        with pytest.raises(RuntimeError, match="Context creation failed"):
            await manager.create_context(mock_browser)

    @pytest.mark.asyncio
    async def test_create_and_close_page(self, manager, mock_context, mock_page):
        """Test that created pages are tracked until closed."""
        mock_context.new_page = AsyncMock(return_value=mock_page)

        page = await manager.create_page(mock_context)
        assert page is mock_page
        assert len(manager.pages) == 1

        await manager.close_page(page)

        mock_page.close.assert_called_once()
        assert manager.pages == {}


class TestNavigation:
    """Tests for navigation and idle waits."""

    @pytest.mark.asyncio
    async def test_navigate_uses_default_timeout(self, mock_page):
        """Test navigation with the configured timeout."""
        manager = PlaywrightManager(navigation_timeout_ms=15000)

        await manager.navigate(mock_page, "https://example.com")

        mock_page.goto.assert_called_once_with(
            "https://example.com", wait_until="load", timeout=15000
        )

    @pytest.mark.asyncio
    async def test_navigate_failure_is_chained(self, manager, mock_page):
        """Test that the driver error is surfaced as the cause."""
        driver_error = Exception("net::ERR_NAME_NOT_RESOLVED")
        mock_page.goto = AsyncMock(side_effect=driver_error)

        with pytest.raises(NavigationError, match="ERR_NAME_NOT_RESOLVED") as exc_info:
            await manager.navigate(mock_page, "https://nowhere.invalid")

        assert exc_info.value.__cause__ is driver_error
        assert exc_info.value.url == "https://nowhere.invalid"
        assert isinstance(exc_info.value, RuntimeError)

    @pytest.mark.asyncio
    async def test_wait_for_idle(self, manager, mock_page):
        """Test waiting for network idle."""
        await manager.wait_for_idle(mock_page, timeout=1000)

        mock_page.wait_for_load_state.assert_called_once_with("networkidle", timeout=1000)

    @pytest.mark.asyncio
    async def test_wait_for_idle_failure(self, manager, mock_page):
        """Test that a page that never settles raises NavigationError."""
        mock_page.wait_for_load_state = AsyncMock(side_effect=Exception("Timeout 30000ms"))

        with pytest.raises(NavigationError, match="never became idle"):
            await manager.wait_for_idle(mock_page)


class TestEmulation:
    """Tests for viewport, user agent and CDP sessions."""

    @pytest.mark.asyncio
    async def test_set_viewport(self, manager, mock_page):
        await manager.set_viewport(mock_page, Viewport(width=375, height=667))

        mock_page.set_viewport_size.assert_called_once_with({"width": 375, "height": 667})

    @pytest.mark.asyncio
    async def test_set_user_agent_via_cdp(self, manager, mock_page):
        session = AsyncMock()
        mock_page.context = MagicMock()
        mock_page.context.new_cdp_session = AsyncMock(return_value=session)

        await manager.set_user_agent(mock_page, "test-agent")

        session.send.assert_called_once_with(
            "Network.setUserAgentOverride", {"userAgent": "test-agent"}
        )
        mock_page.set_extra_http_headers.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_user_agent_without_cdp(self, manager, mock_page):
        """Test that browsers without CDP fall back to the request header."""
        mock_page.context = MagicMock()
        mock_page.context.new_cdp_session = AsyncMock(
            side_effect=Exception("CDP session is only available in Chromium")
        )

        await manager.set_user_agent(mock_page, "test-agent")

        mock_page.set_extra_http_headers.assert_called_once_with({"User-Agent": "test-agent"})

    @pytest.mark.asyncio
    async def test_evaluate_with_arg(self, manager, mock_page):
        mock_page.evaluate = AsyncMock(return_value=42)

        result = await manager.evaluate(mock_page, "(x) => x * 2", 21)

        assert result == 42
        mock_page.evaluate.assert_called_once_with("(x) => x * 2", 21)

    @pytest.mark.asyncio
    async def test_evaluate_failure(self, manager, mock_page):
        mock_page.evaluate = AsyncMock(side_effect=Exception("Evaluation failed"))

        with pytest.raises(RuntimeError, match="Evaluation failed"):
            await manager.evaluate(mock_page, "() => { throw new Error(); }")


class TestCleanup:
    """Tests for resource cleanup."""

    @pytest.mark.asyncio
    async def test_cleanup_success(self, manager, mock_page, mock_context, mock_browser):
        """Test successful cleanup of all resources."""
        manager.pages["page1"] = mock_page
        manager.contexts["ctx1"] = mock_context
        manager.browsers["chromium"] = mock_browser
        mock_playwright = AsyncMock()
        manager.playwright = mock_playwright
        manager._initialized = True

        await manager.cleanup()

        mock_page.close.assert_called_once()
        mock_context.close.assert_called_once()
        mock_browser.close.assert_called_once()
        mock_playwright.stop.assert_called_once()
        assert manager.playwright is None
        assert manager._initialized is False

    @pytest.mark.asyncio
    async def test_cleanup_with_errors(self, manager, mock_page, mock_context, mock_browser):
        """Test cleanup continues despite errors."""
        mock_page.close = AsyncMock(side_effect=Exception("Page close failed"))

        manager.pages["page1"] = mock_page
        manager.contexts["ctx1"] = mock_context
        manager.browsers["chromium"] = mock_browser
        manager.playwright = AsyncMock()
        manager._initialized = True

        with pytest.raises(RuntimeError, match="Cleanup errors"):
            await manager.cleanup()

        mock_context.close.assert_called_once()
        mock_browser.close.assert_called_once()
        assert manager.pages == {}
        assert manager.browsers == {}
