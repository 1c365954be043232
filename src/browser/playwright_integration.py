"""Playwright browser automation integration.

This module provides the PlaywrightManager class which manages Playwright
browser instances, contexts, and pages, and exposes the small set of page
operations the performance engine relies on: navigation, waiting for network
idle, viewport and user-agent emulation, CDP sessions, and in-page evaluation.

CRITICAL: Proper cleanup is essential to avoid resource leaks.
"""

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    CDPSession,
    Page,
    Playwright,
)
from typing import Optional, Dict, Any
import logging

from src.browser.errors import NavigationError
from src.models.browser_models import BrowserType, Viewport

logger = logging.getLogger(__name__)


class PlaywrightManager:
    """Manage Playwright browser instances and contexts.

    This class handles the lifecycle of Playwright browsers, contexts, and pages.
    It ensures proper resource management and cleanup to prevent memory leaks.

    PATTERN: Reuse browser instances when possible, but create isolated contexts
    for each analysis run to prevent interference.

    CRITICAL: Always call cleanup() or use as async context manager to ensure
    proper resource cleanup.
    """

    def __init__(
        self,
        navigation_timeout_ms: int = 30000,
        idle_timeout_ms: int = 30000,
    ):
        """Initialize the Playwright manager.

        Args:
            navigation_timeout_ms: Default timeout for page.goto
            idle_timeout_ms: Default timeout for the network idle wait
        """
        self.playwright: Optional[Playwright] = None
        self.browsers: Dict[str, Browser] = {}
        self.contexts: Dict[str, BrowserContext] = {}
        self.pages: Dict[str, Page] = {}
        self.navigation_timeout_ms = navigation_timeout_ms
        self.idle_timeout_ms = idle_timeout_ms
        self._initialized = False

    async def __aenter__(self):
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.cleanup()

    async def initialize(self) -> None:
        """Initialize Playwright instance.

        Raises:
            RuntimeError: If initialization fails
        """
        if self._initialized:
            return

        try:
            self.playwright = await async_playwright().start()
            self._initialized = True
            logger.info("Playwright initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize Playwright: {e}")
            raise RuntimeError(f"Playwright initialization failed: {e}") from e

    async def launch_browser(
        self,
        browser_type: BrowserType = BrowserType.CHROMIUM,
        headless: bool = True,
        **options: Any,
    ) -> Browser:
        """Launch a browser instance, reusing one already running.

        Args:
            browser_type: Type of browser to launch
            headless: Whether to run in headless mode
            **options: Additional browser launch options

        Returns:
            Browser instance

        Raises:
            RuntimeError: If browser fails to launch
        """
        if not self._initialized:
            await self.initialize()

        browser_key = browser_type.value
        if browser_key in self.browsers:
            logger.debug(f"Reusing existing {browser_type.value} browser")
            return self.browsers[browser_key]

        try:
            browser_launcher = getattr(self.playwright, browser_type.value)
            browser = await browser_launcher.launch(headless=headless, **options)

            self.browsers[browser_key] = browser
            logger.info(f"Launched {browser_type.value} browser (headless={headless})")

            return browser
        except Exception as e:
            logger.error(f"Failed to launch {browser_type.value} browser: {e}")
            raise RuntimeError(f"Browser launch failed: {e}") from e

    async def create_context(
        self,
        browser: Browser,
        viewport: Optional[Viewport] = None,
        **options: Any,
    ) -> BrowserContext:
        """Create an isolated browser context.

        Args:
            browser: Browser instance to create context in
            viewport: Viewport configuration
            **options: Additional context options (e.g. user_agent, locale)

        Returns:
            Browser context

        Raises:
            RuntimeError: If context creation fails
        """
        try:
            context_options: Dict[str, Any] = {}

            if viewport:
                context_options["viewport"] = {
                    "width": viewport.width,
                    "height": viewport.height,
                }
                context_options["device_scale_factor"] = viewport.device_scale_factor
                context_options["is_mobile"] = viewport.is_mobile
                context_options["has_touch"] = viewport.has_touch

            context_options.update(options)

            context = await browser.new_context(**context_options)

            context_id = f"context_{id(context)}"
            self.contexts[context_id] = context

            logger.debug(f"Created browser context: {context_id}")
            return context
        except Exception as e:
            logger.error(f"Failed to create browser context: {e}")
            raise RuntimeError(f"Context creation failed: {e}") from e

    async def create_page(self, context: BrowserContext) -> Page:
        """Create a new page in the specified context.

        Raises:
            RuntimeError: If page creation fails
        """
        try:
            page = await context.new_page()

            page_id = f"page_{id(page)}"
            self.pages[page_id] = page

            logger.debug(f"Created page: {page_id}")
            return page
        except Exception as e:
            logger.error(f"Failed to create page: {e}")
            raise RuntimeError(f"Page creation failed: {e}") from e

    async def close_page(self, page: Page) -> None:
        """Close a page and stop tracking it."""
        page_id = f"page_{id(page)}"
        try:
            await page.close()
        finally:
            self.pages.pop(page_id, None)
        logger.debug(f"Closed page: {page_id}")

    async def navigate(
        self,
        page: Page,
        url: str,
        wait_until: str = "load",
        timeout: Optional[int] = None,
    ) -> None:
        """Navigate page to URL.

        Args:
            page: Page instance
            url: Target URL
            wait_until: Wait condition (load, domcontentloaded, networkidle)
            timeout: Navigation timeout in milliseconds

        Raises:
            NavigationError: If navigation fails (DNS, refused connection,
                redirect loop, timeout). The driver error is chained.
        """
        timeout = timeout if timeout is not None else self.navigation_timeout_ms
        try:
            await page.goto(url, wait_until=wait_until, timeout=timeout)
            logger.debug(f"Navigated to {url}")
        except Exception as e:
            logger.error(f"Navigation to {url} failed: {e}")
            raise NavigationError(url, str(e)) from e

    async def wait_for_idle(self, page: Page, timeout: Optional[int] = None) -> None:
        """Wait until the page has had no network activity for 500ms.

        Raises:
            NavigationError: If the page never becomes idle within timeout
        """
        timeout = timeout if timeout is not None else self.idle_timeout_ms
        try:
            await page.wait_for_load_state("networkidle", timeout=timeout)
        except Exception as e:
            logger.error(f"Waiting for network idle failed: {e}")
            raise NavigationError(page.url, f"network never became idle: {e}") from e

    async def set_viewport(self, page: Page, viewport: Viewport) -> None:
        """Resize the page viewport.

        Raises:
            RuntimeError: If the viewport cannot be set
        """
        try:
            await page.set_viewport_size(
                {"width": viewport.width, "height": viewport.height}
            )
            logger.debug(f"Viewport set to {viewport.width}x{viewport.height}")
        except Exception as e:
            logger.error(f"Failed to set viewport: {e}")
            raise RuntimeError(f"Set viewport failed: {e}") from e

    async def new_cdp_session(self, page: Page) -> CDPSession:
        """Open a Chrome DevTools Protocol session for a page (Chromium only).

        Raises:
            RuntimeError: If the browser does not support CDP
        """
        try:
            return await page.context.new_cdp_session(page)
        except Exception as e:
            logger.error(f"Failed to open CDP session: {e}")
            raise RuntimeError(f"CDP session failed: {e}") from e

    async def set_user_agent(self, page: Page, user_agent: str) -> None:
        """Override the user agent for subsequent requests of a page.

        Uses ``Network.setUserAgentOverride`` so that ``navigator.userAgent``
        changes too. Browsers without CDP only get the request header.
        """
        try:
            session = await self.new_cdp_session(page)
            await session.send("Network.setUserAgentOverride", {"userAgent": user_agent})
            logger.debug("User agent overridden via CDP")
        except RuntimeError as e:
            logger.warning(f"CDP unavailable, overriding User-Agent header only: {e}")
            await page.set_extra_http_headers({"User-Agent": user_agent})

    async def evaluate(self, page: Page, expression: str, arg: Any = None) -> Any:
        """Evaluate JavaScript expression in page context.

        Raises:
            RuntimeError: If evaluation fails
        """
        try:
            if arg is not None:
                result = await page.evaluate(expression, arg)
            else:
                result = await page.evaluate(expression)
            return result
        except Exception as e:
            logger.error(f"JavaScript evaluation failed: {e}")
            raise RuntimeError(f"Evaluation failed: {e}") from e

    async def cleanup(self) -> None:
        """Clean up all browser resources.

        Closes all pages, contexts, and browsers in the correct order.

        Raises:
            RuntimeError: If any resource failed to close
        """
        errors = []

        for page_id, page in list(self.pages.items()):
            try:
                await page.close()
                logger.debug(f"Closed page: {page_id}")
            except Exception as e:
                errors.append(f"Failed to close page {page_id}: {e}")
        self.pages.clear()

        for context_id, context in list(self.contexts.items()):
            try:
                await context.close()
                logger.debug(f"Closed context: {context_id}")
            except Exception as e:
                errors.append(f"Failed to close context {context_id}: {e}")
        self.contexts.clear()

        for browser_type, browser in list(self.browsers.items()):
            try:
                await browser.close()
                logger.debug(f"Closed browser: {browser_type}")
            except Exception as e:
                errors.append(f"Failed to close browser {browser_type}: {e}")
        self.browsers.clear()

        if self.playwright:
            try:
                await self.playwright.stop()
                logger.info("Playwright stopped successfully")
            except Exception as e:
                errors.append(f"Failed to stop Playwright: {e}")
            self.playwright = None

        self._initialized = False

        if errors:
            error_msg = "; ".join(errors)
            logger.warning(f"Cleanup completed with errors: {error_msg}")
            raise RuntimeError(f"Cleanup errors: {error_msg}")

        logger.info("Cleanup completed successfully")
