"""Mobile device profile for performance analysis.

This module provides the MobileProfileAdapter which puts a page into a
mobile-sized viewport with a mobile user agent, and gathers the two
mobile-specific measurements: touch-target compliance and scroll
performance.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from playwright.async_api import Page

from src.browser.playwright_integration import PlaywrightManager
from src.models.browser_models import Viewport
from src.models.performance_models import (
    MOBILE_3G,
    ScrollPerformanceMetrics,
    TouchTargetAnalysis,
)

logger = logging.getLogger(__name__)

MIN_TOUCH_TARGET_PX = 44

TOUCH_TARGET_SCRIPT = """
() => Array.from(
    document.querySelectorAll('button, a, input, select, textarea')
).map((el) => {
    const rect = el.getBoundingClientRect();
    return { width: rect.width, height: rect.height };
})
"""

SCROLL_SCRIPT = """
(step) => new Promise((resolve) => {
    let scrollTop = 0;
    const maxScroll = document.body.scrollHeight - window.innerHeight;
    const scroll = () => {
        scrollTop += step;
        window.scrollTo(0, scrollTop);
        if (scrollTop >= maxScroll) {
            resolve();
        } else {
            requestAnimationFrame(scroll);
        }
    };
    scroll();
})
"""


def analyze_target_sizes(
    sizes: List[Dict[str, Any]], min_size: float = MIN_TOUCH_TARGET_PX
) -> TouchTargetAnalysis:
    """Compute compliance for a list of ``{width, height}`` target sizes."""
    small: List[str] = []
    for index, size in enumerate(sizes):
        width = size.get("width", 0)
        height = size.get("height", 0)
        if width < min_size or height < min_size:
            small.append(f"Element {index}: {width}x{height}")

    total = len(sizes)
    compliance = (total - len(small)) / total * 100 if total else 100.0

    return TouchTargetAnalysis(
        total_targets=total,
        small_targets=len(small),
        small_target_details=small,
        compliance=compliance,
    )


class MobileProfileAdapter:
    """Configure a page as a mobile device before analysis.

    Example:
        adapter = MobileProfileAdapter(playwright_manager)
        await adapter.apply(page)
        ...
        touch = await adapter.analyze_touch_targets(page)
        scroll = await adapter.measure_scroll_performance(page)
    """

    VIEWPORT = Viewport(width=375, height=667, is_mobile=True, has_touch=True)
    USER_AGENT = (
        "Mozilla/5.0 (iPhone; CPU iPhone OS 14_0 like Mac OS X) AppleWebKit/605.1.15"
    )
    NETWORK_CONDITIONS = MOBILE_3G
    SCROLL_STEP_PX = 100

    def __init__(self, playwright_manager: Optional[PlaywrightManager] = None):
        self.playwright_manager = playwright_manager or PlaywrightManager()

    async def apply(self, page: Page) -> None:
        """Set the mobile viewport size and user agent on ``page``.

        Only the width and height of ``VIEWPORT`` are applied: Playwright
        fixes ``is_mobile`` and ``has_touch`` when a context is created, so
        they take effect only for contexts built with
        ``PlaywrightManager.create_context(browser, viewport=VIEWPORT)``.
        """
        await self.playwright_manager.set_viewport(page, self.VIEWPORT)
        await self.playwright_manager.set_user_agent(page, self.USER_AGENT)
        logger.info(
            f"Mobile profile applied ({self.VIEWPORT.width}x{self.VIEWPORT.height})"
        )

    async def analyze_touch_targets(self, page: Page) -> TouchTargetAnalysis:
        """Check interactive elements against the 44x44px minimum."""
        sizes = await self.playwright_manager.evaluate(page, TOUCH_TARGET_SCRIPT)
        analysis = analyze_target_sizes(sizes or [])
        logger.debug(
            f"Touch targets: {analysis.small_targets}/{analysis.total_targets} too small "
            f"({analysis.compliance:.1f}% compliant)"
        )
        return analysis

    async def measure_scroll_performance(self, page: Page) -> ScrollPerformanceMetrics:
        """Time a programmatic scroll to the bottom of the page.

        Only the duration is measured. Frame timing is not sampled, so the
        result always reports ``smooth=True`` and ``jank_score=0``.
        """
        start = time.perf_counter()
        await self.playwright_manager.evaluate(page, SCROLL_SCRIPT, self.SCROLL_STEP_PX)
        duration_ms = (time.perf_counter() - start) * 1000

        logger.debug(f"Scroll to bottom took {duration_ms:.1f}ms")
        return ScrollPerformanceMetrics(duration=duration_ms, smooth=True, jank_score=0.0)
