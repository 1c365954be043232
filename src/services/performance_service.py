"""Performance analysis and load-testing service.

This module provides the two public entry points of the performance engine:

- PerformanceTester: bound to an existing Playwright page; exposes
  analyze_page_performance, test_with_throttling, load_test,
  test_mobile_performance and compare_pages.
- PerformanceOrchestrator: owns the Playwright lifecycle (browser, context,
  pages) and runs each analysis on its own page.

PATTERN: Facade pattern - Telemetry Collector -> Score Calculator ->
Recommendation Generator, wrapped by throttling, mobile and load layers
CRITICAL: Always use PerformanceOrchestrator as an async context manager
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, List, Optional

from playwright.async_api import Page, BrowserContext

from src.browser.load_orchestrator import LoadOrchestrator
from src.browser.mobile_profile import MobileProfileAdapter
from src.browser.network_conditions import (
    NetworkConditionController,
    NetworkConditionHandle,
)
from src.browser.playwright_integration import PlaywrightManager
from src.browser.recommendations import generate_recommendations
from src.browser.scoring import calculate_scores
from src.browser.telemetry_collector import TelemetryCollector
from src.config.performance_config import PerformanceConfig
from src.models.performance_models import (
    LoadTestOptions,
    LoadTestResults,
    MobilePerformanceResults,
    MobileSpecificMetrics,
    NetworkConditions,
    PageComparison,
    PageComparisonEntry,
    PerformanceAnalysis,
)

logger = logging.getLogger(__name__)

PageFactory = Callable[[], Awaitable[Page]]


class PerformanceTester:
    """Performance analysis entry points for one page.

    Example:
        tester = PerformanceTester(page)
        analysis = await tester.analyze_page_performance("https://example.com")
        print(analysis.scores.overall, analysis.recommendations)
    """

    def __init__(
        self,
        page: Page,
        playwright_manager: Optional[PlaywrightManager] = None,
        collector: Optional[TelemetryCollector] = None,
        load_orchestrator: Optional[LoadOrchestrator] = None,
        page_factory: Optional[PageFactory] = None,
    ):
        """Initialize the tester.

        Args:
            page: Page used for single analyses
            playwright_manager: Manager for page operations
            collector: Telemetry collector (created from the manager if None)
            load_orchestrator: Batch runner for load tests
            page_factory: Coroutine function returning a fresh page. When
                given, every load-test slot runs on its own page, which is
                closed afterwards; otherwise all slots share ``page``.
        """
        self.page = page
        self.playwright_manager = playwright_manager or PlaywrightManager()
        self.collector = collector or TelemetryCollector(self.playwright_manager)
        self.load_orchestrator = load_orchestrator or LoadOrchestrator()
        self.page_factory = page_factory
        self.network = NetworkConditionController(page, self.playwright_manager)
        self.mobile = MobileProfileAdapter(self.playwright_manager)

    async def analyze_page_performance(
        self, url: str, network: Optional[NetworkConditionHandle] = None
    ) -> PerformanceAnalysis:
        """Load ``url`` and return its scored analysis.

        Args:
            url: Page to analyze
            network: Active throttling handle, recorded on the result

        Raises:
            NavigationError: If the page cannot be loaded
        """
        return await self._analyze_on(self.page, url, network)

    async def _analyze_on(
        self,
        page: Page,
        url: str,
        network: Optional[NetworkConditionHandle] = None,
    ) -> PerformanceAnalysis:
        metrics = await self.collector.collect(page, url)
        scores = calculate_scores(metrics)
        analysis = PerformanceAnalysis(
            url=url,
            metrics=metrics,
            scores=scores,
            recommendations=generate_recommendations(metrics, scores),
            network_conditions=network.conditions if network else None,
        )
        logger.info(f"Analysis of {url} complete: overall score {scores.overall:.1f}")
        return analysis

    async def test_with_throttling(
        self, url: str, conditions: NetworkConditions
    ) -> PerformanceAnalysis:
        """Analyze ``url`` under ``conditions``, then restore the network.

        The network is restored whether the analysis succeeds or raises.

        Raises:
            NetworkEmulationError: If throttling cannot be applied
            NavigationError: If the page cannot be loaded
        """
        async with self.network.throttle(conditions) as handle:
            return await self.analyze_page_performance(url, network=handle)

    async def load_test(self, url: str, options: LoadTestOptions) -> LoadTestResults:
        """Run ``options.iterations`` batches of ``options.concurrent`` analyses.

        Never raises for slot failures; inspect ``errors`` and
        ``summary.success_rate``.
        """
        if self.page_factory is None:
            analyze = self.analyze_page_performance
        else:
            analyze = self._analyze_on_fresh_page
        return await self.load_orchestrator.run(url, options, analyze)

    async def _analyze_on_fresh_page(self, url: str) -> PerformanceAnalysis:
        page = await self.page_factory()
        try:
            return await self._analyze_on(page, url)
        finally:
            try:
                await self.playwright_manager.close_page(page)
            except Exception as e:
                logger.error(f"Failed to close load-test page: {e}")

    async def test_mobile_performance(self, url: str) -> MobilePerformanceResults:
        """Analyze ``url`` as a throttled mobile device.

        Applies the mobile viewport and user agent to the page, runs a
        throttled analysis with the mobile network preset, then measures
        touch targets and scroll performance.
        """
        await self.mobile.apply(self.page)
        analysis = await self.test_with_throttling(url, self.mobile.NETWORK_CONDITIONS)

        touch_targets = await self.mobile.analyze_touch_targets(self.page)
        scroll = await self.mobile.measure_scroll_performance(self.page)

        return MobilePerformanceResults(
            **analysis.model_dump(),
            mobile_specific=MobileSpecificMetrics(
                viewport_size=self.mobile.VIEWPORT,
                touch_target_analysis=touch_targets,
                scroll_performance=scroll,
            ),
        )

    async def compare_pages(self, urls: List[str]) -> PageComparison:
        """Analyze several pages one after another and rank them by score."""
        entries: List[PageComparisonEntry] = []
        for url in urls:
            analysis = await self.analyze_page_performance(url)
            entries.append(
                PageComparisonEntry(
                    url=url,
                    score=analysis.scores.overall,
                    load_time=analysis.metrics.web_vitals.load_complete or 0,
                    resources=analysis.metrics.resources.total_resources,
                )
            )
        return build_comparison(entries)


def build_comparison(entries: List[PageComparisonEntry]) -> PageComparison:
    """Average the entries and pick the best and worst scoring URL.

    Ties keep the earliest URL.
    """
    if not entries:
        return PageComparison()

    best = entries[0]
    worst = entries[0]
    for entry in entries[1:]:
        if entry.score > best.score:
            best = entry
        if entry.score < worst.score:
            worst = entry

    return PageComparison(
        entries=entries,
        average_score=sum(e.score for e in entries) / len(entries),
        average_load_time=sum(e.load_time for e in entries) / len(entries),
        best_url=best.url,
        worst_url=worst.url,
    )


class PerformanceOrchestrator:
    """Own a browser and run performance analyses on isolated pages.

    Each call runs on a page of its own, so mobile emulation or throttling
    never leaks into a later call. Load-test slots get a fresh page each.

    Example:
        async with PerformanceOrchestrator(PerformanceConfig()) as orchestrator:
            analysis = await orchestrator.analyze_page_performance(url)
            results = await orchestrator.load_test(
                url, LoadTestOptions(concurrent=2, iterations=3)
            )
    """

    def __init__(
        self,
        config: Optional[PerformanceConfig] = None,
        playwright_manager: Optional[PlaywrightManager] = None,
    ):
        self.config = config or PerformanceConfig()
        self.playwright_manager = playwright_manager or PlaywrightManager(
            navigation_timeout_ms=self.config.navigation_timeout_ms,
            idle_timeout_ms=self.config.idle_timeout_ms,
        )
        self.collector = TelemetryCollector(
            self.playwright_manager,
            metrics_timeout_ms=self.config.metrics_timeout_ms,
        )
        self._context: Optional[BrowserContext] = None
        self._initialized = False

    async def __aenter__(self):
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.cleanup()

    async def initialize(self) -> None:
        """Launch the browser and create the shared context.

        Raises:
            RuntimeError: If the browser or context cannot be created
        """
        if self._initialized:
            return

        browser = await self.playwright_manager.launch_browser(
            browser_type=self.config.browser_type,
            headless=self.config.headless,
        )
        self._context = await self.playwright_manager.create_context(browser)
        self._initialized = True
        logger.info("PerformanceOrchestrator initialized")

    async def new_page(self) -> Page:
        if not self._initialized:
            await self.initialize()
        return await self.playwright_manager.create_page(self._context)

    @asynccontextmanager
    async def _tester(self) -> AsyncIterator[PerformanceTester]:
        page = await self.new_page()
        try:
            yield PerformanceTester(
                page,
                playwright_manager=self.playwright_manager,
                collector=self.collector,
                page_factory=self.new_page,
            )
        finally:
            try:
                await self.playwright_manager.close_page(page)
            except Exception as e:
                logger.error(f"Failed to close analysis page: {e}")

    async def analyze_page_performance(self, url: str) -> PerformanceAnalysis:
        async with self._tester() as tester:
            return await tester.analyze_page_performance(url)

    async def test_with_throttling(
        self, url: str, conditions: NetworkConditions
    ) -> PerformanceAnalysis:
        async with self._tester() as tester:
            return await tester.test_with_throttling(url, conditions)

    async def load_test(self, url: str, options: LoadTestOptions) -> LoadTestResults:
        async with self._tester() as tester:
            return await tester.load_test(url, options)

    async def test_mobile_performance(self, url: str) -> MobilePerformanceResults:
        async with self._tester() as tester:
            return await tester.test_mobile_performance(url)

    async def compare_pages(self, urls: List[str]) -> PageComparison:
        async with self._tester() as tester:
            return await tester.compare_pages(urls)

    async def cleanup(self) -> None:
        """Close every page, context and browser.

        Raises:
            RuntimeError: If any resource failed to close
        """
        self._context = None
        self._initialized = False
        await self.playwright_manager.cleanup()
        logger.info("PerformanceOrchestrator cleaned up")
