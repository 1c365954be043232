"""Telemetry collection for a single page load.

This module provides the TelemetryCollector class which drives one page load
and extracts navigation, paint, and resource timing plus optional memory
counters, producing an immutable PerformanceMetrics snapshot.

PATTERN: Use the Performance Observer API via page.evaluate() and do all
aggregation in Python so it can be tested without a browser.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from src.browser.playwright_integration import PlaywrightManager
from src.models.performance_models import (
    MemorySnapshot,
    PerformanceMetrics,
    ResourceMetrics,
    SlowestResource,
    WebVitals,
)

logger = logging.getLogger(__name__)


# Resolves with a raw payload as soon as the navigation entry is observed,
# or with an empty payload once timeoutMs elapses.
OBSERVER_SCRIPT = """
(timeoutMs) => new Promise((resolve) => {
    const empty = { navigation: null, paints: [], lcp: null, resources: [], memory: null };
    let settled = false;
    let lcp = null;
    let timer = null;

    const snapshot = (nav) => {
        const paints = performance.getEntriesByType('paint').map((p) => ({
            name: p.name,
            startTime: p.startTime,
        }));
        const resources = performance.getEntriesByType('resource').map((r) => ({
            name: r.name,
            initiatorType: r.initiatorType,
            requestStart: r.requestStart,
            responseEnd: r.responseEnd,
            transferSize: r.transferSize,
        }));
        const memory = performance.memory
            ? {
                usedJSHeapSize: performance.memory.usedJSHeapSize,
                totalJSHeapSize: performance.memory.totalJSHeapSize,
                jsHeapSizeLimit: performance.memory.jsHeapSizeLimit,
            }
            : null;
        return {
            navigation: {
                domContentLoadedEventStart: nav.domContentLoadedEventStart,
                domContentLoadedEventEnd: nav.domContentLoadedEventEnd,
                loadEventStart: nav.loadEventStart,
                loadEventEnd: nav.loadEventEnd,
                requestStart: nav.requestStart,
                responseStart: nav.responseStart,
            },
            paints,
            lcp,
            resources,
            memory,
        };
    };

    const finish = (payload) => {
        if (settled) return;
        settled = true;
        observer.disconnect();
        clearTimeout(timer);
        resolve(payload);
    };

    const observer = new PerformanceObserver((list) => {
        const entries = list.getEntries();
        for (const entry of entries) {
            if (entry.entryType === 'largest-contentful-paint') {
                lcp = entry.startTime;
            }
        }
        const nav = entries.find((entry) => entry.entryType === 'navigation');
        if (nav) finish(snapshot(nav));
    });

    timer = setTimeout(() => finish(empty), timeoutMs);

    for (const type of ['navigation', 'paint', 'largest-contentful-paint']) {
        try {
            observer.observe({ type, buffered: true });
        } catch (e) {
            // entry type not supported by this browser
        }
    }
})
"""


def empty_payload() -> Dict[str, Any]:
    """Payload used when no navigation entry is observed in time."""
    return {"navigation": None, "paints": [], "lcp": None, "resources": [], "memory": None}


def parse_web_vitals(
    navigation: Optional[Dict[str, Any]],
    paints: Iterable[Dict[str, Any]],
    lcp: Optional[float] = None,
) -> WebVitals:
    """Convert raw navigation and paint entries into WebVitals.

    Event durations are only reported once the event has finished
    (its end timestamp is non-zero).
    """
    values: Dict[str, Optional[float]] = {}

    if navigation:
        dcl_end = navigation.get("domContentLoadedEventEnd") or 0
        if dcl_end > 0:
            values["dom_content_loaded"] = dcl_end - (
                navigation.get("domContentLoadedEventStart") or 0
            )

        load_end = navigation.get("loadEventEnd") or 0
        if load_end > 0:
            values["load_complete"] = load_end - (navigation.get("loadEventStart") or 0)

        response_start = navigation.get("responseStart")
        request_start = navigation.get("requestStart")
        if response_start is not None and request_start is not None:
            values["first_byte"] = response_start - request_start

    for paint in paints:
        if paint.get("name") == "first-contentful-paint":
            values["first_contentful_paint"] = paint.get("startTime")

    if lcp is not None:
        values["largest_contentful_paint"] = lcp

    return WebVitals(**values)


def aggregate_resources(entries: Iterable[Dict[str, Any]]) -> ResourceMetrics:
    """Aggregate resource timing entries in a single pass.

    Tracks the slowest resource by ``responseEnd - requestStart``, the total
    transfer size (entries without transfer-size instrumentation are skipped),
    and the count per initiator type.
    """
    total = 0
    total_size = 0
    slowest_name = ""
    slowest_duration = 0.0
    resource_types: Dict[str, int] = {}

    for entry in entries:
        total += 1

        duration = (entry.get("responseEnd") or 0) - (entry.get("requestStart") or 0)
        if duration > slowest_duration:
            slowest_name = entry.get("name", "")
            slowest_duration = duration

        initiator = entry.get("initiatorType") or "other"
        resource_types[initiator] = resource_types.get(initiator, 0) + 1

        transfer_size = entry.get("transferSize")
        if transfer_size:
            total_size += int(transfer_size)

    return ResourceMetrics(
        total_resources=total,
        total_size=total_size,
        slowest_resource=SlowestResource(name=slowest_name, duration=slowest_duration),
        resource_types=resource_types,
    )


def parse_memory(memory: Optional[Dict[str, Any]]) -> Optional[MemorySnapshot]:
    if not memory:
        return None
    return MemorySnapshot(
        used_js_heap_size=int(memory.get("usedJSHeapSize", 0)),
        total_js_heap_size=int(memory.get("totalJSHeapSize", 0)),
        js_heap_size_limit=int(memory.get("jsHeapSizeLimit", 0)),
    )


def build_metrics(payload: Optional[Dict[str, Any]]) -> PerformanceMetrics:
    """Build a PerformanceMetrics snapshot from the observer payload.

    Without a navigation entry nothing was observed, so resources are marked
    unobserved instead of reporting a count of zero.
    """
    payload = payload or empty_payload()
    if payload.get("navigation") is None:
        resources = ResourceMetrics(observed=False)
    else:
        entries: List[Dict[str, Any]] = payload.get("resources") or []
        resources = aggregate_resources(entries)
    return PerformanceMetrics(
        web_vitals=parse_web_vitals(
            payload.get("navigation"),
            payload.get("paints") or [],
            payload.get("lcp"),
        ),
        resources=resources,
        memory=parse_memory(payload.get("memory")),
    )


class TelemetryCollector:
    """Drive one page load and capture its telemetry.

    The observation is bounded by ``metrics_timeout_ms`` inside the page
    (default 5 seconds). The Python side waits at most ``grace_ms`` longer
    before falling back to an empty snapshot, so a page that never emits a
    navigation entry cannot stall the caller.

    Example:
        collector = TelemetryCollector(playwright_manager)
        metrics = await collector.collect(page, "https://example.com")
    """

    DEFAULT_TIMEOUT_MS = 5000

    def __init__(
        self,
        playwright_manager: Optional[PlaywrightManager] = None,
        metrics_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        grace_ms: int = 1000,
    ):
        """Initialize the collector.

        Args:
            playwright_manager: Manager used for navigation (a detached
                manager is created if None; it never launches a browser)
            metrics_timeout_ms: Ceiling for the in-page observation
            grace_ms: Extra time allowed for the evaluation round-trip
        """
        self.playwright_manager = playwright_manager or PlaywrightManager()
        self.metrics_timeout_ms = metrics_timeout_ms
        self.grace_ms = grace_ms

    async def collect(self, page: Page, url: str) -> PerformanceMetrics:
        """Navigate to ``url``, wait for network idle, then capture metrics.

        Raises:
            NavigationError: If navigation or the idle wait fails
        """
        logger.info(f"Collecting telemetry for: {url}")

        await self.playwright_manager.navigate(page, url)
        await self.playwright_manager.wait_for_idle(page)

        payload = await self._observe(page)
        metrics = build_metrics(payload)

        logger.info(
            f"Telemetry collected - FCP: {metrics.web_vitals.first_contentful_paint}, "
            f"LCP: {metrics.web_vitals.largest_contentful_paint}, "
            f"resources: {metrics.resources.total_resources}"
        )
        if metrics.memory is None:
            logger.debug("Memory counters not exposed by this browser")

        return metrics

    async def _observe(self, page: Page) -> Dict[str, Any]:
        ceiling_s = (self.metrics_timeout_ms + self.grace_ms) / 1000
        try:
            payload = await asyncio.wait_for(
                page.evaluate(OBSERVER_SCRIPT, self.metrics_timeout_ms),
                timeout=ceiling_s,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"No timing entries within {self.metrics_timeout_ms}ms, using empty snapshot"
            )
            return empty_payload()
        except PlaywrightError as e:
            logger.warning(f"Failed to observe timing entries: {e}")
            return empty_payload()

        if not payload or payload.get("navigation") is None:
            logger.warning(
                f"Navigation entry not observed within {self.metrics_timeout_ms}ms"
            )
        logger.debug(f"Raw telemetry payload: {payload}")
        return payload or empty_payload()
