"""Browser-driven performance measurement for Playwright pages.

This package provides:
- Playwright browser control and lifecycle management
- Telemetry collection (navigation, paint and resource timing, memory)
- Lighthouse-style scoring and recommendations
- Scoped network throttling through the Chrome DevTools Protocol
- Mobile device profile (viewport, user agent, touch targets, scrolling)
- Batched concurrent load testing
"""

from src.browser.errors import (
    PerformanceTestingError,
    NavigationError,
    NetworkEmulationError,
)
from src.browser.playwright_integration import PlaywrightManager
from src.browser.telemetry_collector import TelemetryCollector
from src.browser.scoring import calculate_scores
from src.browser.recommendations import generate_recommendations
from src.browser.network_conditions import (
    NetworkConditionController,
    NetworkConditionHandle,
)
from src.browser.mobile_profile import MobileProfileAdapter
from src.browser.load_orchestrator import LoadOrchestrator

__all__ = [
    "PerformanceTestingError",
    "NavigationError",
    "NetworkEmulationError",
    "PlaywrightManager",
    "TelemetryCollector",
    "calculate_scores",
    "generate_recommendations",
    "NetworkConditionController",
    "NetworkConditionHandle",
    "MobileProfileAdapter",
    "LoadOrchestrator",
]
