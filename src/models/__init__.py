"""Models package for the webperf performance engine."""

from .browser_models import BrowserType, DeviceType, Viewport
from .performance_models import (
    WebVitals,
    SlowestResource,
    ResourceMetrics,
    MemorySnapshot,
    PerformanceMetrics,
    PerformanceScores,
    NetworkConditions,
    MOBILE_3G,
    SLOW_3G,
    NETWORK_PRESETS,
    PerformanceAnalysis,
    LoadTestOptions,
    LoadTestSummary,
    LoadTestResults,
    TouchTargetAnalysis,
    ScrollPerformanceMetrics,
    MobileSpecificMetrics,
    MobilePerformanceResults,
    PageComparisonEntry,
    PageComparison,
)

__all__ = [
    # Browser models
    "BrowserType",
    "DeviceType",
    "Viewport",
    # Telemetry
    "WebVitals",
    "SlowestResource",
    "ResourceMetrics",
    "MemorySnapshot",
    "PerformanceMetrics",
    "PerformanceScores",
    # Network
    "NetworkConditions",
    "MOBILE_3G",
    "SLOW_3G",
    "NETWORK_PRESETS",
    # Analyses
    "PerformanceAnalysis",
    "LoadTestOptions",
    "LoadTestSummary",
    "LoadTestResults",
    "TouchTargetAnalysis",
    "ScrollPerformanceMetrics",
    "MobileSpecificMetrics",
    "MobilePerformanceResults",
    "PageComparisonEntry",
    "PageComparison",
]
