"""Performance analysis and load-testing data models.

This module defines the Pydantic models produced by the performance engine:
raw telemetry (web vitals, resource timing, memory), normalized scores,
per-page analyses, network throttling conditions, load-test options and
results, and the mobile-specific extensions.

Records captured from a page load (``PerformanceMetrics`` and
``PerformanceAnalysis``) are frozen once constructed.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from src.models.browser_models import Viewport


class WebVitals(BaseModel):
    """Paint and navigation timings in milliseconds.

    A field is None when the browser never emitted the corresponding
    timing entry within the observation window.
    """

    first_contentful_paint: Optional[float] = Field(
        default=None, description="First Contentful Paint (ms)"
    )
    largest_contentful_paint: Optional[float] = Field(
        default=None, description="Largest Contentful Paint (ms)"
    )
    dom_content_loaded: Optional[float] = Field(
        default=None, description="DOMContentLoaded event duration (ms)"
    )
    load_complete: Optional[float] = Field(
        default=None, description="Load event duration (ms)"
    )
    first_byte: Optional[float] = Field(
        default=None, description="Time to First Byte (ms)"
    )

    class Config:
        frozen = True


class SlowestResource(BaseModel):
    """The single slowest resource of a page load."""

    name: str = Field(default="", description="Resource URL")
    duration: float = Field(default=0.0, ge=0, description="responseEnd - requestStart (ms)")

    class Config:
        frozen = True


class ResourceMetrics(BaseModel):
    """Aggregated resource timing entries.

    ``observed`` is False when the page reported no timing entries at all
    (observation timed out or failed); the counts are then meaningless zeros.
    """

    observed: bool = Field(default=True, description="Resource timing was captured")
    total_resources: int = Field(default=0, ge=0, description="Resource entry count")
    total_size: int = Field(
        default=0, ge=0, description="Total transfer size in bytes (best effort)"
    )
    slowest_resource: SlowestResource = Field(default_factory=SlowestResource)
    resource_types: Dict[str, int] = Field(
        default_factory=dict, description="Resource count by initiator type"
    )

    class Config:
        frozen = True


class MemorySnapshot(BaseModel):
    """JavaScript heap counters (Chromium only)."""

    used_js_heap_size: int = Field(ge=0, description="Used JS heap (bytes)")
    total_js_heap_size: int = Field(ge=0, description="Total JS heap (bytes)")
    js_heap_size_limit: int = Field(ge=0, description="JS heap limit (bytes)")

    class Config:
        frozen = True


class PerformanceMetrics(BaseModel):
    """Telemetry captured from a single page load."""

    web_vitals: WebVitals = Field(default_factory=WebVitals)
    resources: ResourceMetrics = Field(default_factory=ResourceMetrics)
    memory: Optional[MemorySnapshot] = Field(
        default=None, description="Heap counters, None when not exposed"
    )

    class Config:
        frozen = True


class PerformanceScores(BaseModel):
    """Normalized 0-100 scores derived from PerformanceMetrics."""

    first_contentful_paint: float = Field(default=0, ge=0, le=100)
    largest_contentful_paint: float = Field(default=0, ge=0, le=100)
    load_time: float = Field(default=0, ge=0, le=100)
    resource_efficiency: float = Field(default=0, ge=0, le=100)
    overall: float = Field(default=0, ge=0, le=100)

    class Config:
        frozen = True


class NetworkConditions(BaseModel):
    """Synthetic bandwidth and latency constraints.

    Throughput is in bytes per second and latency in milliseconds, matching
    the Chrome DevTools Protocol ``Network.emulateNetworkConditions`` command.
    A throughput of -1 disables the limit.
    """

    download_throughput: float = Field(ge=-1, description="Download bytes/sec")
    upload_throughput: float = Field(ge=-1, description="Upload bytes/sec")
    latency: float = Field(ge=0, description="Added round-trip latency (ms)")

    class Config:
        frozen = True

    @classmethod
    def unconstrained(cls) -> "NetworkConditions":
        """Conditions that clear any emulated throttling."""
        return cls(download_throughput=-1, upload_throughput=-1, latency=0)

    @property
    def is_unconstrained(self) -> bool:
        return (
            self.download_throughput == -1
            and self.upload_throughput == -1
            and self.latency == 0
        )


# 1.5 Mbps down / 750 Kbps up / 150ms
MOBILE_3G = NetworkConditions(
    download_throughput=1.5 * 1024 * 1024 / 8,
    upload_throughput=750 * 1024 / 8,
    latency=150,
)

# 500 Kbps both ways / 400ms
SLOW_3G = NetworkConditions(
    download_throughput=500 * 1024 / 8,
    upload_throughput=500 * 1024 / 8,
    latency=400,
)

NETWORK_PRESETS: Dict[str, NetworkConditions] = {
    "mobile-3g": MOBILE_3G,
    "slow-3g": SLOW_3G,
}


class PerformanceAnalysis(BaseModel):
    """Result of one page-load observation."""

    url: str = Field(description="Analyzed URL")
    timestamp: str = Field(
        default_factory=lambda: datetime.now().isoformat(),
        description="ISO-8601 capture time",
    )
    metrics: PerformanceMetrics = Field(description="Raw telemetry")
    scores: PerformanceScores = Field(description="Normalized scores")
    recommendations: List[str] = Field(default_factory=list)
    network_conditions: Optional[NetworkConditions] = Field(
        default=None, description="Throttling applied during the load, if any"
    )

    class Config:
        frozen = True


class LoadTestOptions(BaseModel):
    """Load test shape: ``concurrent`` slots per batch, ``iterations`` batches."""

    concurrent: int = Field(ge=1, description="Parallel page loads per batch")
    iterations: int = Field(ge=1, description="Number of sequential batches")
    delay_between_batches: Optional[int] = Field(
        default=None, ge=0, description="Pause between batches (ms)"
    )

    @property
    def total_requests(self) -> int:
        return self.concurrent * self.iterations


class LoadTestSummary(BaseModel):
    """Aggregate statistics for a load test."""

    total_requests: int = Field(default=0, ge=0)
    successful_requests: int = Field(default=0, ge=0)
    failed_requests: int = Field(default=0, ge=0)
    success_rate: float = Field(default=0.0, ge=0, le=100, description="Percent")
    average_response_time: float = Field(default=0.0, ge=0, description="ms")
    min_response_time: float = Field(default=0.0, ge=0, description="ms")
    max_response_time: float = Field(default=0.0, ge=0, description="ms")


class LoadTestResults(BaseModel):
    """Load test summary with per-slot errors and recommendations."""

    summary: LoadTestSummary = Field(default_factory=LoadTestSummary)
    errors: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class TouchTargetAnalysis(BaseModel):
    """Touch target size compliance (44x44 CSS px minimum)."""

    total_targets: int = Field(default=0, ge=0)
    small_targets: int = Field(default=0, ge=0)
    small_target_details: List[str] = Field(default_factory=list)
    compliance: float = Field(default=100.0, ge=0, le=100, description="Percent")


class ScrollPerformanceMetrics(BaseModel):
    """Timing of a programmatic scroll to the bottom of the page."""

    duration: float = Field(ge=0, description="Scroll duration (ms)")
    smooth: bool = Field(default=True)
    jank_score: float = Field(default=0.0, ge=0)


class MobileSpecificMetrics(BaseModel):
    """Measurements gathered only by the mobile profile."""

    viewport_size: Viewport
    touch_target_analysis: TouchTargetAnalysis
    scroll_performance: ScrollPerformanceMetrics


class MobilePerformanceResults(PerformanceAnalysis):
    """A throttled mobile analysis plus mobile-specific measurements."""

    mobile_specific: MobileSpecificMetrics


class PageComparisonEntry(BaseModel):
    url: str
    score: float = Field(ge=0, le=100)
    load_time: float = Field(ge=0)
    resources: int = Field(ge=0)


class PageComparison(BaseModel):
    """Side-by-side overall scores for several pages."""

    entries: List[PageComparisonEntry] = Field(default_factory=list)
    average_score: float = Field(default=0.0)
    average_load_time: float = Field(default=0.0)
    best_url: Optional[str] = None
    worst_url: Optional[str] = None
