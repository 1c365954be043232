"""Diagnostic hints derived from page telemetry and scores."""

from typing import List

from src.models.performance_models import PerformanceMetrics, PerformanceScores

GOOD_SCORE = 75
MAX_RESOURCES = 100
MAX_TRANSFER_BYTES = 2 * 1024 * 1024
MAX_TTFB_MS = 600


def generate_recommendations(
    metrics: PerformanceMetrics, scores: PerformanceScores
) -> List[str]:
    """Return advisory messages in check order.

    Each check is independent, so several messages may be returned.
    """
    recommendations: List[str] = []

    if scores.first_contentful_paint < GOOD_SCORE:
        recommendations.append(
            "Optimize First Contentful Paint by reducing render-blocking resources"
        )

    if scores.largest_contentful_paint < GOOD_SCORE:
        recommendations.append(
            "Improve Largest Contentful Paint by optimizing main content loading"
        )

    if metrics.resources.total_resources > MAX_RESOURCES:
        recommendations.append(
            f"Reduce number of resources (currently {metrics.resources.total_resources})"
        )

    if metrics.resources.total_size > MAX_TRANSFER_BYTES:
        recommendations.append("Optimize resource sizes - total transfer size is high")

    first_byte = metrics.web_vitals.first_byte
    if first_byte is not None and first_byte > MAX_TTFB_MS:
        recommendations.append("Improve server response time (TTFB)")

    return recommendations
