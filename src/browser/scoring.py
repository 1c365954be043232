"""Lighthouse-style scoring of page telemetry.

Every score is a step function of its metric: the first band whose upper
bound (inclusive) the value does not exceed gives the score, anything beyond
the last band gets the floor score. A metric that was never observed scores
0 and does not take part in the overall mean. The resource count is always
observed unless the page reported no timing entries at all.
"""

import logging
from typing import Optional, Sequence, Tuple

from src.models.performance_models import PerformanceMetrics, PerformanceScores

logger = logging.getLogger(__name__)

Bands = Sequence[Tuple[float, float]]

FLOOR_SCORE = 25.0

# (inclusive upper bound, score)
FCP_BANDS: Bands = ((1800, 100.0), (3000, 75.0), (4200, 50.0))
LCP_BANDS: Bands = ((2500, 100.0), (4000, 75.0))
LOAD_TIME_BANDS: Bands = ((2000, 100.0), (4000, 75.0), (6000, 50.0))
RESOURCE_COUNT_BANDS: Bands = ((50, 100.0), (100, 75.0), (150, 50.0))


def band_score(value: Optional[float], bands: Bands, floor: float = FLOOR_SCORE) -> float:
    """Score ``value`` against ``bands``; 0 if the value was not observed."""
    if value is None:
        return 0.0
    for upper_bound, score in bands:
        if value <= upper_bound:
            return score
    return floor


def overall_score(*scores: float) -> float:
    """Mean of the non-zero component scores, or 0 if there are none."""
    observed = [score for score in scores if score > 0]
    if not observed:
        return 0.0
    return sum(observed) / len(observed)


def calculate_scores(metrics: PerformanceMetrics) -> PerformanceScores:
    """Map raw telemetry to normalized 0-100 scores.

    Args:
        metrics: Captured page telemetry

    Returns:
        PerformanceScores with the four component scores and their mean
    """
    vitals = metrics.web_vitals

    fcp = band_score(vitals.first_contentful_paint, FCP_BANDS)
    lcp = band_score(vitals.largest_contentful_paint, LCP_BANDS)
    load_time = band_score(vitals.load_complete, LOAD_TIME_BANDS)
    resources = metrics.resources
    resource_efficiency = band_score(
        resources.total_resources if resources.observed else None,
        RESOURCE_COUNT_BANDS,
    )

    scores = PerformanceScores(
        first_contentful_paint=fcp,
        largest_contentful_paint=lcp,
        load_time=load_time,
        resource_efficiency=resource_efficiency,
        overall=overall_score(fcp, lcp, load_time, resource_efficiency),
    )
    logger.debug(f"Calculated scores: {scores.model_dump()}")
    return scores
