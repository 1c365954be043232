"""Batched concurrent page loads approximating load behavior.

PATTERN: asyncio.gather with per-slot error handling, batches run in order
CRITICAL: A failing slot never aborts its batch or the run
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from src.models.performance_models import (
    LoadTestOptions,
    LoadTestResults,
    LoadTestSummary,
    PerformanceAnalysis,
)

logger = logging.getLogger(__name__)

AnalyzeFn = Callable[[str], Awaitable[PerformanceAnalysis]]

ALL_FAILED_MESSAGE = "All requests failed - check server capacity and configuration"
SLOW_RESPONSE_MESSAGE = "High average response time under load - consider server scaling"
HIGH_ERROR_RATE_MESSAGE = "High error rate - check server stability and capacity"
LOW_SAMPLE_MESSAGE = "Consider running more iterations for better statistical significance"

SLOW_RESPONSE_MS = 5000
MAX_ERROR_RATE = 0.1
MIN_SAMPLES = 10


def response_times(results: List[PerformanceAnalysis]) -> List[float]:
    """Load-complete times of results that observed one."""
    return [
        r.metrics.web_vitals.load_complete
        for r in results
        if r.metrics.web_vitals.load_complete is not None
    ]


def generate_load_test_recommendations(
    results: List[PerformanceAnalysis],
    error_count: int,
    total_requests: int,
) -> List[str]:
    """Derive recommendations from successful results and the error count."""
    recommendations: List[str] = []

    times = response_times(results)
    average = sum(times) / len(times) if times else 0.0

    if average > SLOW_RESPONSE_MS:
        recommendations.append(SLOW_RESPONSE_MESSAGE)

    if error_count > total_requests * MAX_ERROR_RATE:
        recommendations.append(HIGH_ERROR_RATE_MESSAGE)

    if len(results) < MIN_SAMPLES:
        recommendations.append(LOW_SAMPLE_MESSAGE)

    return recommendations


def summarize_load_test(
    results: List[PerformanceAnalysis],
    errors: List[str],
    total_requests: int,
) -> LoadTestResults:
    """Fold successful analyses and slot errors into LoadTestResults.

    Response-time statistics only use results with an observed load-complete
    time; a result without one still counts as a successful request.
    """
    if not results:
        return LoadTestResults(
            summary=LoadTestSummary(
                total_requests=total_requests,
                successful_requests=0,
                failed_requests=len(errors),
            ),
            errors=list(errors),
            recommendations=[ALL_FAILED_MESSAGE],
        )

    times = response_times(results)
    if times:
        average = sum(times) / len(times)
        minimum, maximum = min(times), max(times)
    else:
        logger.warning("No successful result observed a load-complete time")
        average = minimum = maximum = 0.0

    summary = LoadTestSummary(
        total_requests=total_requests,
        successful_requests=len(results),
        failed_requests=len(errors),
        success_rate=len(results) / total_requests * 100 if total_requests else 0.0,
        average_response_time=average,
        min_response_time=minimum,
        max_response_time=maximum,
    )

    return LoadTestResults(
        summary=summary,
        errors=list(errors),
        recommendations=generate_load_test_recommendations(
            results, len(errors), total_requests
        ),
    )


class LoadOrchestrator:
    """Run batches of concurrent analyses and aggregate them.

    Batches are strictly sequential: batch ``b + 1`` starts only after every
    slot of batch ``b`` has settled. Slots within a batch are launched in
    order and complete in any order.

    Example:
        orchestrator = LoadOrchestrator()
        results = await orchestrator.run(
            url, LoadTestOptions(concurrent=2, iterations=3), tester.analyze_page_performance
        )
    """

    def __init__(self, sleep: Optional[Callable[[float], Awaitable[None]]] = None):
        """Initialize the orchestrator.

        Args:
            sleep: Coroutine used for the inter-batch pause (seconds);
                defaults to asyncio.sleep
        """
        self._sleep = sleep or asyncio.sleep

    async def run(
        self, url: str, options: LoadTestOptions, analyze: AnalyzeFn
    ) -> LoadTestResults:
        """Run the load test.

        Args:
            url: Page to load
            options: Batch shape and inter-batch delay
            analyze: Coroutine function performing one full analysis

        Returns:
            LoadTestResults; slot failures are reported in ``errors``
        """
        logger.info(
            f"Starting load test: {options.concurrent} concurrent users, "
            f"{options.iterations} iterations each"
        )

        results: List[PerformanceAnalysis] = []
        errors: List[str] = []

        for batch in range(options.iterations):
            batch_results = await self._run_batch(url, batch, options.concurrent, analyze, errors)
            results.extend(batch_results)

            logger.info(
                f"Batch {batch + 1}/{options.iterations} complete: "
                f"{len(batch_results)}/{options.concurrent} succeeded"
            )

            if options.delay_between_batches and batch < options.iterations - 1:
                await self._sleep(options.delay_between_batches / 1000)

        load_results = summarize_load_test(results, errors, options.total_requests)
        summary = load_results.summary
        logger.info(
            f"Load test complete: {summary.successful_requests}/{summary.total_requests} "
            f"succeeded ({summary.success_rate:.1f}%), "
            f"avg {summary.average_response_time:.1f}ms"
        )
        return load_results

    async def _run_batch(
        self,
        url: str,
        batch: int,
        concurrent: int,
        analyze: AnalyzeFn,
        errors: List[str],
    ) -> List[PerformanceAnalysis]:
        async def run_slot(slot: int) -> Optional[PerformanceAnalysis]:
            try:
                return await analyze(url)
            except Exception as e:
                logger.error(f"Load test slot failed (batch {batch}, user {slot}): {e}")
                errors.append(f"Batch {batch}, User {slot}: {e}")
                return None

        batch_results = await asyncio.gather(*[run_slot(slot) for slot in range(concurrent)])
        return [result for result in batch_results if result is not None]
