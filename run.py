"""
webperf Demo

This script runs every entry point of the performance engine against one URL:
- Plain analysis with scores and recommendations
- Throttled analysis (slow 3G)
- Mobile analysis
- A small load test

Run this from the project root:
    python run.py https://example.com
"""

import sys
from pathlib import Path

# Add project root to Python path so we can import from src as a package
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

import asyncio
import logging

from src.config.performance_config import load_config
from src.models.performance_models import SLOW_3G, LoadTestOptions
from src.services.performance_service import PerformanceOrchestrator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def print_section(title: str):
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)


async def main(url: str):
    config = load_config()

    async with PerformanceOrchestrator(config) as orchestrator:
        print_section("Analysis")
        analysis = await orchestrator.analyze_page_performance(url)
        print(f"Overall score: {analysis.scores.overall:.1f}")
        for recommendation in analysis.recommendations:
            print(f"  - {recommendation}")

        print_section("Slow 3G")
        throttled = await orchestrator.test_with_throttling(url, SLOW_3G)
        print(f"Overall score: {throttled.scores.overall:.1f}")
        print(f"Load complete: {throttled.metrics.web_vitals.load_complete}")

        print_section("Mobile")
        mobile = await orchestrator.test_mobile_performance(url)
        touch = mobile.mobile_specific.touch_target_analysis
        print(f"Overall score: {mobile.scores.overall:.1f}")
        print(f"Touch target compliance: {touch.compliance:.1f}%")

        print_section("Load test")
        results = await orchestrator.load_test(
            url, LoadTestOptions(concurrent=2, iterations=3, delay_between_batches=1000)
        )
        summary = results.summary
        print(f"{summary.successful_requests}/{summary.total_requests} succeeded")
        print(f"Average response: {summary.average_response_time:.1f}ms")


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else "https://example.com"
    try:
        asyncio.run(main(target))
    except KeyboardInterrupt:
        logger.info("Interrupted")
