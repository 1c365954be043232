"""Services package for the webperf performance engine."""

from .performance_service import (
    PerformanceTester,
    PerformanceOrchestrator,
    build_comparison,
)

__all__ = [
    "PerformanceTester",
    "PerformanceOrchestrator",
    "build_comparison",
]
