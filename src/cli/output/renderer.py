"""Rich terminal rendering of performance results."""

import logging
from typing import List, Optional

from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from src.models.performance_models import (
    LoadTestResults,
    MobilePerformanceResults,
    PageComparison,
    PerformanceAnalysis,
)

logger = logging.getLogger(__name__)


def _ms(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.0f}ms"


class ResultRenderer:
    """
    Render analyses and load-test results as terminal tables.

    With ``as_json`` every result is printed as its JSON model dump instead.
    """

    def __init__(self, console: Optional[Console] = None, as_json: bool = False):
        """
        Initialize the renderer.

        Args:
            console: Rich console (creates new if not provided)
            as_json: Print raw JSON instead of tables
        """
        self.console = console or Console()
        self.as_json = as_json

    def _json(self, result: BaseModel) -> None:
        self.console.print_json(result.model_dump_json())

    def _recommendations(self, recommendations: List[str]) -> None:
        if not recommendations:
            self.console.print("[green]No recommendations[/green]")
            return
        self.console.print("[bold]Recommendations[/bold]")
        for recommendation in recommendations:
            self.console.print(f"  • {escape(recommendation)}")

    def render_analysis(self, analysis: PerformanceAnalysis) -> None:
        if self.as_json:
            self._json(analysis)
            return

        vitals = analysis.metrics.web_vitals
        scores = analysis.scores

        table = Table(title=f"Performance: {escape(analysis.url)}")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_column("Score", justify="right")
        table.add_row("First Contentful Paint", _ms(vitals.first_contentful_paint), f"{scores.first_contentful_paint:.0f}")
        table.add_row("Largest Contentful Paint", _ms(vitals.largest_contentful_paint), f"{scores.largest_contentful_paint:.0f}")
        table.add_row("Load complete", _ms(vitals.load_complete), f"{scores.load_time:.0f}")
        table.add_row("Resources", str(analysis.metrics.resources.total_resources), f"{scores.resource_efficiency:.0f}")
        table.add_row("Time to First Byte", _ms(vitals.first_byte), "")
        table.add_row("[bold]Overall[/bold]", "", f"[bold]{scores.overall:.1f}[/bold]")
        self.console.print(table)

        if analysis.network_conditions:
            conditions = analysis.network_conditions
            self.console.print(
                f"Throttled: {conditions.download_throughput:.0f}B/s down, "
                f"{conditions.upload_throughput:.0f}B/s up, {conditions.latency:.0f}ms latency"
            )

        if isinstance(analysis, MobilePerformanceResults):
            mobile = analysis.mobile_specific
            self.console.print(
                f"Touch targets: {mobile.touch_target_analysis.compliance:.1f}% compliant "
                f"({mobile.touch_target_analysis.small_targets}/"
                f"{mobile.touch_target_analysis.total_targets} too small)"
            )
            self.console.print(f"Scroll to bottom: {mobile.scroll_performance.duration:.0f}ms")

        self._recommendations(analysis.recommendations)

    def render_load_test(self, results: LoadTestResults) -> None:
        if self.as_json:
            self._json(results)
            return

        summary = results.summary
        table = Table(title="Load test")
        table.add_column("Statistic")
        table.add_column("Value", justify="right")
        table.add_row("Total requests", str(summary.total_requests))
        table.add_row("Successful", str(summary.successful_requests))
        table.add_row("Failed", str(summary.failed_requests))
        table.add_row("Success rate", f"{summary.success_rate:.1f}%")
        table.add_row("Average response", _ms(summary.average_response_time))
        table.add_row("Min response", _ms(summary.min_response_time))
        table.add_row("Max response", _ms(summary.max_response_time))
        self.console.print(table)

        for error in results.errors:
            self.console.print(f"[red]{escape(error)}[/red]")
        self._recommendations(results.recommendations)

    def render_comparison(self, comparison: PageComparison) -> None:
        if self.as_json:
            self._json(comparison)
            return

        table = Table(title="Performance comparison")
        table.add_column("URL")
        table.add_column("Score", justify="right")
        table.add_column("Load", justify="right")
        table.add_column("Resources", justify="right")
        for entry in comparison.entries:
            table.add_row(entry.url, f"{entry.score:.1f}", _ms(entry.load_time), str(entry.resources))
        self.console.print(table)

        if comparison.best_url:
            self.console.print(f"Best performing: {comparison.best_url}")
            self.console.print(f"Needs improvement: {comparison.worst_url}")

    def render_error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")
