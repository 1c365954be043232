"""Main CLI application entry point."""

import asyncio
import logging
import sys
from typing import Any, Awaitable, Callable, Optional, Tuple

import click

from ..config.performance_config import load_config
from ..models.performance_models import (
    LoadTestOptions,
    NETWORK_PRESETS,
    NetworkConditions,
)
from ..services.performance_service import PerformanceOrchestrator
from .output.renderer import ResultRenderer

logger = logging.getLogger(__name__)


@click.group()
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option("--headed", is_flag=True, help="Show the browser window")
@click.option("--config", "config_path", type=click.Path(), help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(
    ctx: click.Context,
    as_json: bool,
    headed: bool,
    config_path: Optional[str],
    verbose: bool,
) -> None:
    """
    webperf - browser-driven page performance analysis and load testing.

    Analyze one page:
        webperf analyze https://example.com

    Analyze under slow 3G:
        webperf throttle https://example.com --preset slow-3g

    Small load test:
        webperf load https://example.com -c 2 -n 3 --delay 1000
    """
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = load_config(config_path)
    if headed:
        config.headless = False

    ctx.obj = {
        "config": config,
        "renderer": ResultRenderer(as_json=as_json),
        "verbose": verbose,
    }


def _run(
    ctx: click.Context,
    action: Callable[[PerformanceOrchestrator], Awaitable[Any]],
    render: Callable[[ResultRenderer, Any], None],
) -> None:
    renderer: ResultRenderer = ctx.obj["renderer"]

    async def runner() -> Any:
        async with PerformanceOrchestrator(ctx.obj["config"]) as orchestrator:
            return await action(orchestrator)

    try:
        result = asyncio.run(runner())
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        if ctx.obj["verbose"]:
            logger.exception("Performance run failed")
        renderer.render_error(str(e))
        sys.exit(1)

    render(renderer, result)


@main.command()
@click.argument("url")
@click.pass_context
def analyze(ctx: click.Context, url: str) -> None:
    """Analyze the performance of URL."""
    _run(
        ctx,
        lambda orchestrator: orchestrator.analyze_page_performance(url),
        ResultRenderer.render_analysis,
    )


@main.command()
@click.argument("url")
@click.option(
    "--preset",
    type=click.Choice(sorted(NETWORK_PRESETS)),
    help="Named network profile",
)
@click.option("--download", type=float, help="Download throughput (bytes/sec)")
@click.option("--upload", type=float, help="Upload throughput (bytes/sec)")
@click.option("--latency", type=float, help="Added latency (ms)")
@click.pass_context
def throttle(
    ctx: click.Context,
    url: str,
    preset: Optional[str],
    download: Optional[float],
    upload: Optional[float],
    latency: Optional[float],
) -> None:
    """Analyze URL under throttled network conditions."""
    conditions = _resolve_conditions(preset, download, upload, latency)
    _run(
        ctx,
        lambda orchestrator: orchestrator.test_with_throttling(url, conditions),
        ResultRenderer.render_analysis,
    )


def _resolve_conditions(
    preset: Optional[str],
    download: Optional[float],
    upload: Optional[float],
    latency: Optional[float],
) -> NetworkConditions:
    if preset:
        base = NETWORK_PRESETS[preset]
    elif download is None or upload is None or latency is None:
        raise click.UsageError(
            "Give --preset or all of --download, --upload and --latency"
        )
    else:
        return NetworkConditions(
            download_throughput=download, upload_throughput=upload, latency=latency
        )

    return base.model_copy(
        update={
            key: value
            for key, value in (
                ("download_throughput", download),
                ("upload_throughput", upload),
                ("latency", latency),
            )
            if value is not None
        }
    )


@main.command()
@click.argument("url")
@click.option("--concurrent", "-c", type=click.IntRange(min=1), help="Page loads per batch")
@click.option("--iterations", "-n", type=click.IntRange(min=1), help="Number of batches")
@click.option("--delay", type=click.IntRange(min=0), help="Pause between batches (ms)")
@click.pass_context
def load(
    ctx: click.Context,
    url: str,
    concurrent: Optional[int],
    iterations: Optional[int],
    delay: Optional[int],
) -> None:
    """Run a batched load test against URL."""
    config = ctx.obj["config"]
    options = LoadTestOptions(
        concurrent=concurrent or config.default_concurrent,
        iterations=iterations or config.default_iterations,
        delay_between_batches=delay if delay is not None else config.default_delay_ms,
    )
    _run(
        ctx,
        lambda orchestrator: orchestrator.load_test(url, options),
        ResultRenderer.render_load_test,
    )


@main.command()
@click.argument("url")
@click.pass_context
def mobile(ctx: click.Context, url: str) -> None:
    """Analyze URL as a throttled mobile device."""
    _run(
        ctx,
        lambda orchestrator: orchestrator.test_mobile_performance(url),
        ResultRenderer.render_analysis,
    )


@main.command()
@click.argument("urls", nargs=-1, required=True)
@click.pass_context
def compare(ctx: click.Context, urls: Tuple[str, ...]) -> None:
    """Analyze several URLs and compare their scores."""
    _run(
        ctx,
        lambda orchestrator: orchestrator.compare_pages(list(urls)),
        ResultRenderer.render_comparison,
    )
