"""Network throttling scoped to a single analysis.

This module provides the NetworkConditionController which applies synthetic
bandwidth and latency constraints to one page through the Chrome DevTools
Protocol and guarantees they are reverted afterwards.

PATTERN: Use context managers for automatic resource cleanup.
CRITICAL: Emulation is page-scoped. Do not run throttled and unthrottled
analyses on the same page concurrently.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from playwright.async_api import CDPSession, Page

from src.browser.errors import NetworkEmulationError
from src.browser.playwright_integration import PlaywrightManager
from src.models.performance_models import NetworkConditions

logger = logging.getLogger(__name__)


@dataclass
class NetworkConditionHandle:
    """Conditions currently applied to a page.

    Yielded by ``NetworkConditionController.throttle`` and passed to the
    analysis pass, which records ``conditions`` on its result.
    """

    conditions: NetworkConditions
    active: bool = True


class NetworkConditionController:
    """Apply and revert network conditions on one page.

    Example:
        controller = NetworkConditionController(page)
        async with controller.throttle(SLOW_3G) as handle:
            analysis = await tester.analyze_page_performance(url, network=handle)
        # Network is unconstrained again, even if the analysis raised
    """

    def __init__(self, page: Page, playwright_manager: Optional[PlaywrightManager] = None):
        self.page = page
        self.playwright_manager = playwright_manager or PlaywrightManager()
        self._session: Optional[CDPSession] = None

    async def _get_session(self) -> CDPSession:
        if self._session is None:
            try:
                session = await self.playwright_manager.new_cdp_session(self.page)
                await session.send("Network.enable")
            except Exception as e:
                raise NetworkEmulationError(f"Network emulation unavailable: {e}") from e
            self._session = session
        return self._session

    async def _emulate(self, conditions: NetworkConditions) -> None:
        session = await self._get_session()
        await session.send(
            "Network.emulateNetworkConditions",
            {
                "offline": False,
                "downloadThroughput": conditions.download_throughput,
                "uploadThroughput": conditions.upload_throughput,
                "latency": conditions.latency,
            },
        )

    async def apply(self, conditions: NetworkConditions) -> None:
        """Apply conditions to the page.

        Raises:
            NetworkEmulationError: If the conditions cannot be applied
        """
        try:
            await self._emulate(conditions)
        except NetworkEmulationError:
            raise
        except Exception as e:
            raise NetworkEmulationError(f"Failed to apply network conditions: {e}") from e
        logger.info(
            f"Network throttled: down={conditions.download_throughput:.0f}B/s "
            f"up={conditions.upload_throughput:.0f}B/s latency={conditions.latency:.0f}ms"
        )

    async def reset(self) -> bool:
        """Restore unconstrained conditions.

        Failures are logged, never raised, so they cannot mask an error from
        the throttled analysis.

        Returns:
            True if the page is known to be unconstrained again
        """
        try:
            await self._emulate(NetworkConditions.unconstrained())
        except Exception as e:
            logger.error(f"Failed to restore unconstrained network conditions: {e}")
            return False
        logger.debug("Network conditions restored to unconstrained")
        return True

    @asynccontextmanager
    async def throttle(
        self, conditions: NetworkConditions
    ) -> AsyncIterator[NetworkConditionHandle]:
        """Apply ``conditions`` for the duration of the block, then revert.

        Reverting happens on success, on error, and on cancellation alike.
        """
        handle = NetworkConditionHandle(conditions=conditions)
        try:
            await self.apply(conditions)
            yield handle
        finally:
            handle.active = False
            await self.reset()
