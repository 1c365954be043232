"""Tests for MobileProfileAdapter."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from playwright.async_api import Page

from src.browser.mobile_profile import (
    SCROLL_SCRIPT,
    TOUCH_TARGET_SCRIPT,
    MobileProfileAdapter,
    analyze_target_sizes,
)
from src.models.browser_models import DeviceType
from src.models.performance_models import MOBILE_3G


@pytest.fixture
def session():
    return AsyncMock()


@pytest.fixture
def mock_page(session):
    page = AsyncMock(spec=Page)
    page.context = MagicMock()
    page.context.new_cdp_session = AsyncMock(return_value=session)
    page.set_viewport_size = AsyncMock()
    page.evaluate = AsyncMock()
    return page


class TestAnalyzeTargetSizes:
    """Tests for touch target compliance."""

    def test_mixed_targets(self):
        analysis = analyze_target_sizes(
            [
                {"width": 48, "height": 48},
                {"width": 30, "height": 50},
                {"width": 44, "height": 44},
                {"width": 100, "height": 20},
            ]
        )

        assert analysis.total_targets == 4
        assert analysis.small_targets == 2
        assert analysis.small_target_details == ["Element 1: 30x50", "Element 3: 100x20"]
        assert analysis.compliance == 50

    def test_no_targets_is_fully_compliant(self):
        analysis = analyze_target_sizes([])

        assert analysis.total_targets == 0
        assert analysis.compliance == 100


class TestMobileProfileAdapter:
    """Tests for the mobile device profile."""

    def test_profile_constants(self):
        viewport = MobileProfileAdapter.VIEWPORT
        assert (viewport.width, viewport.height) == (375, 667)
        assert viewport.device_type == DeviceType.MOBILE
        assert "iPhone" in MobileProfileAdapter.USER_AGENT
        assert MobileProfileAdapter.NETWORK_CONDITIONS == MOBILE_3G

    @pytest.mark.asyncio
    async def test_apply(self, mock_page, session):
        """Only the viewport size is applied to an existing page."""
        await MobileProfileAdapter().apply(mock_page)

        mock_page.set_viewport_size.assert_called_once_with({"width": 375, "height": 667})
        session.send.assert_called_once_with(
            "Network.setUserAgentOverride",
            {"userAgent": MobileProfileAdapter.USER_AGENT},
        )

    @pytest.mark.asyncio
    async def test_analyze_touch_targets(self, mock_page):
        mock_page.evaluate = AsyncMock(return_value=[{"width": 20, "height": 20}])

        analysis = await MobileProfileAdapter().analyze_touch_targets(mock_page)

        mock_page.evaluate.assert_called_once_with(TOUCH_TARGET_SCRIPT)
        assert analysis.small_targets == 1
        assert analysis.compliance == 0

    @pytest.mark.asyncio
    async def test_measure_scroll_performance(self, mock_page):
        """Duration is measured; smoothness is reported as a fixed value."""
        scroll = await MobileProfileAdapter().measure_scroll_performance(mock_page)

        mock_page.evaluate.assert_called_once_with(SCROLL_SCRIPT, 100)
        assert scroll.duration >= 0
        assert scroll.smooth is True
        assert scroll.jank_score == 0
