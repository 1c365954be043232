"""Tests for NetworkConditionController."""

import logging

import pytest
from unittest.mock import AsyncMock, MagicMock, call
from playwright.async_api import Page

from src.browser.errors import NetworkEmulationError, PerformanceTestingError
from src.browser.network_conditions import NetworkConditionController
from src.models.performance_models import MOBILE_3G, SLOW_3G, NetworkConditions


UNCONSTRAINED = call(
    "Network.emulateNetworkConditions",
    {"offline": False, "downloadThroughput": -1, "uploadThroughput": -1, "latency": 0},
)

SLOW_3G_CALL = call(
    "Network.emulateNetworkConditions",
    {
        "offline": False,
        "downloadThroughput": 64000.0,
        "uploadThroughput": 64000.0,
        "latency": 400,
    },
)


@pytest.fixture
def session():
    session = AsyncMock()
    session.send = AsyncMock()
    return session


@pytest.fixture
def mock_page(session):
    page = AsyncMock(spec=Page)
    page.context = MagicMock()
    page.context.new_cdp_session = AsyncMock(return_value=session)
    return page


class TestPresets:
    """Tests for the named network presets."""

    def test_slow_3g(self):
        assert SLOW_3G.download_throughput == 64000
        assert SLOW_3G.upload_throughput == 64000
        assert SLOW_3G.latency == 400

    def test_mobile_3g(self):
        assert MOBILE_3G.download_throughput == 196608
        assert MOBILE_3G.upload_throughput == 96000
        assert MOBILE_3G.latency == 150

    def test_unconstrained(self):
        assert NetworkConditions.unconstrained().is_unconstrained
        assert not SLOW_3G.is_unconstrained


class TestThrottle:
    """Tests for the scoped throttle."""

    @pytest.mark.asyncio
    async def test_apply_then_revert(self, mock_page, session):
        controller = NetworkConditionController(mock_page)

        async with controller.throttle(SLOW_3G) as handle:
            assert handle.active is True
            assert handle.conditions == SLOW_3G
            assert session.send.call_args_list == [call("Network.enable"), SLOW_3G_CALL]

        assert handle.active is False
        assert session.send.call_args_list[-1] == UNCONSTRAINED
        mock_page.context.new_cdp_session.assert_called_once_with(mock_page)

    @pytest.mark.asyncio
    async def test_reverts_when_block_raises(self, mock_page, session):
        controller = NetworkConditionController(mock_page)

        with pytest.raises(ValueError, match="analysis failed"):
            async with controller.throttle(SLOW_3G):
                raise ValueError("analysis failed")

        assert session.send.call_args_list[-1] == UNCONSTRAINED

    @pytest.mark.asyncio
    async def test_revert_failure_is_logged_not_raised(self, mock_page, session, caplog):
        session.send = AsyncMock(side_effect=[None, None, Exception("target closed")])
        controller = NetworkConditionController(mock_page)

        with caplog.at_level(logging.ERROR):
            async with controller.throttle(SLOW_3G):
                pass

        assert "Failed to restore unconstrained network conditions" in caplog.text

    @pytest.mark.asyncio
    async def test_revert_failure_does_not_mask_analysis_error(self, mock_page, session):
        session.send = AsyncMock(side_effect=[None, None, Exception("target closed")])
        controller = NetworkConditionController(mock_page)

        with pytest.raises(ValueError, match="analysis failed"):
            async with controller.throttle(SLOW_3G):
                raise ValueError("analysis failed")

    @pytest.mark.asyncio
    async def test_emulation_unavailable(self, mock_page):
        mock_page.context.new_cdp_session = AsyncMock(
            side_effect=Exception("CDP session is only available in Chromium")
        )
        controller = NetworkConditionController(mock_page)
        entered = False

        with pytest.raises(NetworkEmulationError, match="unavailable") as exc_info:
            async with controller.throttle(SLOW_3G):
                entered = True

        assert entered is False
        assert isinstance(exc_info.value, PerformanceTestingError)

    @pytest.mark.asyncio
    async def test_apply_rejected(self, mock_page, session):
        session.send = AsyncMock(side_effect=[None, Exception("Invalid parameters")])
        controller = NetworkConditionController(mock_page)

        with pytest.raises(NetworkEmulationError, match="Failed to apply network conditions"):
            await controller.apply(SLOW_3G)

    @pytest.mark.asyncio
    async def test_session_is_reused(self, mock_page, session):
        controller = NetworkConditionController(mock_page)

        async with controller.throttle(SLOW_3G):
            pass
        async with controller.throttle(MOBILE_3G):
            pass

        mock_page.context.new_cdp_session.assert_called_once()
        assert session.send.call_args_list.count(call("Network.enable")) == 1
