from __future__ import annotations

import asyncio

import pytest

from render_proxy.features.browser.controller import BrowserController, BrowserNotReadyError, BrowserStatus
from render_proxy.settings import Settings
from tests._fakes import FakeBrowser, make_playwright

pytestmark = pytest.mark.unit


def _controller(manager, **kwargs) -> BrowserController:
    return BrowserController(playwright_factory=lambda: manager, **kwargs)


class TestLaunch:
    def test_launch_marks_controller_ready(self) -> None:
        manager = make_playwright()
        controller = _controller(manager, headless=True, args=["--no-sandbox"])

        assert controller.status is BrowserStatus.INITIALIZING
        assert not controller.is_ready

        asyncio.run(controller.launch())

        assert controller.status is BrowserStatus.READY
        assert controller.is_ready
        assert manager.playwright.chromium.launch_calls == [{"headless": True, "args": ["--no-sandbox"]}]

    def test_launch_failure_marks_failed_and_stops_playwright(self) -> None:
        manager = make_playwright(launch_error=RuntimeError("Executable doesn't exist"))
        controller = _controller(manager)

        asyncio.run(controller.launch())

        assert controller.status is BrowserStatus.FAILED
        assert not controller.is_ready
        assert manager.playwright.stop_calls == 1

    def test_launch_runs_once(self) -> None:
        manager = make_playwright()
        controller = _controller(manager)

        async def runner() -> None:
            await controller.launch()
            await controller.launch()

        asyncio.run(runner())

        assert manager.start_calls == 1
        assert len(manager.playwright.chromium.launch_calls) == 1

    def test_from_settings_uses_fixed_viewport(self) -> None:
        settings = Settings(headless=True, browser_args=["--disable-gpu"])

        controller = BrowserController.from_settings(settings, headless=False)

        assert controller.headless is False
        assert controller.viewport == {"width": 1800, "height": 900}
        assert controller.args == ["--disable-gpu"]

    def test_from_settings_defaults_to_settings_headless(self) -> None:
        controller = BrowserController.from_settings(Settings(headless=True))

        assert controller.headless is True


class TestPages:
    def test_new_page_before_launch_raises(self) -> None:
        controller = _controller(make_playwright())

        with pytest.raises(BrowserNotReadyError) as exc_info:
            asyncio.run(controller.new_page())

        assert exc_info.value.status is BrowserStatus.INITIALIZING

    def test_new_page_applies_viewport(self) -> None:
        browser = FakeBrowser()
        controller = _controller(make_playwright(browser), viewport={"width": 1800, "height": 900})

        async def runner():
            await controller.launch()
            return await controller.new_page()

        page = asyncio.run(runner())

        assert page is browser.pages[0]
        assert browser.new_page_calls == [{"viewport": {"width": 1800, "height": 900}}]

    def test_new_page_after_close_raises(self) -> None:
        controller = _controller(make_playwright())

        async def runner() -> None:
            await controller.launch()
            await controller.close()
            await controller.new_page()

        with pytest.raises(BrowserNotReadyError) as exc_info:
            asyncio.run(runner())

        assert exc_info.value.status is BrowserStatus.CLOSED


class TestClose:
    def test_close_releases_browser_once(self) -> None:
        browser = FakeBrowser()
        manager = make_playwright(browser)
        controller = _controller(manager)

        async def runner() -> None:
            await controller.launch()
            await controller.close()
            await controller.close()

        asyncio.run(runner())

        assert browser.close_calls == 1
        assert manager.playwright.stop_calls == 1
        assert controller.status is BrowserStatus.CLOSED

    def test_close_without_launch_does_not_raise(self) -> None:
        manager = make_playwright()
        controller = _controller(manager)

        asyncio.run(controller.close())

        assert controller.status is BrowserStatus.CLOSED
        assert manager.start_calls == 0

    def test_close_during_launch_discards_late_browser(self) -> None:
        browser = FakeBrowser()
        manager = make_playwright(browser)
        controller = _controller(manager)
        chromium = manager.playwright.chromium
        original_launch = chromium.launch

        async def launch_and_close_midway(**kwargs):
            await controller.close()
            return await original_launch(**kwargs)

        chromium.launch = launch_and_close_midway

        asyncio.run(controller.launch())

        assert controller.status is BrowserStatus.CLOSED
        assert not controller.is_ready
        assert browser.close_calls == 1
