"""Long-lived browser process shared by every proxy request."""
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright

from render_proxy.logging import get_logger
from render_proxy.settings import Settings

logger = get_logger()


class BrowserStatus(str, Enum):
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


class BrowserNotReadyError(RuntimeError):
    """Raised when a page is requested from a browser that is not running."""

    def __init__(self, status: BrowserStatus) -> None:
        super().__init__(f"Browser is not ready (status={status.value})")
        self.status = status


class BrowserController:
    """Owns one Chromium instance for the lifetime of the server process.

    The controller starts in ``INITIALIZING``. ``launch`` moves it to ``READY``
    (or ``FAILED``), ``close`` moves it to ``CLOSED`` from any state. Each page
    handed out by ``new_page`` lives in its own browser context, so requests do
    not share cookies or storage.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        viewport: Optional[Dict[str, int]] = None,
        args: Optional[List[str]] = None,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self.headless = headless
        self.viewport = dict(viewport or {})
        self.args = list(args or [])
        self._playwright_factory = playwright_factory
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._status = BrowserStatus.INITIALIZING

    @classmethod
    def from_settings(cls, settings: Settings, *, headless: Optional[bool] = None) -> "BrowserController":
        return cls(
            headless=settings.headless if headless is None else headless,
            viewport=settings.viewport,
            args=settings.browser_args,
        )

    @property
    def status(self) -> BrowserStatus:
        return self._status

    @property
    def is_ready(self) -> bool:
        return self._status is BrowserStatus.READY and self._browser is not None

    async def launch(self) -> None:
        if self._status is not BrowserStatus.INITIALIZING:
            logger.warning("[BROWSER] Launch skipped, status=%s", self._status.value)
            return

        logger.info("[BROWSER] Launching chromium headless=%s viewport=%s", self.headless, self.viewport)
        try:
            self._playwright = await self._playwright_factory().start()
            browser = await self._playwright.chromium.launch(headless=self.headless, args=self.args)
        except Exception:
            logger.exception("[BROWSER] Launch failed")
            if self._status is BrowserStatus.INITIALIZING:
                self._status = BrowserStatus.FAILED
            await self._stop_playwright()
            return

        if self._status is not BrowserStatus.INITIALIZING:
            # close() ran while chromium was starting
            await browser.close()
            return

        self._browser = browser
        self._status = BrowserStatus.READY
        logger.info("[BROWSER] Ready")

    async def new_page(self) -> Page:
        browser = self._browser
        if browser is None or self._status is not BrowserStatus.READY:
            raise BrowserNotReadyError(self._status)
        return await browser.new_page(viewport=self.viewport or None)

    async def close(self) -> None:
        if self._status is BrowserStatus.CLOSED:
            return
        self._status = BrowserStatus.CLOSED

        browser, self._browser = self._browser, None
        if browser is not None:
            try:
                await browser.close()
            except Exception:
                logger.exception("[BROWSER] Close failed")
        await self._stop_playwright()
        logger.info("[BROWSER] Closed")

    async def _stop_playwright(self) -> None:
        playwright, self._playwright = self._playwright, None
        if playwright is None:
            return
        try:
            await playwright.stop()
        except Exception:
            logger.exception("[BROWSER] Playwright stop failed")
