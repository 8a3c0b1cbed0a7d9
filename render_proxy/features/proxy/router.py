from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from playwright.async_api import Page
from pydantic import BaseModel

from render_proxy.dependencies import get_app_settings, get_browser_controller
from render_proxy.features.browser.controller import BrowserController, BrowserNotReadyError
from render_proxy.features.proxy.errors import ProxyError, ProxyErrorCode
from render_proxy.logging import get_logger
from render_proxy.settings import Settings

router = APIRouter(tags=["Proxy"])
logger = get_logger()

DOCUMENT_HTML_SCRIPT = "() => document.documentElement.innerHTML"


class ProxyResponse(BaseModel):
    success: bool
    document: Optional[str] = None
    error: Optional[str] = None


@router.get("/proxy", response_model=ProxyResponse, response_model_exclude_none=True)
async def handle_proxy_request(
    url: Optional[str] = Query(default=None),
    controller: BrowserController = Depends(get_browser_controller),
    settings: Settings = Depends(get_app_settings),
) -> ProxyResponse:
    """
    503 while the browser is not initialized.
    400 when the url query string parameter is missing.
    200 with the rendered document.
    500 when the page could not be loaded or read.
    """
    if not controller.is_ready:
        raise ProxyError(ProxyErrorCode.NOT_READY)
    if url is None:
        raise ProxyError(ProxyErrorCode.BAD_REQUEST)

    document = await render_document(controller, url, settings)
    return ProxyResponse(success=True, document=document)


async def render_document(controller: BrowserController, url: str, settings: Settings) -> str:
    logger.debug("[PROXY] Rendering url=%s", url)
    try:
        page = await controller.new_page()
    except BrowserNotReadyError as exc:
        raise ProxyError(ProxyErrorCode.NOT_READY) from exc
    except Exception as exc:
        _log_failure(url, exc)
        raise ProxyError(ProxyErrorCode.UPSTREAM_FAILURE) from exc

    try:
        await page.goto(url, timeout=settings.navigation_timeout_ms, wait_until=settings.wait_until)
        return await page.evaluate(DOCUMENT_HTML_SCRIPT)
    except Exception as exc:
        _log_failure(url, exc)
        raise ProxyError(ProxyErrorCode.UPSTREAM_FAILURE) from exc
    finally:
        await _release_page(page, url)


def _log_failure(url: str, exc: Exception) -> None:
    logger.error("[PROXY] Could not proxy url. message=%s url=%s error=%s", str(exc), url, repr(exc))


async def _release_page(page: Page, url: str) -> None:
    if page.is_closed():
        return
    try:
        await page.close()
    except Exception:
        logger.warning("[PROXY] Page close failed url=%s", url, exc_info=True)
