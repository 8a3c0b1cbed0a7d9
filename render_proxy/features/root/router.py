from __future__ import annotations

from fastapi import APIRouter, Depends

from render_proxy.dependencies import get_browser_controller
from render_proxy.features.browser.controller import BrowserController

router = APIRouter()


@router.get("/health")
async def health(controller: BrowserController = Depends(get_browser_controller)):
    return {"status": "ok", "browser": controller.status.value}
