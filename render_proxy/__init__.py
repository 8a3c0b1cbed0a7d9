from __future__ import annotations

import asyncio
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from render_proxy.features.browser.controller import BrowserController
from render_proxy.features.proxy.errors import register_error_handlers
from render_proxy.features.proxy.router import router as proxy_router
from render_proxy.features.root.router import router as root_router
from render_proxy.logging import get_logger, setup_logging
from render_proxy.settings import Settings, get_settings, is_debug_invocation


def _lifespan(controller: BrowserController):
    @asynccontextmanager
    async def manager(_: FastAPI) -> AsyncIterator[None]:
        # Serving starts right away; /proxy answers 503 until the launch completes.
        launch_task = asyncio.create_task(controller.launch())
        try:
            yield
        finally:
            launch_task.cancel()
            try:
                await launch_task
            except asyncio.CancelledError:
                pass
            await controller.close()

    return manager


def create_app(
    settings: Optional[Settings] = None,
    controller: Optional[BrowserController] = None,
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)
    logger = get_logger()

    if controller is None:
        headless = settings.headless and not is_debug_invocation(sys.argv)
        controller = BrowserController.from_settings(settings, headless=headless)
    logger.debug("[APP] Creating application headless=%s", controller.headless)

    app = FastAPI(
        title="render-proxy",
        lifespan=_lifespan(controller),
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.browser_controller = controller

    register_error_handlers(app)
    app.include_router(proxy_router)
    app.include_router(root_router)

    return app


app = create_app()
