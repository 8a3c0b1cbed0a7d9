from __future__ import annotations

from fastapi import Request

from render_proxy.features.browser.controller import BrowserController
from render_proxy.settings import Settings


def get_browser_controller(request: Request) -> BrowserController:
    return request.app.state.browser_controller


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
