"""Error kinds the proxy endpoint reports to its callers."""
from __future__ import annotations

from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class ProxyErrorCode(str, Enum):
    NOT_READY = "NOT_READY"
    BAD_REQUEST = "BAD_REQUEST"
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"


_STATUS_CODES = {
    ProxyErrorCode.NOT_READY: status.HTTP_503_SERVICE_UNAVAILABLE,
    ProxyErrorCode.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ProxyErrorCode.UPSTREAM_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_MESSAGES = {
    ProxyErrorCode.NOT_READY: "Browser not initialized. Try again shortly.",
    ProxyErrorCode.BAD_REQUEST: "Query string parameter missing: url",
    ProxyErrorCode.UPSTREAM_FAILURE: "Could not proxy url",
}


class ProxyError(Exception):
    """Failure with a fixed public message; the underlying cause stays in the logs."""

    def __init__(self, code: ProxyErrorCode) -> None:
        super().__init__(_MESSAGES[code])
        self.code = code

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.code]

    @property
    def message(self) -> str:
        return _MESSAGES[self.code]


async def proxy_error_handler(_: Request, exc: ProxyError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProxyError, proxy_error_handler)  # type: ignore[arg-type]
