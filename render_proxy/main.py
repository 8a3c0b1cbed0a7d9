from __future__ import annotations

import signal
import sys
from typing import Optional, Sequence

import uvicorn

from render_proxy import create_app
from render_proxy.logging import get_logger
from render_proxy.settings import get_settings, is_debug_invocation

logger = get_logger()


def install_shutdown_signals(server: uvicorn.Server) -> None:
    """Route SIGQUIT to the same graceful exit uvicorn uses for SIGINT and SIGTERM."""
    sigquit = getattr(signal, "SIGQUIT", None)
    if sigquit is None:
        return
    signal.signal(sigquit, server.handle_exit)


def run(argv: Optional[Sequence[str]] = None) -> None:
    argv = sys.argv if argv is None else argv
    settings = get_settings()
    if is_debug_invocation(argv):
        settings = settings.model_copy(update={"headless": False})
        logger.info("[APP] Debug mode, browser runs headful")

    app = create_app(settings)
    config = uvicorn.Config(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    server = uvicorn.Server(config)
    install_shutdown_signals(server)
    server.run()


if __name__ == "__main__":
    run()
