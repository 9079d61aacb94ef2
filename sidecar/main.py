"""ctlstore Sidecar — FastAPI application factory and server.

Invariants:
    - Exactly five routes, registered explicitly (no auto-discovery)
    - Every SidecarError becomes a plain-text 500 via error_handlers
    - Unknown paths keep FastAPI's default 404, which never carries X-Ctlstore
    - Bind failures are raised to the caller as StartupError, never served

Design Decisions:
    - create_app(config) factory over a module-level app: tests build one app
      per fake Reader, production builds one from settings
    - Socket bound before uvicorn starts: uvicorn exits the process on bind
      errors, the sidecar reports them instead
"""

import logging
import socket
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from sidecar.api.dependencies import SidecarState
from sidecar.api.error_handlers import register_error_handlers
from sidecar.api.routes import health, ledger, rows
from sidecar.config import SidecarConfig, parse_bind_addr
from sidecar.core.errors import StartupError
from sidecar.infrastructure.latency import LatencyObserver

logger = logging.getLogger(__name__)


def create_app(
    config: SidecarConfig, observer: LatencyObserver | None = None,
) -> FastAPI:
    """Build the ASGI app serving `config.reader`."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Sidecar serving on {config.bind_addr}")
        yield
        close = getattr(config.reader, "close", None)
        if close is not None:
            await close()
        logger.info("Sidecar shut down")

    app = FastAPI(
        title="ctlstore sidecar", version="1.0.0", lifespan=lifespan,
        docs_url=None, redoc_url=None, openapi_url=None,
    )
    app.state.sidecar = SidecarState(
        config=config, observer=observer or LatencyObserver(),
    )

    app.include_router(rows.router)
    app.include_router(ledger.router)
    app.include_router(health.router)

    register_error_handlers(app)
    return app


class Sidecar:
    """One bind address, one Reader, one row ceiling."""

    def __init__(
        self, config: SidecarConfig, observer: LatencyObserver | None = None,
    ):
        self.config = config
        self.app = create_app(config, observer)
        self.server: uvicorn.Server | None = None

    def bind(self) -> socket.socket:
        try:
            host, port = parse_bind_addr(self.config.bind_addr)
        except ValueError as e:
            raise StartupError(str(e)) from e
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
        except OSError as e:
            sock.close()
            raise StartupError(str(e)) from e
        return sock

    async def start(self) -> None:
        """Serve until shutdown. Raises StartupError if the address is unusable."""
        sock = self.bind()
        self.server = uvicorn.Server(uvicorn.Config(
            self.app,
            log_config=None,
            access_log=False,
            timeout_keep_alive=int(self.config.read_timeout_seconds),
        ))
        try:
            await self.server.serve(sockets=[sock])
        except OSError as e:
            raise StartupError(str(e)) from e
        finally:
            sock.close()

    def stop(self) -> None:
        if self.server is not None:
            self.server.should_exit = True
