"""
API Server - aiohttp-based HTTP server for AgriMonitor.

Runs on the same asyncio event loop as the periodic capture scheduler.
"""

from pathlib import Path
from typing import Optional

from aiohttp import web

from agrimonitor.core.logging_utils import get_module_logger

from .controller import APIController
from .middleware import error_handling_middleware, request_logging_middleware
from .routes import setup_all_routes


logger = get_module_logger("APIServer")


def create_app(
    controller: APIController,
    public_dir: Optional[Path] = None,
    debug: bool = False,
) -> web.Application:
    """Create and configure the aiohttp application."""
    # request logging -> error handling -> handler
    app = web.Application(middlewares=[request_logging_middleware, error_handling_middleware])
    app["controller"] = controller
    app["debug"] = debug

    setup_all_routes(app, controller, public_dir)
    return app


class APIServer:
    """
    HTTP server exposing the sensor, photo, data and static routes.

    Binds to all interfaces by default; the service has no authentication
    and is meant for a trusted local network.
    """

    def __init__(
        self,
        controller: APIController,
        host: str = "0.0.0.0",
        port: int = 3000,
        public_dir: Optional[Path] = None,
        debug: bool = False,
    ):
        self.controller = controller
        self.host = host
        self.port = port
        self.public_dir = public_dir
        self.debug = debug
        self._runner: Optional[web.AppRunner] = None

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    @property
    def url(self) -> str:
        host = "localhost" if self.host in ("0.0.0.0", "::") else self.host
        return f"http://{host}:{self.port}"

    async def start(self) -> None:
        """Bind and start serving; returns once the socket is listening.

        Raises OSError if the address cannot be bound.
        """
        if self._runner is not None:
            logger.warning("Server already running at %s", self.url)
            return

        runner = web.AppRunner(create_app(self.controller, self.public_dir, self.debug))
        await runner.setup()
        try:
            await web.TCPSite(runner, self.host, self.port).start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner = runner

        logger.info("Server running at %s", self.url)
        logger.info("Sensor API:        /sensor")
        logger.info("Photo API:         /photo, /photo/fast")
        logger.info("JSON CRUD API:     /data")
        if self.public_dir is not None:
            logger.info("Static files:      /public -> %s", self.public_dir)

    async def stop(self) -> None:
        """Close the listening socket and finish in-flight requests."""
        if self._runner is None:
            return

        runner, self._runner = self._runner, None
        await runner.cleanup()
        logger.info("Server stopped")
