"""
API route modules.

- sensor: DHT temperature/humidity reading
- photo: On-demand still capture (full and fast presets)
- data: JSON document store CRUD

Static files under /public are registered here as well.
"""

from pathlib import Path
from typing import Optional

from aiohttp import web

from agrimonitor.core.logging_utils import get_module_logger

from .data import setup_data_routes
from .photo import setup_photo_routes
from .sensor import setup_sensor_routes


logger = get_module_logger("APIRoutes")


def setup_static_routes(app: web.Application, public_dir: Optional[Path]) -> None:
    """Serve ``public_dir`` under /public when the directory exists."""
    if public_dir is None:
        return
    if not public_dir.is_dir():
        logger.warning("Static directory %s not found, /public disabled", public_dir)
        return
    app.router.add_static("/public", public_dir, show_index=False, follow_symlinks=False)


def setup_all_routes(app, controller, public_dir: Optional[Path] = None):
    """Register all API routes with the application."""
    setup_sensor_routes(app, controller)
    setup_photo_routes(app, controller)
    setup_data_routes(app, controller)
    setup_static_routes(app, public_dir)


__all__ = ["setup_all_routes"]
