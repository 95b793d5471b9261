"""
Sensor Routes - Temperature and humidity readings.
"""

from aiohttp import web

from agrimonitor.core.logging_utils import get_module_logger

from ..controller import APIController
from ..middleware import create_error_response


logger = get_module_logger("SensorRoutes")


def setup_sensor_routes(app: web.Application, controller: APIController) -> None:
    """Register sensor routes."""
    app.router.add_get("/sensor", sensor_handler)


async def sensor_handler(request: web.Request) -> web.Response:
    """GET /sensor - One timestamped temperature/humidity reading.

    An invalid reading still answers 200 with ``"[error]"`` values; only a
    driver failure answers 500.
    """
    controller: APIController = request.app["controller"]
    try:
        result = await controller.read_sensor()
    except Exception as e:
        logger.error("Sensor read failed: %s", e)
        return create_error_response(str(e) or type(e).__name__, status=500)
    return web.json_response(result)
