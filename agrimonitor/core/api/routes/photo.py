"""
Photo Routes - On-demand still capture.

Each request captures into its own temporary file, streams it back as
``image/jpeg`` and deletes it, whether or not the transfer succeeds.
"""

import asyncio
from pathlib import Path

import aiofiles
from aiohttp import web

from agrimonitor.core.constants import STREAM_CHUNK_SIZE
from agrimonitor.core.exceptions import CaptureError
from agrimonitor.core.logging_utils import get_module_logger

from ..controller import APIController
from ..middleware import create_error_response


logger = get_module_logger("PhotoRoutes")

CAPTURE_FAILED = "Camera capture failed"


def setup_photo_routes(app: web.Application, controller: APIController) -> None:
    """Register photo routes."""
    app.router.add_get("/photo", photo_handler)
    app.router.add_get("/photo/fast", fast_photo_handler)


async def photo_handler(request: web.Request) -> web.StreamResponse:
    """GET /photo - Full resolution still."""
    return await _capture_and_send(request, "default")


async def fast_photo_handler(request: web.Request) -> web.StreamResponse:
    """GET /photo/fast - Lower resolution still without the settle delay."""
    return await _capture_and_send(request, "fast")


async def _capture_and_send(request: web.Request, preset: str) -> web.StreamResponse:
    controller: APIController = request.app["controller"]
    logger.info("Photo request (%s) from %s", preset, request.remote)

    try:
        path = await controller.capture_photo(preset)
    except CaptureError as e:
        logger.error("Camera capture error: %s", e)
        return create_error_response(CAPTURE_FAILED, status=500, details=str(e))

    try:
        return await _stream_file(request, path)
    finally:
        await asyncio.to_thread(path.unlink, missing_ok=True)


async def _stream_file(request: web.Request, path: Path) -> web.StreamResponse:
    try:
        f = await aiofiles.open(path, "rb")
    except FileNotFoundError:
        return create_error_response(
            CAPTURE_FAILED, status=500, details="Photo capture failed - file not created"
        )

    try:
        size = (await asyncio.to_thread(path.stat)).st_size
        response = web.StreamResponse(headers={"Cache-Control": "no-store"})
        response.content_type = "image/jpeg"
        response.content_length = size
        await response.prepare(request)

        try:
            while chunk := await f.read(STREAM_CHUNK_SIZE):
                await response.write(chunk)
            await response.write_eof()
        except ConnectionResetError:
            logger.warning("Client %s went away while sending %s", request.remote, path.name)
    finally:
        await f.close()

    return response
