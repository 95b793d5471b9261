"""
API Middleware - Request logging and error handling for the HTTP API.

Error bodies use the flat shape existing consumers of this service expect::

    {"error": "Human-readable message", "details": "optional detail"}
"""

import time
import traceback
from typing import Any, Callable, Dict, Optional

from aiohttp import web

from agrimonitor.core.exceptions import DocumentNotFoundError, DocumentStoreError
from agrimonitor.core.logging_utils import get_module_logger


logger = get_module_logger("APIMiddleware")


@web.middleware
async def request_logging_middleware(request: web.Request, handler: Callable) -> web.StreamResponse:
    """Log the client address and path of every request, then its outcome."""
    start_time = time.perf_counter()
    logger.info("Access from %s to %s %s", request.remote, request.method, request.path)

    response = await handler(request)

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    logger.debug("%s %s -> %d (%.1f ms)", request.method, request.path, response.status, elapsed_ms)
    return response


@web.middleware
async def error_handling_middleware(request: web.Request, handler: Callable) -> web.StreamResponse:
    """Turn every escaping error into a JSON error response."""
    try:
        return await handler(request)
    except web.HTTPException as e:
        if e.status < 400:
            raise
        return create_error_response(e.reason or "HTTP error", status=e.status)
    except DocumentNotFoundError as e:
        return create_error_response(str(e), status=404)
    except ValueError as e:
        logger.warning("Validation error on %s: %s", request.path, e)
        return create_error_response(str(e), status=400)
    except DocumentStoreError as e:
        logger.error("Document store error on %s: %s", request.path, e)
        return create_error_response("Document store error", status=500, details=str(e))
    except Exception as e:
        tb = traceback.format_exc()
        logger.error("Unexpected error on %s: %s\n%s", request.path, e, tb)

        details: Any = f"{type(e).__name__}: {e}"
        if request.app.get("debug"):
            details = {
                "message": details,
                "traceback": tb.split("\n"),
                "request": {"method": request.method, "path": request.path},
            }
        return create_error_response("Internal server error", status=500, details=details)


def create_error_response(message: str, status: int = 400, details: Optional[Any] = None) -> web.Response:
    """Create a standardized ``{"error", "details"}`` response."""
    body: Dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    return web.json_response(body, status=status)


async def parse_json_object(request: web.Request):
    """Parse a JSON object body. Returns (body, error_response)."""
    try:
        body = await request.json()
    except ValueError:
        return None, create_error_response("Request body must be valid JSON", status=400)
    if not isinstance(body, dict):
        return None, create_error_response("Request body must be a JSON object", status=400)
    return body, None
