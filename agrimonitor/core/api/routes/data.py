"""
Data Routes - CRUD over the JSON document store.

Provides endpoints for:
- Reading the whole database
- Listing and creating documents in a collection
- Reading, replacing, patching and deleting a single document

Unknown collections and ids raise DocumentNotFoundError, which the error
middleware answers with 404.
"""

from aiohttp import web

from ..controller import APIController
from ..middleware import create_error_response, parse_json_object

# GET /data/db returns the whole database, so no collection may use the name.
RESERVED_COLLECTIONS = frozenset({"db"})


def setup_data_routes(app: web.Application, controller: APIController) -> None:
    """Register document store routes."""
    app.router.add_get("/data/db", get_database_handler)

    app.router.add_get("/data/{collection}", list_documents_handler)
    app.router.add_post("/data/{collection}", create_document_handler)

    app.router.add_get("/data/{collection}/{doc_id}", get_document_handler)
    app.router.add_put("/data/{collection}/{doc_id}", replace_document_handler)
    app.router.add_patch("/data/{collection}/{doc_id}", update_document_handler)
    app.router.add_delete("/data/{collection}/{doc_id}", delete_document_handler)


async def get_database_handler(request: web.Request) -> web.Response:
    """GET /data/db - Whole database."""
    controller: APIController = request.app["controller"]
    return web.json_response(await controller.get_database())


async def list_documents_handler(request: web.Request) -> web.Response:
    """GET /data/{collection} - All documents in a collection."""
    controller: APIController = request.app["controller"]
    collection = request.match_info["collection"]
    return web.json_response(await controller.list_documents(collection))


async def create_document_handler(request: web.Request) -> web.Response:
    """POST /data/{collection} - Add a document, assigning an id if missing."""
    controller: APIController = request.app["controller"]
    collection = request.match_info["collection"]
    if collection in RESERVED_COLLECTIONS:
        return create_error_response(f"'{collection}' is a reserved name", status=400)

    body, error = await parse_json_object(request)
    if error:
        return error

    result = await controller.create_document(collection, body)
    return web.json_response(result, status=201)


async def get_document_handler(request: web.Request) -> web.Response:
    """GET /data/{collection}/{doc_id} - One document."""
    controller: APIController = request.app["controller"]
    result = await controller.get_document(
        request.match_info["collection"], request.match_info["doc_id"]
    )
    return web.json_response(result)


async def replace_document_handler(request: web.Request) -> web.Response:
    """PUT /data/{collection}/{doc_id} - Replace a document (id is kept)."""
    controller: APIController = request.app["controller"]

    body, error = await parse_json_object(request)
    if error:
        return error

    result = await controller.replace_document(
        request.match_info["collection"], request.match_info["doc_id"], body
    )
    return web.json_response(result)


async def update_document_handler(request: web.Request) -> web.Response:
    """PATCH /data/{collection}/{doc_id} - Merge fields into a document."""
    controller: APIController = request.app["controller"]

    body, error = await parse_json_object(request)
    if error:
        return error

    result = await controller.update_document(
        request.match_info["collection"], request.match_info["doc_id"], body
    )
    return web.json_response(result)


async def delete_document_handler(request: web.Request) -> web.Response:
    """DELETE /data/{collection}/{doc_id} - Remove a document."""
    controller: APIController = request.app["controller"]
    await controller.delete_document(
        request.match_info["collection"], request.match_info["doc_id"]
    )
    return web.json_response({})
