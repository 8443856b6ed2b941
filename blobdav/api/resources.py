"""
GET, PUT and DELETE on resources.

Paths ending in a slash address collections, other paths address blobs. Collections
only exist as entries tagged through their custom metadata; their members are
found by key prefix.
"""

import html
import json
import logging

from starlette.requests import Request
from starlette.responses import HTMLResponse, Response

from blobdav.errors import Conflict, MethodNotAllowed, NotFound, RangeNotSatisfiable
from blobdav.listing import drain, list_all
from blobdav.models import HttpMetadata, ObjectInfo, ReadConditions
from blobdav.objectstorage.base import ObjectStore
from blobdav.objectstorage.errors import InvalidRange
from blobdav.paths import is_collection_path, parent_key, resource_path
from blobdav.resourcetype import is_collection

# Methods that make sense on a collection path
COLLECTION_ALLOW = "OPTIONS, GET, POST, DELETE"


def _store(request: Request) -> ObjectStore:
    return request.app.state.store


def listing_line(entry: ObjectInfo) -> str:
    href = f"/{entry.key}" + ("/" if is_collection(entry.custom_metadata) else "")
    label = entry.http_metadata.content_disposition or entry.key
    return f'<a href="{html.escape(href)}">{html.escape(label)}</a><br>'


async def render_collection(store: ObjectStore, key: str) -> str:
    """
    HTML page linking to everything whose key starts with key.

    The collection itself is not checked: a missing collection is an empty page.
    """
    page = '<a href="../">..</a><br>' if key else ""
    async for entry in list_all(store, key, include_metadata=True):
        if entry.key == key:
            continue
        page += listing_line(entry)
    return page


async def handle_get(request: Request) -> Response:
    store = _store(request)
    key = resource_path(request.url.path)

    if is_collection_path(request.url.path):
        return HTMLResponse(await render_collection(store, key))

    range_header = request.headers.get("range")
    try:
        obj = await store.get(key, conditions=ReadConditions.from_headers(request.headers), range_header=range_header)
    except InvalidRange as e:
        raise RangeNotSatisfiable(e.size) from e
    if obj is None:
        raise NotFound()

    headers: dict[str, str] = {}
    obj.http_metadata.write_headers(headers)
    headers["etag"] = obj.http_etag
    if obj.range is not None:
        end = obj.range.end if obj.range.end is not None else obj.size - 1
        headers["content-range"] = f"bytes {obj.range.offset}-{end}/{obj.size}"

    if obj.body is None:
        return Response(status_code=304, headers=headers)
    status = 206 if range_header is not None else 200
    return Response(obj.body, status_code=status, headers=headers)


async def handle_put(request: Request) -> Response:
    if is_collection_path(request.url.path):
        raise MethodNotAllowed(COLLECTION_ALLOW)

    store = _store(request)
    key = resource_path(request.url.path)

    # The parent has to be an existing collection, like a file needs an existing directory
    parent = parent_key(key)
    if parent:
        collection = await store.head(parent)
        if collection is None or not is_collection(collection.custom_metadata):
            raise Conflict()

    obj = await store.put(key, await request.body(), http_metadata=HttpMetadata.from_headers(request.headers))
    logging.debug(f"Stored {key} ({obj.size} bytes)")
    return Response(status_code=201, headers={"etag": obj.http_etag})


def parse_key_list(body: bytes) -> list[str]:
    keys = json.loads(body)
    if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
        raise ValueError("A DELETE body must be a JSON list of keys")
    return keys


async def handle_delete(request: Request) -> Response:
    store = _store(request)
    key = resource_path(request.url.path)

    body = await request.body()
    if body:
        # Bulk delete: exactly these keys, wherever the request was sent
        keys = parse_key_list(body)
        if keys:
            await store.delete(keys)
        return Response(status_code=204)

    if key == "":
        await drain(store)
        return Response(status_code=204)

    resource = await store.head(key)
    if resource is None:
        raise NotFound()
    await store.delete(key)
    if is_collection(resource.custom_metadata):
        await drain(store, key + "/")
    return Response(status_code=204)
