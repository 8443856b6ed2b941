"""blobdav: a filesystem-like HTTP interface on a flat object store."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import PlainTextResponse, Response

from blobdav import VERSION
from blobdav.api.auth import is_authorized
from blobdav.api.dispatch import Dispatcher, add_cors_headers
from blobdav.config import Settings, get_settings
from blobdav.connections import open_store
from blobdav.errors import Unauthorized
from blobdav.objectstorage.base import ObjectStore
from blobdav.objectstorage.errors import StoreError


def error_response(exc: StarletteHTTPException) -> Response:
    return PlainTextResponse(exc.detail, status_code=exc.status_code, headers=exc.headers)


async def auth_gate(request: Request, call_next: RequestResponseEndpoint) -> Response:
    settings: Settings = request.app.state.settings
    if not is_authorized(request, settings):
        logging.debug(f"Refused unauthorized {request.method} {request.url.path}")
        return error_response(Unauthorized(settings.realm))
    return await call_next(request)


async def cors_headers(request: Request, call_next: RequestResponseEndpoint) -> Response:
    response = await call_next(request)
    return add_cors_headers(request, response, request.app.state.settings)


def create_app(settings: Settings | None = None, store: ObjectStore | None = None, version: str = VERSION) -> FastAPI:
    """
    Build the gateway application.

    If no store is given, the store configured in the settings is opened when the
    application starts and closed when it stops.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is not None:
            yield
            return
        logging.info(f"Opening {settings.store_backend.value} object store...")
        async with open_store(settings) as opened:
            app.state.store = opened
            yield

    app = FastAPI(
        title="blobdav",
        description=__doc__ if __doc__ else "",
        version=version,
        lifespan=lifespan,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.version = version

    app.add_route("/{path:path}", Dispatcher(), include_in_schema=False)

    # The last middleware added runs first: 401s from the auth gate get no cors headers
    app.add_middleware(BaseHTTPMiddleware, dispatch=cors_headers)
    app.add_middleware(BaseHTTPMiddleware, dispatch=auth_gate)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
        return error_response(exc)

    @app.exception_handler(ValueError)
    async def value_error_exception_handler(request: Request, exc: ValueError) -> Response:
        return PlainTextResponse(str(exc), status_code=400)

    @app.exception_handler(StoreError)
    async def store_error_exception_handler(request: Request, exc: StoreError) -> Response:
        logging.exception(f"Object store failed on {request.method} {request.url.path}: {exc}")
        return PlainTextResponse("Internal Server Error", status_code=500)

    return app
