"""POST side channel. It reports the server version and touches no store."""

import json

from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from blobdav.errors import NotFound
from blobdav.paths import resource_path

VERSION_PATH = "version"


async def handle_post(request: Request) -> Response:
    text = await request.body()
    if text:
        # Parsed to reject malformed bodies, no command reads it yet
        json.loads(text)

    if resource_path(request.url.path) == VERSION_PATH:
        return PlainTextResponse(request.app.state.version)
    raise NotFound()
