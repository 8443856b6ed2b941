"""Route every request to the handler for its method."""

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from blobdav.api.info import handle_post
from blobdav.api.resources import handle_delete, handle_get, handle_put
from blobdav.config import Settings
from blobdav.errors import MethodNotAllowed

SUPPORTED_METHODS = ["OPTIONS", "GET", "PUT", "POST", "DELETE"]
ALLOW = ", ".join(SUPPORTED_METHODS)

HANDLERS = {
    "GET": handle_get,
    "PUT": handle_put,
    "DELETE": handle_delete,
    "POST": handle_post,
}


async def dispatch(request: Request) -> Response:
    if request.method == "OPTIONS":
        return Response(status_code=204, headers={"Allow": ALLOW})
    handler = HANDLERS.get(request.method)
    if handler is None:
        raise MethodNotAllowed(ALLOW)
    return await handler(request)


class Dispatcher:
    """ASGI endpoint for the catch-all route. Unlike a function endpoint, it accepts every method."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = await dispatch(Request(scope, receive, send))
        await response(scope, receive, send)


def add_cors_headers(request: Request, response: Response, settings: Settings) -> Response:
    response.headers["Access-Control-Allow-Origin"] = request.headers.get("Origin", "*")
    response.headers["Access-Control-Allow-Methods"] = ALLOW
    response.headers["Access-Control-Allow-Credentials"] = "false"
    response.headers["Access-Control-Max-Age"] = str(settings.cors_max_age)
    return response
