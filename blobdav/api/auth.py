"""
Gate requests on a shared secret.

The Authorization header has to be exactly equal to the configured secret.
OPTIONS requests and the version probe are always allowed.
"""

import secrets

from starlette.requests import Request

from blobdav.api.info import VERSION_PATH
from blobdav.config import Settings
from blobdav.paths import resource_path


def is_exempt(request: Request) -> bool:
    if request.method == "OPTIONS":
        return True
    return request.method == "POST" and resource_path(request.url.path) == VERSION_PATH


def is_authorized(request: Request, settings: Settings) -> bool:
    if is_exempt(request):
        return True
    credential = request.headers.get("Authorization")
    if credential is None or not settings.secret:
        return False
    return secrets.compare_digest(credential.encode("utf-8"), settings.secret.encode("utf-8"))
