"""HTTP errors raised by the gateway. Each one renders as a plain text reason phrase."""

from starlette.exceptions import HTTPException


class Unauthorized(HTTPException):
    def __init__(self, realm: str):
        super().__init__(401, "Unauthorized", headers={"WWW-Authenticate": f'Basic realm="{realm}"'})


class NotFound(HTTPException):
    def __init__(self):
        super().__init__(404, "Not Found")


class MethodNotAllowed(HTTPException):
    def __init__(self, allow: str):
        super().__init__(405, "Method Not Allowed", headers={"Allow": allow})


class Conflict(HTTPException):
    def __init__(self):
        super().__init__(409, "Conflict")


class RangeNotSatisfiable(HTTPException):
    def __init__(self, size: int):
        super().__init__(416, "Range Not Satisfiable", headers={"content-range": f"bytes */{size}"})
