"""
Map request paths onto store keys.

Keys are the request path without its leading slash. A single trailing slash marks
a collection request and is not part of the key. Nothing else is normalized:
repeated slashes and '..' segments end up in the key as they are.
"""


def resource_path(path: str) -> str:
    """Return the store key for a request path"""
    key = path[1:] if path.startswith("/") else path
    return key[:-1] if key.endswith("/") else key


def is_collection_path(path: str) -> bool:
    return path.endswith("/")


def parent_key(key: str) -> str:
    """
    Key of the collection that should hold this key, or "" for top level keys
    """
    return key.rpartition("/")[0]
