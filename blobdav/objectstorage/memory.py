"""
An object store that keeps everything in a dict.

Useful for local development and for tests: set a small page_size to make every
listing span several pages.
"""

import hashlib
import logging
from bisect import bisect_right
from datetime import datetime, timezone

from blobdav.models import HttpMetadata, ListPage, ObjectBody, ObjectInfo, ReadConditions
from blobdav.objectstorage.conditions import conditions_met, parse_range_header, slice_body


class MemoryStore:
    def __init__(self, page_size: int = 1000):
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self.objects: dict[str, tuple[ObjectInfo, bytes]] = {}
        # number of calls per operation, so tests can check how the store was used
        self.calls: dict[str, int] = {}

    def _count(self, operation: str) -> None:
        self.calls[operation] = self.calls.get(operation, 0) + 1

    def keys(self) -> list[str]:
        return sorted(self.objects)

    async def head(self, key: str) -> ObjectInfo | None:
        self._count("head")
        if key not in self.objects:
            return None
        return self.objects[key][0].model_copy(deep=True)

    async def get(
        self, key: str, conditions: ReadConditions | None = None, range_header: str | None = None
    ) -> ObjectBody | None:
        self._count("get")
        if key not in self.objects:
            return None
        info, data = self.objects[key]
        result = ObjectBody(**info.model_dump())
        if not conditions_met(conditions, info.etag, info.uploaded):
            return result
        result.range = parse_range_header(range_header, key, info.size)
        result.body = slice_body(data, result.range)
        return result

    async def put(
        self,
        key: str,
        body: bytes,
        http_metadata: HttpMetadata | None = None,
        custom_metadata: dict[str, str] | None = None,
    ) -> ObjectInfo:
        self._count("put")
        etag = hashlib.md5(body).hexdigest()
        info = ObjectInfo(
            key=key,
            size=len(body),
            etag=etag,
            http_etag=f'"{etag}"',
            uploaded=datetime.now(timezone.utc),
            http_metadata=http_metadata or HttpMetadata(),
            custom_metadata=dict(custom_metadata or {}),
        )
        self.objects[key] = (info, bytes(body))
        return info.model_copy(deep=True)

    async def delete(self, keys: str | list[str]) -> None:
        self._count("delete")
        if isinstance(keys, str):
            keys = [keys]
        logging.debug(f"Deleting {len(keys)} keys from memory store")
        for key in keys:
            self.objects.pop(key, None)

    async def list(
        self, prefix: str | None = None, cursor: str | None = None, include_metadata: bool = False
    ) -> ListPage:
        """
        The cursor is the last key of the previous page, so it stays valid when keys
        are deleted between calls.
        """
        self._count("list")
        keys = self.keys()
        start = bisect_right(keys, cursor) if cursor is not None else 0
        matching = [k for k in keys[start:] if k.startswith(prefix or "")]
        page = matching[: self.page_size]
        truncated = len(matching) > len(page)
        return ListPage(
            entries=[self.objects[k][0].model_copy(deep=True) for k in page],
            truncated=truncated,
            cursor=page[-1] if truncated else None,
        )
