"""
The interface every object store offers to the gateway.

The store is flat: keys are plain strings and listing is a prefix scan that is
paginated with an opaque cursor.
"""

from typing import Protocol

from blobdav.models import HttpMetadata, ListPage, ObjectBody, ObjectInfo, ReadConditions


class ObjectStore(Protocol):
    async def head(self, key: str) -> ObjectInfo | None:
        """Metadata of the object at key, or None if there is none"""
        ...

    async def get(
        self, key: str, conditions: ReadConditions | None = None, range_header: str | None = None
    ) -> ObjectBody | None:
        """
        Read an object, honouring conditional headers and an HTTP Range header.

        Returns None if the object does not exist. If the conditions are not met,
        the object is returned without a body.
        Raises InvalidRange if the range cannot be satisfied.
        """
        ...

    async def put(
        self,
        key: str,
        body: bytes,
        http_metadata: HttpMetadata | None = None,
        custom_metadata: dict[str, str] | None = None,
    ) -> ObjectInfo: ...

    async def delete(self, keys: str | list[str]) -> None:
        """Delete one or more keys. Missing keys are ignored."""
        ...

    async def list(
        self, prefix: str | None = None, cursor: str | None = None, include_metadata: bool = False
    ) -> ListPage:
        """
        One page of the keys starting with prefix, in key order.

        Pass the cursor of a truncated page to get the next one.
        Metadata (http and custom) is only guaranteed to be filled in with include_metadata.
        """
        ...
