"""
Enumerate and drain everything under a key prefix.

The store only offers paginated prefix scans. These helpers follow the cursor
from page to page, so callers just iterate over entries or pages.
"""

import logging
from typing import AsyncIterator

from blobdav.models import ListPage, ObjectInfo
from blobdav.objectstorage.base import ObjectStore


async def iter_pages(store: ObjectStore, prefix: str | None = None, include_metadata: bool = False) -> AsyncIterator[ListPage]:
    """
    Yield the pages of a listing, until the store reports a page that is not truncated.

    The next page is only requested once the consumer asks for it, so a consumer can
    act on a page (e.g. delete its keys) before the listing continues.
    """
    cursor: str | None = None
    while True:
        page = await store.list(prefix=prefix or None, cursor=cursor, include_metadata=include_metadata)
        yield page
        if not page.truncated:
            return
        cursor = page.cursor


async def list_all(store: ObjectStore, prefix: str | None = None, include_metadata: bool = False) -> AsyncIterator[ObjectInfo]:
    """All entries whose key starts with prefix, in store order"""
    async for page in iter_pages(store, prefix, include_metadata=include_metadata):
        for entry in page.entries:
            yield entry


async def drain(store: ObjectStore, prefix: str | None = None) -> int:
    """
    Delete every key starting with prefix, one page at a time.

    With an empty prefix this deletes everything in the store.
    Returns the number of keys deleted.
    """
    deleted = 0
    pages = 0
    async for page in iter_pages(store, prefix):
        pages += 1
        keys = [entry.key for entry in page.entries]
        if keys:
            await store.delete(keys)
            deleted += len(keys)
    logging.debug(f"Drained {deleted} keys under {prefix or '/'!r} in {pages} pages")
    return deleted
