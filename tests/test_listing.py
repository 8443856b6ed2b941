import pytest

from blobdav.listing import drain, iter_pages, list_all
from blobdav.objectstorage.errors import StoreError
from tests.tools import FailingDeleteStore, RecordingStore, mkcol, put_blob

pytestmark = pytest.mark.anyio


async def test_list_all_follows_cursor(store):
    keys = [f"dir/{i:02}" for i in range(7)]
    for key in keys:
        await put_blob(store, key)
    await put_blob(store, "other")

    assert [e.key async for e in list_all(store, "dir/")] == keys
    lists = [entry for entry in store.log if entry[0] == "list"]
    assert len(lists) == 4
    # every call after the first passes the cursor of the previous page, as returned
    for previous, current in zip(lists, lists[1:]):
        assert current[2] == previous[4]


async def test_list_all_restartable(store):
    for i in range(5):
        await put_blob(store, f"k{i}")
    listing = [e.key async for e in list_all(store)]
    assert [e.key async for e in list_all(store)] == listing
    assert len(listing) == 5


async def test_list_all_empty(store):
    assert [e async for e in list_all(store, "nothing/")] == []
    assert [e async for e in list_all(store)] == []


async def test_list_all_metadata(store):
    await mkcol(store, "dir")
    entries = [e async for e in list_all(store, include_metadata=True)]
    assert entries[0].custom_metadata == {"resourcetype": "<collection />"}


async def test_pages_are_lazy(store):
    for i in range(6):
        await put_blob(store, f"k{i}")
    pages = iter_pages(store)
    await pages.__anext__()
    assert len(store.log) == 1
    await pages.__anext__()
    assert len(store.log) == 2
    await pages.aclose()


async def test_drain_prefix(store):
    await mkcol(store, "c")
    for i in range(7):
        await put_blob(store, f"c/{i}")
    await put_blob(store, "cx")

    assert await drain(store, "c/") == 7
    assert store.keys() == ["c", "cx"]


async def test_drain_interleaves_list_and_delete():
    store = RecordingStore(page_size=2)
    for i in range(6):
        await put_blob(store, f"k{i}")
    await drain(store)
    assert store.keys() == []
    assert [entry[0] for entry in store.log] == ["list", "delete", "list", "delete", "list", "delete"]


async def test_drain_empty(store):
    assert await drain(store) == 0
    assert [entry[0] for entry in store.log] == ["list"]


async def test_drain_stops_at_failed_delete():
    store = FailingDeleteStore(page_size=2, fail_on=2)
    for i in range(6):
        await put_blob(store, f"k{i}")
    with pytest.raises(StoreError):
        await drain(store)
    # the first page stays deleted, nothing is retried and no further page is listed
    assert store.keys() == ["k2", "k3", "k4", "k5"]
    assert [entry[0] for entry in store.log] == ["list", "delete", "list", "delete failed"]
