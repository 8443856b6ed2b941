import json

import pytest
from httpx import ASGITransport, AsyncClient

from blobdav.api import create_app
from tests.tools import SECRET, FailingDeleteStore, mkcol, put_blob

pytestmark = pytest.mark.anyio


async def test_delete_blob(client, store):
    await put_blob(store, "a.txt")
    await put_blob(store, "a.txt.bak")
    r = await client.delete("/a.txt")
    assert r.status_code == 204
    assert store.keys() == ["a.txt.bak"]
    assert "list" not in store.calls


async def test_delete_missing(client, store):
    r = await client.delete("/missing.txt")
    assert r.status_code == 404
    assert "delete" not in store.calls


async def test_delete_collection_recursive(client, store):
    await mkcol(store, "c")
    for i in range(7):
        await put_blob(store, f"c/file{i}")
    await mkcol(store, "c/d")
    for i in range(3):
        await put_blob(store, f"c/d/file{i}")
    await put_blob(store, "cx")
    await put_blob(store, "c2")

    r = await client.delete("/c")
    assert r.status_code == 204
    assert store.keys() == ["c2", "cx"]
    assert (await store.list(prefix="c/")).entries == []

    lists = [entry for entry in store.log if entry[0] == "list"]
    assert len(lists) >= 4
    assert sum(1 for entry in lists if entry[3]) >= 3


async def test_delete_collection_with_slash(client, store):
    await mkcol(store, "c")
    await put_blob(store, "c/x")
    r = await client.delete("/c/")
    assert r.status_code == 204
    assert store.keys() == []


async def test_delete_empty_collection(client, store):
    await mkcol(store, "c")
    r = await client.delete("/c")
    assert r.status_code == 204
    assert store.keys() == []


async def test_delete_blob_keeps_lookalike_children(client, store):
    # Only collections cascade
    await put_blob(store, "f")
    await put_blob(store, "f/orphan")
    r = await client.delete("/f")
    assert r.status_code == 204
    assert store.keys() == ["f/orphan"]


async def test_delete_root(client, store):
    await mkcol(store, "a")
    for i in range(9):
        await put_blob(store, f"a/{i}")
        await put_blob(store, f"top{i}")
    r = await client.delete("/")
    assert r.status_code == 204
    assert store.keys() == []
    assert len([entry for entry in store.log if entry[0] == "list"]) > 1


async def test_delete_root_empty(client, store):
    r = await client.delete("/")
    assert r.status_code == 204
    assert "delete" not in store.calls


async def test_delete_batch(client, store):
    for key in ["a", "b", "c", "d/e"]:
        await put_blob(store, key)
    r = await client.request("DELETE", "/does/not/exist", content=json.dumps(["a", "d/e", "missing"]))
    assert r.status_code == 204
    assert store.keys() == ["b", "c"]


async def test_delete_batch_ignores_hierarchy(client, store):
    await mkcol(store, "c")
    await put_blob(store, "c/x")
    r = await client.request("DELETE", "/", content=json.dumps(["c"]))
    assert r.status_code == 204
    assert store.keys() == ["c/x"]


async def test_delete_batch_empty_list(client, store):
    await put_blob(store, "a")
    r = await client.request("DELETE", "/a", content=b"[]")
    assert r.status_code == 204
    assert store.keys() == ["a"]


@pytest.mark.parametrize("body", [b"not json", b'{"keys": ["a"]}', b'["a", 1]', b'"a"'])
async def test_delete_batch_malformed(client, store, body):
    await put_blob(store, "a")
    r = await client.request("DELETE", "/a", content=body)
    assert r.status_code == 400
    assert store.keys() == ["a"]
    assert r.headers["access-control-allow-origin"] == "*"


async def test_delete_root_fails_midway(settings):
    store = FailingDeleteStore(page_size=2, fail_on=2)
    for i in range(6):
        await put_blob(store, f"k{i}")
    app = create_app(settings, store)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test", headers={"Authorization": SECRET}
    ) as client:
        r = await client.delete("/", headers={"Origin": "http://example.com"})
    assert r.status_code == 500
    assert r.headers["access-control-allow-origin"] == "http://example.com"
    assert store.keys() == ["k2", "k3", "k4", "k5"]
    assert store.log[-1][0] == "delete failed"
    assert [entry[0] for entry in store.log].count("list") == 2
