import pytest

from blobdav.paths import is_collection_path, parent_key, resource_path
from blobdav.resourcetype import COLLECTION, collection_metadata, is_collection


@pytest.mark.parametrize(
    "path,key",
    [
        ("/", ""),
        ("", ""),
        ("/file.txt", "file.txt"),
        ("/docs/", "docs"),
        ("/docs/report.pdf", "docs/report.pdf"),
        # only one trailing slash is removed
        ("/docs//", "docs/"),
        # no normalization of odd segments
        ("/a//b", "a//b"),
        ("/a/../b", "a/../b"),
    ],
)
def test_resource_path(path, key):
    assert resource_path(path) == key


def test_collection_path():
    assert is_collection_path("/")
    assert is_collection_path("/docs/")
    assert not is_collection_path("/docs")
    assert not is_collection_path("/docs/file")


def test_parent_key():
    assert parent_key("file.txt") == ""
    assert parent_key("docs/file.txt") == "docs"
    assert parent_key("a/b/c") == "a/b"
    assert parent_key("a//b") == "a/"


def test_is_collection():
    assert is_collection(collection_metadata())
    assert is_collection({"resourcetype": COLLECTION, "other": "x"})
    assert not is_collection({})
    assert not is_collection(None)
    assert not is_collection({"resourcetype": "<collection/>"})
    assert not is_collection({"kind": COLLECTION})
