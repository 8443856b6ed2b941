"""
Collections are ordinary store entries tagged through their custom metadata.
Everything without the tag is a blob.
"""

from typing import Mapping

RESOURCETYPE = "resourcetype"
COLLECTION = "<collection />"


def is_collection(custom_metadata: Mapping[str, str] | None) -> bool:
    return custom_metadata is not None and custom_metadata.get(RESOURCETYPE) == COLLECTION


def collection_metadata() -> dict[str, str]:
    """Custom metadata that marks a new entry as a collection"""
    return {RESOURCETYPE: COLLECTION}
