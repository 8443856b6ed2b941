from datetime import datetime
from typing import Mapping, MutableMapping

from pydantic import BaseModel, Field

######################## CONTENT METADATA #########################

# header name -> HttpMetadata attribute
HTTP_METADATA_HEADERS = {
    "content-type": "content_type",
    "content-language": "content_language",
    "content-disposition": "content_disposition",
    "content-encoding": "content_encoding",
    "cache-control": "cache_control",
    "expires": "expires",
}


class HttpMetadata(BaseModel):
    """Content metadata stored alongside a blob and replayed on every read."""

    content_type: str | None = None
    content_language: str | None = None
    content_disposition: str | None = None
    content_encoding: str | None = None
    cache_control: str | None = None
    expires: str | None = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "HttpMetadata":
        values = {attr: headers.get(header) for header, attr in HTTP_METADATA_HEADERS.items()}
        return cls(**{k: v for k, v in values.items() if v is not None})

    def write_headers(self, headers: MutableMapping[str, str]) -> None:
        for header, attr in HTTP_METADATA_HEADERS.items():
            value = getattr(self, attr)
            if value is not None:
                headers[header] = value


######################## STORED OBJECTS #########################


class ObjectInfo(BaseModel):
    key: str
    size: int = 0
    etag: str = Field(description="Bare version tag assigned by the store")
    http_etag: str = Field(description="The etag, quoted for use in HTTP headers")
    uploaded: datetime | None = None
    http_metadata: HttpMetadata = Field(default_factory=HttpMetadata)
    custom_metadata: dict[str, str] = Field(default_factory=dict)


class ContentRange(BaseModel):
    """The byte range a read returned. end is inclusive, None means up to the last byte."""

    offset: int
    end: int | None = None


class ObjectBody(ObjectInfo):
    # None if the read conditions were not met
    body: bytes | None = None
    range: ContentRange | None = None


class ListPage(BaseModel):
    entries: list[ObjectInfo]
    truncated: bool = False
    cursor: str | None = None


######################## READ CONDITIONS #########################


class ReadConditions(BaseModel):
    """Conditional request headers, kept verbatim so the store can evaluate them."""

    if_match: str | None = None
    if_none_match: str | None = None
    if_modified_since: str | None = None
    if_unmodified_since: str | None = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "ReadConditions":
        return cls(
            if_match=headers.get("if-match"),
            if_none_match=headers.get("if-none-match"),
            if_modified_since=headers.get("if-modified-since"),
            if_unmodified_since=headers.get("if-unmodified-since"),
        )

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())
