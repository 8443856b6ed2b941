"""
Evaluate HTTP Range and conditional request headers against a stored object.

S3 compatible stores do this server side. The memory store uses these helpers to
behave the same way.
"""

import email.utils
import re
from datetime import datetime, timezone

from blobdav.models import ContentRange, ReadConditions
from blobdav.objectstorage.errors import InvalidRange

_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


def parse_range_header(header: str | None, key: str, size: int) -> ContentRange | None:
    """
    Parse a single-range 'bytes=' header into the range to return.

    Supports bytes=start-end, bytes=start- and bytes=-suffix. Open ended and suffix
    ranges report no end, meaning up to the last byte. Returns None for headers we
    cannot parse (including multiple ranges), in which case the whole object is served.
    Raises InvalidRange if the range starts beyond the end of the object.
    """
    if not header:
        return None
    m = _RANGE_RE.match(header.strip())
    if not m:
        return None
    start, end = m.group(1), m.group(2)
    if not start and not end:
        return None
    if not start:
        suffix = int(end)
        if suffix == 0:
            raise InvalidRange(key, size)
        return ContentRange(offset=max(size - suffix, 0))
    offset = int(start)
    if offset >= size:
        raise InvalidRange(key, size)
    if not end:
        return ContentRange(offset=offset)
    if int(end) < offset:
        return None
    return ContentRange(offset=offset, end=min(int(end), size - 1))


def slice_body(body: bytes, content_range: ContentRange | None) -> bytes:
    if content_range is None:
        return body
    end = content_range.end if content_range.end is not None else len(body) - 1
    return body[content_range.offset : end + 1]


def _strip_etag(etag: str) -> str:
    etag = etag.strip()
    if etag.startswith("W/"):
        etag = etag[2:]
    return etag.strip('"')


def etag_matches(header: str, etag: str) -> bool:
    candidates = [_strip_etag(e) for e in header.split(",")]
    return "*" in candidates or etag in candidates


def _parse_http_date(value: str) -> datetime | None:
    try:
        date = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return date


def conditions_met(conditions: ReadConditions | None, etag: str, uploaded: datetime | None) -> bool:
    """
    Check the conditional headers the way RFC 9110 orders them:
    If-Match, then If-Unmodified-Since (only without If-Match),
    then If-None-Match, then If-Modified-Since (only without If-None-Match).
    """
    if conditions is None:
        return True
    # HTTP dates have second precision
    modified = uploaded.replace(microsecond=0) if uploaded is not None else None

    if conditions.if_match is not None:
        if not etag_matches(conditions.if_match, etag):
            return False
    elif conditions.if_unmodified_since is not None and modified is not None:
        date = _parse_http_date(conditions.if_unmodified_since)
        if date is not None and modified > date:
            return False

    if conditions.if_none_match is not None:
        if etag_matches(conditions.if_none_match, etag):
            return False
    elif conditions.if_modified_since is not None and modified is not None:
        date = _parse_http_date(conditions.if_modified_since)
        if date is not None and modified <= date:
            return False

    return True
