"""
Serve objects from S3-compatible object storage (e.g., AWS S3, MinIO, SeaweedFS, Cloudflare R2).
"""

import logging
import re
from typing import Any

from async_lru import alru_cache
from botocore.exceptions import BotoCoreError, ClientError
from types_aiobotocore_s3.client import S3Client
from types_aiobotocore_s3.type_defs import (
    HeadObjectOutputTypeDef,
    ListObjectsV2RequestTypeDef,
    ObjectIdentifierTypeDef,
)

from blobdav.models import ContentRange, HttpMetadata, ListPage, ObjectBody, ObjectInfo, ReadConditions
from blobdav.objectstorage.errors import InvalidRange, StoreError

# delete_objects accepts at most this many keys per call
MAX_DELETE_KEYS = 1000

NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")
CONDITION_FAILED_CODES = ("304", "NotModified", "412", "PreconditionFailed")

_CONTENT_RANGE_RE = re.compile(r"^bytes (\d+)-(\d+)/(\d+|\*)$")

# S3 parameter / response field -> HttpMetadata attribute
S3_HTTP_METADATA = {
    "ContentType": "content_type",
    "ContentLanguage": "content_language",
    "ContentDisposition": "content_disposition",
    "ContentEncoding": "content_encoding",
    "CacheControl": "cache_control",
    "Expires": "expires",
}


def _error_code(e: ClientError) -> str:
    return str(e.response.get("Error", {}).get("Code", ""))


def _http_metadata(res: Any) -> HttpMetadata:
    values = {}
    for field, attr in S3_HTTP_METADATA.items():
        value = res.get(field)
        if value is None:
            continue
        # botocore parses Expires into a datetime
        values[attr] = value.strftime("%a, %d %b %Y %H:%M:%S GMT") if hasattr(value, "strftime") else str(value)
    return HttpMetadata(**values)


def _object_info(key: str, res: Any) -> ObjectInfo:
    http_etag = res.get("ETag", '""')
    return ObjectInfo(
        key=key,
        size=res.get("ContentLength", res.get("Size", 0)),
        etag=http_etag.strip('"'),
        http_etag=http_etag,
        uploaded=res.get("LastModified"),
        http_metadata=_http_metadata(res),
        custom_metadata=dict(res.get("Metadata", {})),
    )


def parse_content_range(header: str | None) -> ContentRange | None:
    if not header:
        return None
    m = _CONTENT_RANGE_RE.match(header)
    if not m:
        return None
    return ContentRange(offset=int(m.group(1)), end=int(m.group(2)))


@alru_cache(maxsize=100)
async def create_or_get_bucket(client: S3Client, bucket: str) -> str:
    try:
        await client.head_bucket(Bucket=bucket)
    except ClientError as e:
        if _error_code(e) in ("404", "NoSuchBucket"):
            logging.info(f"Creating bucket {bucket}")
            await client.create_bucket(Bucket=bucket)
        else:
            raise StoreError(f"Cannot access bucket {bucket}: {e}") from e
    except BotoCoreError as e:
        raise StoreError(f"Cannot access bucket {bucket}: {e}") from e
    return bucket


class S3Store:
    def __init__(self, client: S3Client, bucket: str, page_size: int = 1000):
        self.client = client
        self.bucket = bucket
        self.page_size = page_size

    async def head(self, key: str) -> ObjectInfo | None:
        try:
            res: HeadObjectOutputTypeDef = await self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                return None
            raise StoreError(f"head {key} failed: {e}") from e
        except BotoCoreError as e:
            raise StoreError(f"head {key} failed: {e}") from e
        return _object_info(key, res)

    async def get(
        self, key: str, conditions: ReadConditions | None = None, range_header: str | None = None
    ) -> ObjectBody | None:
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key}
        if conditions is not None:
            if conditions.if_match:
                params["IfMatch"] = conditions.if_match
            if conditions.if_none_match:
                params["IfNoneMatch"] = conditions.if_none_match
            if conditions.if_modified_since:
                params["IfModifiedSince"] = conditions.if_modified_since
            if conditions.if_unmodified_since:
                params["IfUnmodifiedSince"] = conditions.if_unmodified_since
        if range_header:
            params["Range"] = range_header

        try:
            res = await self.client.get_object(**params)
        except ClientError as e:
            code = _error_code(e)
            if code in NOT_FOUND_CODES:
                return None
            if code in CONDITION_FAILED_CODES:
                # Conditions not met: report the object without a body
                info = await self.head(key)
                return ObjectBody(**info.model_dump()) if info is not None else None
            if code in ("416", "InvalidRange"):
                info = await self.head(key)
                raise InvalidRange(key, info.size if info else 0) from e
            raise StoreError(f"get {key} failed: {e}") from e
        except BotoCoreError as e:
            raise StoreError(f"get {key} failed: {e}") from e

        try:
            async with res["Body"] as stream:
                body = await stream.read()
        except BotoCoreError as e:
            raise StoreError(f"reading {key} failed: {e}") from e

        content_range = res.get("ContentRange")
        result = ObjectBody(**_object_info(key, res).model_dump(), body=body, range=parse_content_range(content_range))
        if content_range:
            # ContentLength is the length of the returned range, the total size is in the Content-Range
            result.size = int(content_range.rpartition("/")[2])
        return result

    async def put(
        self,
        key: str,
        body: bytes,
        http_metadata: HttpMetadata | None = None,
        custom_metadata: dict[str, str] | None = None,
    ) -> ObjectInfo:
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key, "Body": body}
        if http_metadata is not None:
            for field, attr in S3_HTTP_METADATA.items():
                value = getattr(http_metadata, attr)
                if value is not None:
                    params[field] = value
        if custom_metadata:
            params["Metadata"] = custom_metadata
        try:
            res = await self.client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"put {key} failed: {e}") from e
        return ObjectInfo(
            key=key,
            size=len(body),
            etag=res["ETag"].strip('"'),
            http_etag=res["ETag"],
            http_metadata=http_metadata or HttpMetadata(),
            custom_metadata=dict(custom_metadata or {}),
        )

    async def delete(self, keys: str | list[str]) -> None:
        if isinstance(keys, str):
            keys = [keys]
        for i in range(0, len(keys), MAX_DELETE_KEYS):
            to_delete: list[ObjectIdentifierTypeDef] = [{"Key": key} for key in keys[i : i + MAX_DELETE_KEYS]]
            logging.debug(f"Deleting {len(to_delete)} keys from bucket {self.bucket}")
            try:
                res = await self.client.delete_objects(Bucket=self.bucket, Delete={"Objects": to_delete, "Quiet": True})
            except (ClientError, BotoCoreError) as e:
                raise StoreError(f"delete failed: {e}") from e
            if errors := res.get("Errors"):
                raise StoreError(f"delete failed for {len(errors)} keys, e.g. {errors[0].get('Key')}: {errors[0].get('Message')}")

    async def list(
        self, prefix: str | None = None, cursor: str | None = None, include_metadata: bool = False
    ) -> ListPage:
        params: ListObjectsV2RequestTypeDef = {
            "Bucket": self.bucket,
            "MaxKeys": self.page_size,
        }
        if prefix:
            params["Prefix"] = prefix
        if cursor:
            params["ContinuationToken"] = cursor

        try:
            res = await self.client.list_objects_v2(**params)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"list {prefix or '/'} failed: {e}") from e

        entries: list[ObjectInfo] = []
        for content in res.get("Contents", []):
            if "Key" not in content:
                continue
            # list_objects_v2 does not return object metadata, so we ask for it one key at a time
            info = await self.head(content["Key"]) if include_metadata else None
            entries.append(info or _object_info(content["Key"], content))

        truncated = res.get("IsTruncated", False)
        return ListPage(entries=entries, truncated=truncated, cursor=res.get("NextContinuationToken") if truncated else None)
