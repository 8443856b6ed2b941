"""
blobdav Configuration

We read configuration from 2 sources, in order of precedence (higher is more priority)
- Environment variables
- A .env file, either in the current working directory or in a location specified
  by the BLOBDAV_ENV_FILE environment variable
"""

import functools
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "blobdav_"

LOCAL_HOSTS = ("http://localhost", "http://127.0.0.1")


class StoreBackend(str, Enum):
    s3 = "s3"
    memory = "memory"


class Settings(BaseSettings):
    env_file: Annotated[
        Path,
        Field(
            description="Location of a .env file (if used) relative to working directory",
        ),
    ] = Path(".env")

    secret: Annotated[
        str | None,
        Field(
            description=(
                "Value the Authorization header must be equal to. "
                "If not set, every request except OPTIONS and POST /version is refused"
            ),
        ),
    ] = None

    realm: Annotated[
        str,
        Field(description="Realm announced in the WWW-Authenticate header of 401 responses"),
    ] = "webdav-worker"

    cors_max_age: Annotated[
        int,
        Field(description="Value of the Access-Control-Max-Age header, in seconds"),
    ] = 86400

    store_backend: Annotated[
        StoreBackend,
        Field(description="Object store to serve: an S3 compatible bucket, or an in-process memory store"),
    ] = StoreBackend.memory

    memory_page_size: Annotated[
        int,
        Field(description="Number of entries per list page of the memory store"),
    ] = 1000

    s3_host: Annotated[
        str | None,
        Field(description="Endpoint url of the S3 compatible object store, e.g. http://localhost:9000"),
    ] = None
    s3_access_key: Annotated[str | None, Field(description="S3 access key id")] = None
    s3_secret_key: Annotated[str | None, Field(description="S3 secret access key")] = None
    s3_region: Annotated[str | None, Field(description="S3 region name (use 'auto' for Cloudflare R2)")] = None
    s3_bucket: Annotated[str, Field(description="Bucket holding the served objects")] = "blobdav"
    s3_page_size: Annotated[
        int,
        Field(description="Maximum number of keys per list_objects_v2 call (S3 caps this at 1000)"),
    ] = 1000

    @model_validator(mode="after")
    def check_page_sizes(self: Any) -> "Settings":
        if self.memory_page_size < 1 or self.s3_page_size < 1:
            raise ValueError("Page sizes must be positive")
        self.s3_page_size = min(self.s3_page_size, 1000)
        return self

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)


@functools.lru_cache()
def get_settings() -> Settings:
    temp = Settings()
    load_dotenv(temp.env_file, override=False)
    return Settings()


def validate_settings(settings: Settings | None = None) -> str | None:
    settings = settings or get_settings()
    if not settings.secret:
        return (
            "No secret is configured (set BLOBDAV_SECRET or run `python -m blobdav create-env`). "
            "All requests except OPTIONS and POST /version will be refused"
        )
    if settings.store_backend == StoreBackend.s3 and settings.s3_host:
        if settings.s3_host.startswith("http://") and not settings.s3_host.startswith(LOCAL_HOSTS):
            return f"The object store at {settings.s3_host} is reached over plain http, credentials are sent unencrypted"
    return None


if __name__ == "__main__":
    # Echo the settings
    for k, v in get_settings().model_dump().items():
        print(f"{ENV_PREFIX.upper()}{k.upper()}={v}")
