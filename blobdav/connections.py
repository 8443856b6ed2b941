import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncGenerator

from aiobotocore.config import AioConfig
from aiobotocore.session import get_session

from blobdav.config import Settings, StoreBackend
from blobdav.objectstorage.base import ObjectStore
from blobdav.objectstorage.memory import MemoryStore
from blobdav.objectstorage.s3bucket import S3Store, create_or_get_bucket


def s3_enabled(settings: Settings) -> bool:
    return all([settings.s3_host, settings.s3_access_key, settings.s3_secret_key])


@asynccontextmanager
async def open_store(settings: Settings) -> AsyncGenerator[ObjectStore, None]:
    """
    Open the object store configured in the settings, and close it on exit.
    Use this once per process:
        - For running the server: in the FastAPI lifespan
        - For CLI commands: within the CLI command
    """
    if settings.store_backend == StoreBackend.memory:
        logging.warning("Serving an in-memory object store: nothing is persisted")
        yield MemoryStore(page_size=settings.memory_page_size)
        return

    if settings.s3_host is None:
        raise ValueError("s3_host not specified")
    if settings.s3_access_key is None or settings.s3_secret_key is None:
        raise ValueError("s3_access_key or s3_secret_key not specified")

    logging.debug(f"Connecting with object store at {settings.s3_host}, bucket {settings.s3_bucket}")
    session = get_session()
    client = session.create_client(
        service_name="s3",
        endpoint_url=settings.s3_host,
        region_name=settings.s3_region,
        aws_access_key_id=settings.s3_access_key,
        aws_secret_access_key=settings.s3_secret_key,
        config=AioConfig(signature_version="s3v4"),
    )

    # client is an async context manager, so we use an AsyncExitStack to manage its lifetime
    async with AsyncExitStack() as stack:
        s3 = await stack.enter_async_context(client)
        bucket = await create_or_get_bucket(s3, settings.s3_bucket)
        logging.info(f"Connected to object store at {settings.s3_host}, bucket {bucket}")
        yield S3Store(s3, bucket, page_size=settings.s3_page_size)
