from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from blobdav.api import create_app
from blobdav.config import Settings, StoreBackend
from tests.tools import SECRET, RecordingStore


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="function")
def settings():
    return Settings(secret=SECRET, store_backend=StoreBackend.memory, env_file=Path("unittest.env"))


@pytest.fixture(scope="function")
def store():
    """A store with pages of 2 entries, so any listing of more than 2 keys is paginated"""
    return RecordingStore(page_size=2)


@pytest.fixture(scope="function")
def app(settings, store):
    return create_app(settings, store)


@pytest.fixture(scope="function")
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test", headers={"Authorization": SECRET}
    ) as client:
        yield client


@pytest.fixture(scope="function")
async def anonymous(app):
    """A client that does not send credentials"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
