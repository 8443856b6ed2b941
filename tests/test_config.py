from pathlib import Path

import pytest
from pydantic import ValidationError

from blobdav.config import Settings, StoreBackend, validate_settings


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("BLOBDAV_SECRET", "from-env")
    monkeypatch.setenv("BLOBDAV_STORE_BACKEND", "s3")
    monkeypatch.setenv("BLOBDAV_S3_PAGE_SIZE", "5000")
    settings = Settings(env_file=Path("unittest.env"))
    assert settings.secret == "from-env"
    assert settings.store_backend == StoreBackend.s3
    assert settings.s3_page_size == 1000
    assert settings.realm == "webdav-worker"
    assert settings.cors_max_age == 86400


def test_invalid_page_size():
    with pytest.raises(ValidationError):
        Settings(memory_page_size=0)


def test_validate_settings():
    assert "No secret" in validate_settings(Settings(secret=None))
    assert validate_settings(Settings(secret="s")) is None
    remote = Settings(secret="s", store_backend=StoreBackend.s3, s3_host="http://storage.example.org")
    assert "plain http" in validate_settings(remote)
    local = Settings(secret="s", store_backend=StoreBackend.s3, s3_host="http://localhost:9000")
    assert validate_settings(local) is None
