import os
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing-access-key")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing-secret-key")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("S3_BUCKET", "profile-pics-test")

from profile_pic_api.config import Settings
from profile_pic_api.dependencies import get_app_settings, get_storage
from profile_pic_api.main import app
from profile_pic_api.services.storage import StorageError, StoredObject


class InMemoryStorage:
    def __init__(self) -> None:
        self.objects: dict[str, dict] = {}
        self.fail_with: str | None = None

    def put(self, key: str, data: bytes, content_type: str, cache_control: str) -> None:
        if self.fail_with:
            raise StorageError(self.fail_with)
        self.objects[key] = {
            "data": data,
            "content_type": content_type,
            "cache_control": cache_control,
            "last_modified": datetime.now(timezone.utc),
        }

    def list(self, prefix: str, max_keys: int) -> list[StoredObject]:
        if self.fail_with:
            raise StorageError(self.fail_with)
        keys = sorted(key for key in self.objects if key.startswith(prefix))[:max_keys]
        return [
            StoredObject(
                key=key,
                size=len(self.objects[key]["data"]),
                last_modified=self.objects[key]["last_modified"],
            )
            for key in keys
        ]

    def signed_url(self, key: str, ttl_seconds: int) -> str:
        if self.fail_with:
            raise StorageError(self.fail_with)
        return f"https://profile-pics-test.s3.amazonaws.com/{key}?X-Amz-Expires={ttl_seconds}&X-Amz-Signature=abc123"


def make_settings(**overrides) -> Settings:
    values = {
        "access_key_id": "testing-access-key",
        "secret_access_key": "testing-secret-key",
        "region": "us-east-1",
        "bucket": "profile-pics-test",
        "public_base_url": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def settings_factory():
    return make_settings


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture()
def client(settings: Settings, storage: InMemoryStorage):
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
