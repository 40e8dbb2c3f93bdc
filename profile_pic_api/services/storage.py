from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from profile_pic_api.config import Settings


class StorageError(Exception):
    pass


@dataclass(frozen=True)
class StoredObject:
    key: str
    size: int
    last_modified: datetime | None


class ObjectStorage(Protocol):
    def put(self, key: str, data: bytes, content_type: str, cache_control: str) -> None: ...

    def list(self, prefix: str, max_keys: int) -> list[StoredObject]: ...

    def signed_url(self, key: str, ttl_seconds: int) -> str: ...


def build_s3_client(app_settings: Settings):
    return boto3.client(
        "s3",
        region_name=app_settings.region,
        aws_access_key_id=app_settings.access_key_id,
        aws_secret_access_key=app_settings.secret_access_key,
        endpoint_url=app_settings.endpoint_url,
        config=Config(signature_version="s3v4"),
    )


class S3ObjectStorage:
    """ObjectStorage backed by a single S3 bucket."""

    def __init__(self, client, bucket: str) -> None:
        self._client = client
        self.bucket = bucket

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "S3ObjectStorage":
        return cls(build_s3_client(app_settings), app_settings.bucket)

    def put(self, key: str, data: bytes, content_type: str, cache_control: str) -> None:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                CacheControl=cache_control,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 put failed bucket={} key={} error={}", self.bucket, key, str(exc))
            raise StorageError(str(exc)) from exc
        logger.debug(
            "S3 put complete bucket={} key={} content_type={} size_bytes={}",
            self.bucket,
            key,
            content_type,
            len(data),
        )

    def list(self, prefix: str, max_keys: int) -> list[StoredObject]:
        try:
            response = self._client.list_objects_v2(Bucket=self.bucket, Prefix=prefix, MaxKeys=max_keys)
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 list failed bucket={} prefix={} error={}", self.bucket, prefix, str(exc))
            raise StorageError(str(exc)) from exc
        return [
            StoredObject(key=item["Key"], size=item.get("Size", 0), last_modified=item.get("LastModified"))
            for item in response.get("Contents", [])
        ]

    def signed_url(self, key: str, ttl_seconds: int) -> str:
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 presign failed bucket={} key={} error={}", self.bucket, key, str(exc))
            raise StorageError(str(exc)) from exc
