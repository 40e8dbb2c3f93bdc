from functools import lru_cache

from loguru import logger
from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

SIGNED_URL_MAX_TTL_SECONDS = 7 * 24 * 60 * 60


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = "profile-pic-api"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 4000

    access_key_id: str = Field(validation_alias=AliasChoices("AWS_ACCESS_KEY_ID", "ACCESS_KEY_ID"))
    secret_access_key: str = Field(validation_alias=AliasChoices("AWS_SECRET_ACCESS_KEY", "SECRET_ACCESS_KEY"))
    region: str = Field(validation_alias=AliasChoices("AWS_REGION", "REGION"))
    bucket: str = Field(validation_alias=AliasChoices("S3_BUCKET", "BUCKET"))
    endpoint_url: str | None = Field(default=None, validation_alias=AliasChoices("S3_ENDPOINT_URL", "ENDPOINT_URL"))

    profile_prefix: str = Field(
        default="profile-pics",
        validation_alias=AliasChoices("S3_PROFILE_PREFIX", "PROFILE_PREFIX"),
    )
    public_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("S3_PUBLIC_BASE_URL", "PUBLIC_BASE_URL"),
    )
    require_user_id: bool = False

    # SigV4 presigned URLs are rejected by S3 at 7 days or more.
    upload_url_ttl_seconds: int = Field(default=6 * 24 * 60 * 60, ge=1, lt=SIGNED_URL_MAX_TTL_SECONDS)
    lookup_url_ttl_seconds: int = Field(default=60 * 60, ge=1, lt=SIGNED_URL_MAX_TTL_SECONDS)
    list_max_keys: int = Field(default=100, ge=1, le=1000)

    @property
    def static_base_url(self) -> str | None:
        if not self.public_base_url:
            return None
        return self.public_base_url.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def load_settings() -> Settings:
    """Build the process settings, exiting when required values are missing."""
    try:
        return get_settings()
    except ValidationError as exc:
        problems = [
            "{}: {}".format(".".join(str(part) for part in err["loc"]), err["msg"])
            for err in exc.errors()
        ]
        logger.error("Invalid or missing configuration; refusing to start problems={}", problems)
        raise SystemExit(1) from exc
