import asyncio

from loguru import logger

from profile_pic_api.config import Settings
from profile_pic_api.errors import ErrorKind, ProfilePicError
from profile_pic_api.models.upload import ImageItem, ImageListing, UploadResult
from profile_pic_api.services.keys import derive_key
from profile_pic_api.services.storage import ObjectStorage, StorageError
from profile_pic_api.validators.image import file_extension, resolve_mime, validate_upload

# Keys are overwritten in place on re-upload, so clients must revalidate.
CACHE_CONTROL = "no-cache"


async def resolve_display_url(key: str, app_settings: Settings, storage: ObjectStorage) -> str:
    base_url = app_settings.static_base_url
    if base_url:
        return f"{base_url}/{key}"
    return await asyncio.to_thread(storage.signed_url, key, app_settings.upload_url_ttl_seconds)


async def handle_upload(
    data: bytes,
    filename: str | None,
    content_type: str | None,
    raw_identifier: str | None,
    app_settings: Settings,
    storage: ObjectStorage,
) -> UploadResult:
    validation = validate_upload(content_type, filename, len(data))
    if not validation.ok:
        logger.warning(
            "Upload rejected filename={} content_type={} size_bytes={} kind={}",
            filename,
            content_type,
            len(data),
            validation.kind.value,
        )
        validation.unwrap()

    derived = derive_key(
        raw_identifier,
        filename,
        app_settings.profile_prefix,
        require_identifier=app_settings.require_user_id,
    )
    if not derived.ok:
        logger.warning("Upload rejected filename={} kind={}", filename, derived.kind.value)
    key = derived.unwrap()
    mime = resolve_mime(content_type, file_extension(filename))
    logger.info(
        "Upload accepted user_id={} key={} mime={} size_bytes={}",
        raw_identifier or "(none)",
        key,
        mime,
        len(data),
    )

    try:
        await asyncio.to_thread(storage.put, key, data, mime, CACHE_CONTROL)
        url = await resolve_display_url(key, app_settings, storage)
    except StorageError as exc:
        logger.exception("Upload failed user_id={} key={} error={}", raw_identifier or "(none)", key, str(exc))
        raise ProfilePicError(ErrorKind.UPLOAD_FAILED, str(exc) or "Upload failed") from exc

    logger.info("Upload stored user_id={} key={} url={}", raw_identifier or key, key, url)
    return UploadResult(key=key, url=url)


async def list_images(app_settings: Settings, storage: ObjectStorage) -> ImageListing:
    prefix = app_settings.profile_prefix
    try:
        objects = await asyncio.to_thread(storage.list, f"{prefix}/", app_settings.list_max_keys)
    except StorageError as exc:
        logger.exception("Listing failed prefix={} error={}", prefix, str(exc))
        raise ProfilePicError(ErrorKind.LOOKUP_FAILED, str(exc) or "Failed to list") from exc

    base_url = app_settings.static_base_url
    items = [
        ImageItem(
            key=obj.key,
            size=obj.size,
            last_modified=obj.last_modified,
            url=f"{base_url}/{obj.key}" if base_url else None,
        )
        for obj in objects
    ]
    logger.info("Listing complete prefix={} count={}", prefix, len(items))
    return ImageListing(prefix=prefix, count=len(items), items=items)


async def resolve_url_for_key(key: str, app_settings: Settings, storage: ObjectStorage) -> str:
    """Sign a short-lived GET URL for ``key``.

    The object is not checked for existence; a missing key only surfaces as a
    404 when the URL is fetched.
    """
    try:
        url = await asyncio.to_thread(storage.signed_url, key, app_settings.lookup_url_ttl_seconds)
    except StorageError as exc:
        logger.exception("URL lookup failed key={} error={}", key, str(exc))
        raise ProfilePicError(ErrorKind.LOOKUP_FAILED, str(exc) or "Failed to get URL") from exc
    logger.debug("URL resolved key={} ttl_seconds={}", key, app_settings.lookup_url_ttl_seconds)
    return url
