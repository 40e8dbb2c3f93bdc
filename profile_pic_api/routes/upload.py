from collections.abc import Callable

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from loguru import logger
from starlette.datastructures import UploadFile as StarletteUploadFile

from profile_pic_api.config import Settings
from profile_pic_api.dependencies import get_app_settings, get_storage
from profile_pic_api.errors import ErrorKind, ProfilePicError
from profile_pic_api.models.upload import UploadResponse
from profile_pic_api.services.profile_pics import handle_upload
from profile_pic_api.services.storage import ObjectStorage
from profile_pic_api.validators.image import MAX_UPLOAD_BYTES

router = APIRouter(prefix="/api/upload", tags=["upload"])

IdentifierSource = Callable[[Request, dict[str, str | None]], str | None]

# Tried in order; the first non-empty value wins.
IDENTIFIER_SOURCES: tuple[IdentifierSource, ...] = (
    lambda request, form: request.query_params.get("userId"),
    lambda request, form: request.query_params.get("user_id"),
    lambda request, form: form.get("userId"),
    lambda request, form: form.get("user_id"),
)


def extract_identifier(request: Request, form: dict[str, str | None]) -> str | None:
    for source in IDENTIFIER_SOURCES:
        value = source(request, form)
        if value:
            return value
    return None


@router.post("/profile-pic", response_model=UploadResponse, status_code=201)
async def upload_profile_pic(
    request: Request,
    file: UploadFile | str | None = File(None),
    user_id_camel: str | None = Form(None, alias="userId"),
    user_id: str | None = Form(None),
    app_settings: Settings = Depends(get_app_settings),
    storage: ObjectStorage = Depends(get_storage),
) -> UploadResponse:
    # A plain text "file" field is treated as no file at all.
    if not isinstance(file, StarletteUploadFile):
        logger.warning("Upload request without file field")
        raise ProfilePicError(ErrorKind.MISSING_FILE, 'No file uploaded. Use field name "file".')

    raw_identifier = extract_identifier(request, {"userId": user_id_camel, "user_id": user_id})
    logger.info(
        "Upload request user_id={} filename={} content_type={}",
        raw_identifier or "(none)",
        file.filename,
        file.content_type,
    )

    # One byte past the limit is enough to reject the payload as oversized.
    data = await file.read(MAX_UPLOAD_BYTES + 1)
    result = await handle_upload(
        data,
        file.filename,
        file.content_type,
        raw_identifier,
        app_settings,
        storage,
    )
    return UploadResponse(url=result.url, key=result.key)
