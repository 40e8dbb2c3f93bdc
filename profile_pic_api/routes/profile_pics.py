from fastapi import APIRouter, Depends

from profile_pic_api.config import Settings
from profile_pic_api.dependencies import get_app_settings, get_storage
from profile_pic_api.models.upload import ImageListing, SignedUrlResponse
from profile_pic_api.services.profile_pics import list_images, resolve_url_for_key
from profile_pic_api.services.storage import ObjectStorage

router = APIRouter(prefix="/api", tags=["profile-pics"])


@router.get("/profile-pics", response_model=ImageListing)
async def get_profile_pics(
    app_settings: Settings = Depends(get_app_settings),
    storage: ObjectStorage = Depends(get_storage),
) -> ImageListing:
    return await list_images(app_settings, storage)


@router.get("/profile-pic/{key:path}", response_model=SignedUrlResponse)
async def get_profile_pic_url(
    key: str,
    app_settings: Settings = Depends(get_app_settings),
    storage: ObjectStorage = Depends(get_storage),
) -> SignedUrlResponse:
    url = await resolve_url_for_key(key, app_settings, storage)
    return SignedUrlResponse(url=url)
