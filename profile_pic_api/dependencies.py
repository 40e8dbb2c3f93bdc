from fastapi import Request

from profile_pic_api.config import Settings
from profile_pic_api.services.storage import ObjectStorage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage
