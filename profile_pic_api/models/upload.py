from datetime import datetime

from pydantic import BaseModel, Field


class UploadResult(BaseModel):
    key: str
    url: str


class UploadResponse(BaseModel):
    success: bool = True
    url: str
    key: str


class ImageItem(BaseModel):
    key: str
    size: int
    last_modified: datetime | None = Field(default=None, serialization_alias="lastModified")
    url: str | None = None


class ImageListing(BaseModel):
    prefix: str
    count: int
    items: list[ImageItem]


class SignedUrlResponse(BaseModel):
    url: str
