import re
from pathlib import Path

from profile_pic_api.errors import ErrorKind
from profile_pic_api.validators.common import Err, Ok, Result

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
# Room for multipart boundaries, part headers and the userId field.
MAX_REQUEST_BYTES = MAX_UPLOAD_BYTES + 64 * 1024

ALLOWED_MIME = re.compile(r"^image/(jpeg|jpg|pjpeg|png|gif|webp)$", re.IGNORECASE)
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

EXTENSION_MIME = {
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}
DEFAULT_MIME = "image/jpeg"

UNSUPPORTED_MESSAGE = "Only images (.jpeg, .jpg, .png, .gif, .webp) are allowed."
TOO_LARGE_MESSAGE = "File too large. Max 5 MB."


def file_extension(filename: str | None) -> str:
    return Path(filename or "").suffix.lower()


def bare_mime(content_type: str | None) -> str:
    # Part headers may carry parameters, e.g. "image/jpeg; charset=binary".
    return (content_type or "").split(";", 1)[0].strip()


def is_allowed_image(content_type: str | None, filename: str | None) -> bool:
    if ALLOWED_MIME.match(bare_mime(content_type)):
        return True
    # Some mobile clients send no content type, so fall back to the filename.
    return file_extension(filename) in ALLOWED_EXTENSIONS


def validate_upload(content_type: str | None, filename: str | None, size_bytes: int) -> Result[None]:
    if not is_allowed_image(content_type, filename):
        return Err(ErrorKind.UNSUPPORTED_MEDIA_TYPE, UNSUPPORTED_MESSAGE)
    if size_bytes > MAX_UPLOAD_BYTES:
        return Err(ErrorKind.PAYLOAD_TOO_LARGE, TOO_LARGE_MESSAGE)
    return Ok(None)


def resolve_mime(declared_type: str | None, extension: str) -> str:
    mime = bare_mime(declared_type)
    if mime.startswith("image/"):
        return mime
    return EXTENSION_MIME.get(extension.lower(), DEFAULT_MIME)
