from uuid import uuid4

from profile_pic_api.errors import ErrorKind
from profile_pic_api.validators.common import Err, Ok, Result
from profile_pic_api.validators.image import file_extension

DEFAULT_EXTENSION = ".jpg"


def sanitize_identifier(raw_identifier: str) -> str:
    # Identifiers such as gid://shopify/Customer/123 must stay one path segment.
    return raw_identifier.replace("/", "-")


def derive_key(
    raw_identifier: str | None,
    filename: str | None,
    prefix: str,
    require_identifier: bool = False,
) -> Result[str]:
    """Build the storage key ``{prefix}/{identifier}{extension}`` for an upload.

    A supplied identifier always maps to the same key, so re-uploads overwrite
    the previous picture. Without one, a random UUID is used unless
    ``require_identifier`` is set.
    """
    if raw_identifier:
        identifier = sanitize_identifier(str(raw_identifier))
    elif require_identifier:
        return Err(ErrorKind.MISSING_IDENTIFIER, "userId is required.")
    else:
        identifier = str(uuid4())

    extension = file_extension(filename) or DEFAULT_EXTENSION
    return Ok(f"{prefix}/{identifier}{extension}")
