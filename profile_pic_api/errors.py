from enum import Enum


class ErrorKind(str, Enum):
    MISSING_FILE = "MissingFile"
    MISSING_IDENTIFIER = "MissingIdentifier"
    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaType"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"
    UPLOAD_FAILED = "UploadFailed"
    LOOKUP_FAILED = "LookupFailed"

    @property
    def status_code(self) -> int:
        if self in (ErrorKind.UPLOAD_FAILED, ErrorKind.LOOKUP_FAILED):
            return 500
        return 400


class ProfilePicError(Exception):
    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return self.kind.status_code
