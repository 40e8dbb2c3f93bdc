from dataclasses import dataclass
from typing import Generic, TypeVar

from profile_pic_api.errors import ErrorKind, ProfilePicError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self):
        raise ProfilePicError(self.kind, self.message)


Result = Ok[T] | Err
