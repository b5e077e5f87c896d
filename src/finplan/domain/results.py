"""Success/failure result values returned by public engine operations."""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from finplan.domain.errors import DomainError, ErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def is_success(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Failed outcome carrying a stable code and a readable message."""

    code: ErrorCode
    message: str

    @property
    def is_success(self) -> bool:
        return False

    def unwrap(self):
        """Raise the failure as a DomainError."""
        raise DomainError(self.message, self.code)

    @classmethod
    def from_error(cls, error: DomainError) -> "Failure":
        return cls(code=error.code, message=str(error))


Result = Union[Success[T], Failure]
