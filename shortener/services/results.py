"""Result values returned by the use cases for expected failures."""

from dataclasses import dataclass
from typing import Dict, Generic, List, Optional, TypeVar

from shortener.services.exceptions import ErrorKind, ServiceError

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceFailure:
    """Why a use case did not produce a value."""
    kind: ErrorKind
    message: str
    field_errors: Optional[Dict[str, List[str]]] = None

    @classmethod
    def from_error(cls, error: ServiceError) -> "ServiceFailure":
        return cls(kind=error.kind, message=error.message)


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Either a value or a failure, never both."""
    value: Optional[T] = None
    failure: Optional[ServiceFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def fail(
        cls,
        kind: ErrorKind,
        message: str,
        field_errors: Optional[Dict[str, List[str]]] = None,
    ) -> "ServiceResult[T]":
        return cls(failure=ServiceFailure(kind=kind, message=message, field_errors=field_errors))
