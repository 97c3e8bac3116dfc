from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Err:
    """A failed operation: a human readable message plus optional per-field messages."""

    message: str
    field_errors: Optional[dict[str, str]] = None
    status_code: Optional[int] = None
    ok: bool = field(default=False, init=False)

    @property
    def is_structured(self) -> bool:
        return bool(self.field_errors)


Result = Union[Ok[T], Err]
