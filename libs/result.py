"""Result type used at use-case boundaries

Use cases never raise to their callers: they return either
``Return.ok(value)`` or ``Return.err(Error(...))``.
"""

from typing import Any, Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class Error(BaseModel):
    """Machine readable error returned by a use case"""

    code: str = Field(..., description="Stable error code (e.g. DOCUMENT_NOT_FOUND)")
    message: str = Field(..., description="Human readable message")
    reason: Optional[str] = Field(default=None, description="Underlying cause")
    details: List[Any] = Field(default_factory=list, description="Structured details (e.g. field errors)")


class Result(Generic[T]):
    """Outcome of a use case: exactly one of ``value`` / ``error`` is set"""

    __slots__ = ("value", "error")

    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        self.value = value
        self.error = error

    def is_ok(self) -> bool:
        return self.error is None

    def is_err(self) -> bool:
        return self.error is not None

    def __repr__(self) -> str:
        if self.is_ok():
            return f"Result(ok={self.value!r})"
        return f"Result(err={self.error.code})"


class Return:
    """Constructors for :class:`Result`"""

    @staticmethod
    def ok(value: T) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result[Any]:
        return Result(error=error)


__all__ = ["Error", "Result", "Return"]
