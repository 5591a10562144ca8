from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from bovino.application.errors import AppError

T = TypeVar("T")


@dataclass(slots=True)
class Result(Generic[T]):
    """Uniform outcome of a store operation. Callers never handle transport exceptions."""

    success: bool
    data: T | None = None
    error: str | None = None
    code: str | None = None
    field: str | None = None
    status_code: int | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> Result[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, *, code: str | None = None, field: str | None = None) -> Result[T]:
        return cls(success=False, error=error, code=code, field=field)

    @classmethod
    def from_error(cls, exc: AppError) -> Result[T]:
        return cls(
            success=False,
            error=exc.message,
            code=(exc.details or {}).get("code") or exc.code,
            field=exc.field,
            status_code=exc.status_code,
        )

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            payload["data"] = self.data
        if self.error is not None:
            payload["error"] = self.error
        return payload
