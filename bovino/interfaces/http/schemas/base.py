from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from bovino.utils.datetime_tz import parse_local_date


class Envelope(BaseModel):
    """`{ok, data, msg}` response wrapper; extra keys (e.g. `noLeidas`) are kept."""

    model_config = ConfigDict(extra="allow")

    ok: bool = False
    data: Any = None
    msg: str | None = None
    # Structured errors, when the server sends them
    code: str | None = None
    field: str | None = None

    def extra(self, key: str, default: Any = None) -> Any:
        return (self.model_extra or {}).get(key, default)


class Record(BaseModel):
    """Flat server record identified by an integer primary key."""

    model_config = ConfigDict(extra="allow", from_attributes=True)

    id_field: ClassVar[str] = "id"
    date_fields: ClassVar[tuple[str, ...]] = ("fecha",)

    deleted_at: datetime | None = None

    @field_validator("*", mode="before")
    @classmethod
    def parse_calendar_dates(cls, value: Any, info: ValidationInfo) -> Any:
        if info.field_name in cls.date_fields and isinstance(value, str):
            return parse_local_date(value)
        return value

    @property
    def pk(self) -> int | None:
        return getattr(self, self.id_field, None)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def get(self, key: str, default: Any = None) -> Any:
        if key in type(self).model_fields:
            return getattr(self, key)
        for name, info in type(self).model_fields.items():
            if info.alias == key:
                return getattr(self, name)
        return (self.model_extra or {}).get(key, default)

    def related(self, key: str) -> dict[str, Any] | None:
        """Nested relation sent by the server (e.g. `raza`, `unidad`)."""
        value = self.get(key)
        return value if isinstance(value, dict) else None


class Unidad(Record):
    id_field: ClassVar[str] = "unidad_id"

    unidad_id: int
    nombre: str = ""
