from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Mapping

from bovino.utils.datetime_tz import format_local_date


@dataclass(slots=True)
class ImageUpload:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path, content_type: str | None = None) -> ImageUpload:
        path = Path(path)
        suffix = path.suffix.lower().lstrip(".")
        guessed = {"jpg": "image/jpeg", "jpeg": "image/jpeg", "png": "image/png", "webp": "image/webp"}
        return cls(
            filename=path.name,
            content=path.read_bytes(),
            content_type=content_type or guessed.get(suffix, "application/octet-stream"),
        )


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return format_local_date(value) or ""
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def has_upload(payload: Mapping[str, Any]) -> bool:
    return any(isinstance(v, ImageUpload) for v in payload.values())


def encode_form_data(
    payload: Mapping[str, Any],
    *,
    nullable_fields: Iterable[str] = (),
) -> tuple[dict[str, str], dict[str, tuple[str, bytes, str]]]:
    """Split a payload into multipart text fields and files.

    Missing optional foreign keys (listed in `nullable_fields`) are sent as an
    empty string so the server can clear them; any other empty value is omitted.
    """
    nullable = set(nullable_fields)
    data: dict[str, str] = {}
    files: dict[str, tuple[str, bytes, str]] = {}
    for key, value in payload.items():
        if value is None or value == "null":
            if key in nullable:
                data[key] = ""
            continue
        if isinstance(value, ImageUpload):
            files[key] = (value.filename, value.content, value.content_type)
            continue
        if value == "":
            if key in nullable:
                data[key] = ""
            continue
        data[key] = _stringify(value)
    return data, files
