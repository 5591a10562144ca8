from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Mapping

from bovino.utils.datetime_tz import format_local_date, parse_local_date

# (limit, message) pairs, in the style of declarative form rules
Bound = tuple[Any, str]
Validator = Callable[[Any, Mapping[str, Any]], "str | None"]


class FieldKind(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    DATE = "date"
    BOOLEAN = "boolean"
    # Foreign key picked from an option list; held as str, sent as int
    CHOICE = "choice"
    FILE = "file"


class FormState(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCESS = "success"


@dataclass(slots=True, frozen=True)
class Option:
    value: str
    label: str


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def to_number(value: Any, kind: FieldKind) -> int | Decimal | None:
    try:
        if kind is FieldKind.DECIMAL:
            return Decimal(str(value).strip())
        if isinstance(value, bool):
            return None
        number = Decimal(str(value).strip())
        if number != number.to_integral_value():
            return None
        return int(number)
    except (InvalidOperation, ValueError):
        return None


@dataclass(slots=True)
class FieldSpec:
    """Declarative description of one form field: its kind, rules and defaults."""

    kind: FieldKind = FieldKind.TEXT
    required: str | None = None
    min_length: Bound | None = None
    max_length: Bound | None = None
    min_value: Bound | None = None
    max_value: Bound | None = None
    pattern: Bound | None = None
    invalid: str = "Valor inválido"
    validators: tuple[Validator, ...] = ()
    default: Any = ""
    default_factory: Callable[[], Any] | None = None
    # Optional foreign key: "no selection" goes on the wire as null / ""
    nullable: bool = False
    # Local-only fields (toggles) are never sent
    send: bool = True

    def initial(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        if self.kind is FieldKind.BOOLEAN and self.default == "":
            return False
        if self.kind in (FieldKind.DATE, FieldKind.FILE) and self.default == "":
            return None
        return self.default

    def seed(self, raw: Any) -> Any:
        """Convert a record value into the editable representation."""
        if self.kind is FieldKind.FILE:
            return None
        if raw is None:
            return self.initial()
        if self.kind is FieldKind.DATE:
            return parse_local_date(raw)
        if self.kind is FieldKind.BOOLEAN:
            return bool(raw)
        return str(raw)

    def validate(self, value: Any, values: Mapping[str, Any]) -> str | None:
        if is_empty(value):
            return self.required
        if self.kind is FieldKind.FILE:
            return None

        if self.pattern is not None:
            regex, message = self.pattern
            if not re.fullmatch(regex, str(value).strip()):
                return message

        text = str(value).strip() if isinstance(value, str) else None
        if text is not None:
            if self.min_length is not None and len(text) < self.min_length[0]:
                return self.min_length[1]
            if self.max_length is not None and len(text) > self.max_length[0]:
                return self.max_length[1]

        if self.kind in (FieldKind.INTEGER, FieldKind.DECIMAL, FieldKind.CHOICE):
            number = to_number(value, self.kind)
            if number is None:
                return self.invalid
            if self.min_value is not None and number < Decimal(str(self.min_value[0])):
                return self.min_value[1]
            if self.max_value is not None and number > Decimal(str(self.max_value[0])):
                return self.max_value[1]

        if self.kind is FieldKind.DATE and not isinstance(value, date):
            if parse_local_date(value) is None:
                return self.invalid

        for check in self.validators:
            message = check(value, values)
            if message:
                return message
        return None

    def to_wire(self, value: Any) -> Any:
        if self.kind is FieldKind.BOOLEAN:
            return bool(value)
        if is_empty(value):
            return None
        if self.kind is FieldKind.TEXT:
            return str(value).strip()
        if self.kind in (FieldKind.INTEGER, FieldKind.CHOICE, FieldKind.DECIMAL):
            return to_number(value, self.kind)
        if self.kind is FieldKind.DATE:
            return format_local_date(parse_local_date(value))
        return value
