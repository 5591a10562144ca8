from __future__ import annotations

from dataclasses import dataclass, field
from typing import Collection, Mapping, Sequence

from bovino.application.errors import (
    UNKNOWN_ERROR_MESSAGE,
    NetworkError,
    PermissionDenied,
)
from bovino.application.result import Result

VALIDATION_BANNER = "Por favor, verifique que todos los campos estén completos correctamente."
PERMISSION_BANNER = "No tiene permisos para realizar esta acción."


@dataclass(slots=True, frozen=True)
class ErrorRule:
    """Routes a server message containing any keyword to a field (or the banner).

    Without a `message` the server text is shown as is.
    """

    keywords: tuple[str, ...]
    field: str | None = None
    message: str | None = None

    def matches(self, text: str) -> bool:
        lowered = text.lower()
        return any(keyword.lower() in lowered for keyword in self.keywords)


@dataclass(slots=True)
class RoutedError:
    form_error: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)


def validation_rule() -> ErrorRule:
    return ErrorRule(("validación", "validacion"), message=VALIDATION_BANNER)


def permission_rule(managed: str | None = None) -> ErrorRule:
    message = PERMISSION_BANNER
    if managed:
        message += f" Solo administradores y operarios pueden gestionar {managed}."
    return ErrorRule(("permisos", "permiso"), message=message)


def generic_message(text: str) -> str:
    return f"Error: {text}. Por favor, verifique los datos e intente nuevamente."


def route_error(
    result: Result,
    *,
    fields: Collection[str],
    rules: Sequence[ErrorRule] = (),
    code_fields: Mapping[str, ErrorRule] | None = None,
) -> RoutedError:
    """Place a failed `Result` on a form field or on the form banner.

    Structured errors win: a `field` the form knows, then a known `code`.
    Otherwise the message is matched against `rules` in order, and an
    unmatched message becomes a generic banner.
    """
    text = result.error or UNKNOWN_ERROR_MESSAGE

    if result.field and result.field in fields:
        return RoutedError(field_errors={result.field: text})

    if result.code == NetworkError.code:
        return RoutedError(form_error=text)

    by_code = {
        PermissionDenied.code: ErrorRule((), message=PERMISSION_BANNER),
        **(code_fields or {}),
    }
    rule = by_code.get(result.code or "")
    if rule is not None:
        return _apply(rule, text)

    for rule in rules:
        if rule.matches(text):
            return _apply(rule, text)
    return RoutedError(form_error=generic_message(text))


def _apply(rule: ErrorRule, text: str) -> RoutedError:
    message = rule.message or text
    if rule.field is None:
        return RoutedError(form_error=message)
    return RoutedError(field_errors={rule.field: message})
