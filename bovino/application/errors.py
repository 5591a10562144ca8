from __future__ import annotations

from typing import Any, Mapping

CONNECTION_ERROR_MESSAGE = "Error de conexión. Por favor, intente nuevamente."
UNKNOWN_ERROR_MESSAGE = "Error desconocido"


class AppError(Exception):
    code = "app_error"
    status_code: int | None = None

    def __init__(
        self,
        message: str,
        *,
        details: Mapping[str, Any] | None = None,
        status_code: int | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.field = field
        if status_code is not None:
            self.status_code = status_code


class NetworkError(AppError):
    code = "network_error"

    def __init__(self, message: str = CONNECTION_ERROR_MESSAGE, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class HttpError(AppError):
    code = "http_error"


class ApiError(AppError):
    """The server answered with `ok: false`."""

    code = "api_error"


class InvalidResponse(AppError):
    code = "invalid_response"


class ValidationError(AppError):
    code = "validation_error"
    status_code = 422


class PermissionDenied(AppError):
    code = "forbidden"
    status_code = 403


class NotFound(AppError):
    code = "not_found"
    status_code = 404


class ConflictError(AppError):
    code = "conflict"
    status_code = 409


_BY_STATUS: dict[int, type[AppError]] = {
    403: PermissionDenied,
    404: NotFound,
    409: ConflictError,
    422: ValidationError,
}


def error_for_status(status_code: int) -> type[AppError]:
    return _BY_STATUS.get(status_code, HttpError)
