from __future__ import annotations

import json
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Mapping

import httpx
from pydantic import ValidationError as PydanticValidationError

from bovino.application.errors import (
    UNKNOWN_ERROR_MESSAGE,
    ApiError,
    InvalidResponse,
    NetworkError,
    error_for_status,
)
from bovino.config.settings import Settings
from bovino.infrastructure.http.multipart import encode_form_data
from bovino.interfaces.http.schemas.base import Envelope
from bovino.utils.datetime_tz import format_local_date

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, date):
        return format_local_date(value)
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class ApiClient:
    """Thin wrapper over `httpx.AsyncClient` speaking the `{ok, data, msg}` envelope.

    Every failure is raised as an `AppError` subclass:
    transport problems as `NetworkError`, non-2xx as `HttpError` (or a more
    specific subclass) and `ok: false` as `ApiError`.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.api_base_url + "/",
            timeout=settings.request_timeout_seconds,
            cookies=settings.session_cookies(),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        form: Mapping[str, Any] | None = None,
        nullable_fields: tuple[str, ...] = (),
        params: Mapping[str, Any] | None = None,
    ) -> Envelope:
        kwargs: dict[str, Any] = {}
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}
        if form is not None:
            data, files = encode_form_data(form, nullable_fields=nullable_fields)
            # Text fields go as filename-less parts so the body is always multipart
            kwargs["files"] = {**{k: (None, v) for k, v in data.items()}, **files}
        elif json_body is not None:
            kwargs["content"] = json.dumps(json_body, default=_json_default)
            kwargs["headers"] = {"Content-Type": "application/json"}

        url = path.lstrip("/")
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Request failed: %s %s (%s)", method, url, exc)
            raise NetworkError() from exc

        envelope = self._parse(response)
        if not response.is_success:
            message = (envelope.msg if envelope else None) or (
                f"Error {response.status_code}: {response.reason_phrase}"
            )
            logger.info("HTTP error %s on %s %s: %s", response.status_code, method, url, message)
            error_cls = error_for_status(response.status_code)
            raise error_cls(
                message,
                status_code=response.status_code,
                field=envelope.field if envelope else None,
                details={"code": envelope.code} if envelope and envelope.code else None,
            )
        if envelope is None:
            raise InvalidResponse("Respuesta inválida del servidor", status_code=response.status_code)
        if not envelope.ok:
            logger.info("API rejected %s %s: %s", method, url, envelope.msg)
            raise ApiError(
                envelope.msg or UNKNOWN_ERROR_MESSAGE,
                status_code=response.status_code,
                field=envelope.field,
                details={"code": envelope.code} if envelope.code else None,
            )
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return envelope

    @staticmethod
    def _parse(response: httpx.Response) -> Envelope | None:
        try:
            payload = response.json()
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        try:
            return Envelope.model_validate(payload)
        except PydanticValidationError:
            return None

    async def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> Envelope:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, **kwargs: Any) -> Envelope:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Envelope:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str) -> Envelope:
        return await self.request("DELETE", path)
