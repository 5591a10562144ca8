from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Mapping, TypeVar

from pydantic import ValidationError as PydanticValidationError

from bovino.application.errors import AppError, InvalidResponse
from bovino.application.result import Result
from bovino.infrastructure.http.api_client import ApiClient
from bovino.infrastructure.http.multipart import has_upload
from bovino.interfaces.http.schemas.base import Record

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Record)


class EntityStore(Generic[T]):
    """Cached, server-backed collection for one REST resource.

    State goes `idle -> loading -> populated | error`. The collection is only
    ever replaced wholesale by a successful `fetch_all`; mutations never patch
    it locally and instead trigger a forced refetch.

    Every request takes the next number of a per-store sequence. A list
    response is applied only when no newer request was issued after it, so a
    slow fetch cannot overwrite the collection refreshed after a mutation.
    """

    resource: str = ""
    schema: type[T] = Record  # type: ignore[assignment]
    label: str = "registros"
    multipart: bool = False
    nullable_fields: tuple[str, ...] = ()

    def __init__(
        self,
        api: ApiClient,
        *,
        resource: str | None = None,
        schema: type[T] | None = None,
        label: str | None = None,
        multipart: bool | None = None,
        nullable_fields: tuple[str, ...] | None = None,
    ) -> None:
        self.api = api
        if resource is not None:
            self.resource = resource
        if schema is not None:
            self.schema = schema
        if label is not None:
            self.label = label
        if multipart is not None:
            self.multipart = multipart
        if nullable_fields is not None:
            self.nullable_fields = nullable_fields
        self.items: list[T] = []
        self.loading = False
        self.submitting = False
        self.loaded = False
        self.error: str | None = None
        self._seq = 0
        self._inflight = 0

    def __repr__(self) -> str:
        return f"<{type(self).__name__} resource={self.resource} items={len(self.items)}>"

    # -- parsing -----------------------------------------------------------

    def _parse_one(self, data: Any) -> T:
        try:
            return self.schema.model_validate(data)
        except PydanticValidationError as exc:
            raise InvalidResponse(
                f"Respuesta inválida del servidor para {self.label}",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    def _parse_list(self, data: Any) -> list[T]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise InvalidResponse(f"Respuesta inválida del servidor para {self.label}")
        return [self._parse_one(row) for row in data]

    def _coerce(self, data: Any) -> T | Any:
        """Parse a mutation response leniently; a successful write is never failed by it."""
        if not isinstance(data, dict):
            return data
        try:
            return self.schema.model_validate(data)
        except PydanticValidationError:
            return data

    def _body(self, data: Mapping[str, Any], *, as_json: bool = False) -> dict[str, Any]:
        if not as_json and (self.multipart or has_upload(data)):
            return {"form": data, "nullable_fields": self.nullable_fields}
        return {"json_body": dict(data)}

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def _path(self, *parts: Any) -> str:
        return "/".join([self.resource, *(str(p) for p in parts)])

    # -- collection --------------------------------------------------------

    async def fetch_all(self, *, force: bool = False) -> Result[list[T]]:
        if self.loading and not force:
            logger.debug("Fetch skipped, already loading: resource=%s", self.resource)
            return Result.ok(self.items)

        seq = self._next_seq()
        self._inflight += 1
        self.loading = True
        self.error = None
        try:
            envelope = await self.api.get(self.resource)
            items = self._parse_list(envelope.data)
        except AppError as exc:
            if seq == self._seq:
                self.error = exc.message or f"Error al cargar {self.label}"
            logger.warning("Fetch failed: resource=%s error=%s", self.resource, exc.message)
            return Result.from_error(exc)
        finally:
            self._inflight -= 1
            self.loading = self._inflight > 0

        if seq != self._seq:
            logger.debug(
                "Discarding stale response: resource=%s seq=%s latest=%s",
                self.resource,
                seq,
                self._seq,
            )
            return Result.ok(self.items)
        self.items = items
        self.loaded = True
        logger.debug("Fetched %s %s", len(items), self.resource)
        return Result.ok(self.items)

    async def fetch_by_id(self, item_id: int) -> Result[T]:
        return await self._query(self._path(item_id), parse=self._parse_one)

    # -- mutations ---------------------------------------------------------

    async def create(self, data: Mapping[str, Any]) -> Result[T]:
        return await self._mutate("POST", self.resource, data)

    async def update(self, item_id: int, data: Mapping[str, Any]) -> Result[T]:
        return await self._mutate("PUT", self._path(item_id), data)

    async def delete(self, item_id: int) -> Result[None]:
        return await self._mutate("DELETE", self._path(item_id), None)

    async def _mutate(
        self,
        method: str,
        path: str,
        data: Mapping[str, Any] | None,
        *,
        as_json: bool = False,
    ) -> Result:
        self._next_seq()
        self.submitting = True
        try:
            if data is None:
                envelope = await self.api.request(method, path)
            else:
                body = self._body(data, as_json=as_json)
                envelope = await self.api.request(method, path, **body)
        except AppError as exc:
            if method != "DELETE":
                self.error = exc.message
            logger.warning(
                "%s failed: resource=%s error=%s", method, self.resource, exc.message
            )
            return Result.from_error(exc)
        finally:
            self.submitting = False

        logger.info("%s succeeded: resource=%s path=%s", method, self.resource, path)
        await self.fetch_all(force=True)
        return Result.ok(self._coerce(envelope.data))

    async def _query(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        parse: Callable[[Any], Any] | None = None,
    ) -> Result:
        """One-off read that does not touch the cached collection."""
        try:
            envelope = await self.api.get(path, params=params)
            data = parse(envelope.data) if parse else envelope.data
        except AppError as exc:
            logger.warning("Query failed: path=%s error=%s", path, exc.message)
            return Result.from_error(exc)
        return Result.ok(data)

    async def search(self, query: str) -> Result[list[T]]:
        return await self._query(
            self._path("search"), params={"query": query}, parse=self._parse_list
        )

    # -- derived reads -----------------------------------------------------

    def find(self, item_id: int | str | None) -> T | None:
        if item_id in (None, ""):
            return None
        try:
            key = int(item_id)
        except (TypeError, ValueError):
            return None
        return next((item for item in self.items if item.pk == key), None)

    def filter_by(self, **attrs: Any) -> list[T]:
        return [
            item for item in self.items if all(item.get(k) == v for k, v in attrs.items())
        ]

    def active(self) -> list[T]:
        return [item for item in self.items if item.deleted_at is None]

    def clear_error(self) -> None:
        self.error = None

    def reset(self) -> None:
        # Responses of fetches still in flight become stale
        self._next_seq()
        self.items = []
        self.loading = False
        self.loaded = False
        self.error = None
