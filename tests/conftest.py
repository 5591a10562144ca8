from __future__ import annotations

import json
import re
import sys
from collections import defaultdict
from collections.abc import AsyncIterator
from email.parser import BytesParser
from email.policy import default as default_policy
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(PROJECT_ROOT))

# ruff: noqa: E402
from bovino.application.context import AppContext
from bovino.config.settings import Settings
from bovino.infrastructure.push.desktop import LoggingDesktopNotifier, Permission
from bovino.infrastructure.storage.local_storage import MemoryStorage

ID_FIELDS = {
    "animales": "animal_id",
    "alimentaciones": "alimentacion_id",
    "comprasAnimales": "compra_animal_id",
    "comprasInsumo": "compra_insumo_id",
    "compras": "compra_id",
    "detalleCompra": "detalle_id",
    "diagnosticos": "prenez_id",
    "eventosSanitario": "evento_sanitario_id",
    "insumos": "insumo_id",
    "lotes": "lote_id",
    "mataderos": "matadero_id",
    "montas": "monta_id",
    "partos": "evento_id",
    "pesajes": "pesaje_id",
    "potreros": "potrero_id",
    "produccionCarne": "produccion_id",
    "produccionLechera": "produccion_id",
    "proveedores": "proveedor_id",
    "razas": "raza_id",
    "tipoInsumo": "tipo_insumo_id",
    "types": "tipo_evento_id",
}

Handler = Callable[[httpx.Request], httpx.Response]


def envelope(data: Any = None, *, ok: bool = True, status: int = 200, **extra: Any) -> httpx.Response:
    return httpx.Response(status, json={"ok": ok, "data": data, **extra})


def parse_multipart(request: httpx.Request) -> dict[str, Any]:
    head = f"Content-Type: {request.headers['content-type']}\r\n\r\n".encode()
    message = BytesParser(policy=default_policy).parsebytes(head + request.content)
    fields: dict[str, Any] = {}
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        # Uploaded files are reported by filename
        fields[name] = part.get_filename() or part.get_content()
    return fields


def _coerce(value: Any) -> Any:
    if isinstance(value, str):
        if value == "":
            return None
        if re.fullmatch(r"\d+", value):
            return int(value)
    return value


class FakeServer:
    """In-memory REST backend speaking the `{ok, data, msg}` envelope."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.requests: list[httpx.Request] = []
        self.overrides: dict[tuple[str, str], Handler] = {}
        self._next_id = 100

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def seed(self, resource: str, *rows: dict[str, Any]) -> None:
        self.tables[resource].extend(dict(row) for row in rows)

    def route(self, method: str, path: str, handler: Handler) -> None:
        self.overrides[(method, path)] = handler

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and self._path(r) == path]

    @staticmethod
    def _path(request: httpx.Request) -> str:
        return request.url.path.removeprefix("/api/")

    @staticmethod
    def body(request: httpx.Request) -> dict[str, Any]:
        content_type = request.headers.get("content-type", "")
        if content_type.startswith("multipart/form-data"):
            return {k: _coerce(v) for k, v in parse_multipart(request).items()}
        return json.loads(request.content or b"{}")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = self._path(request)
        override = self.overrides.get((request.method, path))
        if override is not None:
            return override(request)

        resource, _, rest = path.partition("/")
        id_field = ID_FIELDS.get(resource)
        if id_field is None:
            return envelope(ok=False, status=404, msg="Ruta no encontrada")
        rows = self.tables[resource]

        if not rest:
            if request.method == "GET":
                return envelope(rows)
            if request.method == "POST":
                self._next_id += 1
                row = {**self.body(request), id_field: self._next_id}
                rows.append(row)
                return envelope(row, status=201)

        if rest.isdigit():
            row = next((r for r in rows if r[id_field] == int(rest)), None)
            if row is None:
                return envelope(ok=False, status=404, msg="Registro no encontrado")
            if request.method == "GET":
                return envelope(row)
            if request.method == "PUT":
                row.update(self.body(request))
                return envelope(row)
            if request.method == "DELETE":
                row["deleted_at"] = "2024-01-01T00:00:00.000Z"
                return envelope(None, msg="Eliminado")
        return envelope(ok=False, status=404, msg="Ruta no encontrada")


class StubChannel:
    def __init__(self) -> None:
        self.user_id: int | None = None
        self.handler = None
        self.opened: list[int] = []
        self.closed = False

    async def open(self, user_id, on_notification) -> None:
        self.user_id = user_id
        self.handler = on_notification
        self.opened.append(user_id)

    async def close(self) -> None:
        self.closed = True
        self.user_id = None

    def push(self, payload: dict[str, Any]):
        return self.handler(payload)


class RecordingNotifier(LoggingDesktopNotifier):
    def __init__(self, permission: Permission = Permission.DEFAULT) -> None:
        super().__init__(permission)
        self.shown: list[tuple[str, str]] = []

    def show(self, title: str, body: str) -> None:
        self.shown.append((title, body))


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    return Settings.model_validate(
        {
            "api_base_url": "http://testserver/api/",
            "storage_dir": str(tmp_path / "storage"),
            "log_level": "DEBUG",
            "environment": "test",
            "session_token": "session-abc",
        }
    )


@pytest.fixture()
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def channel() -> StubChannel:
    return StubChannel()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
async def context(
    test_settings: Settings,
    server: FakeServer,
    storage: MemoryStorage,
    channel: StubChannel,
    notifier: RecordingNotifier,
) -> AsyncIterator[AppContext]:
    ctx = AppContext.create(
        test_settings,
        transport=server.transport,
        storage=storage,
        channel=channel,
        notifier=notifier,
    )
    yield ctx
    await ctx.aclose()
