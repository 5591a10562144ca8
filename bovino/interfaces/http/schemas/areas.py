from __future__ import annotations

from typing import ClassVar

from bovino.interfaces.http.schemas.base import Record


class LoteSchema(Record):
    id_field: ClassVar[str] = "lote_id"

    lote_id: int
    codigo: str = ""
    descripcion: str | None = None
    potrero_id: int | None = None


class PotreroSchema(Record):
    id_field: ClassVar[str] = "potrero_id"

    potrero_id: int
    ubicacion: str = ""


class RazaSchema(Record):
    id_field: ClassVar[str] = "raza_id"

    raza_id: int
    nombre: str = ""
    descripcion: str | None = None


class MataderoSchema(Record):
    id_field: ClassVar[str] = "matadero_id"

    matadero_id: int
    ubicacion: str = ""
