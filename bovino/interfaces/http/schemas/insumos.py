from __future__ import annotations

from datetime import date
from typing import ClassVar

from bovino.interfaces.http.schemas.base import Record


class InsumoSchema(Record):
    id_field: ClassVar[str] = "insumo_id"

    insumo_id: int
    nombre: str = ""
    tipo_insumo_id: int | None = None
    unidad_id: int | None = None
    cantidad: int = 0
    descripcion: str | None = None
    imagen: str | None = None

    @property
    def unit_name(self) -> str:
        unidad = self.related("unidad")
        return (unidad or {}).get("nombre") or ""


class TipoInsumoSchema(Record):
    id_field: ClassVar[str] = "tipo_insumo_id"

    tipo_insumo_id: int
    nombre: str = ""
    descripcion: str | None = None


class AlimentacionSchema(Record):
    id_field: ClassVar[str] = "alimentacion_id"

    alimentacion_id: int
    animal_id: int | None = None
    insumo_id: int | None = None
    cantidad: int = 0
    fecha: date | None = None
