from __future__ import annotations

from datetime import date
from typing import ClassVar

from bovino.interfaces.http.schemas.base import Record


class MontaSchema(Record):
    id_field: ClassVar[str] = "monta_id"

    monta_id: int
    numero_monta: str | None = None
    animal_hembra_id: int | None = None
    animal_macho_id: int | None = None
    tipo_evento_id: int | None = None
    fecha: date | None = None
    estado: bool = False
    descripcion: str | None = None


class DiagnosticoSchema(Record):
    id_field: ClassVar[str] = "prenez_id"
    date_fields: ClassVar[tuple[str, ...]] = ("fecha", "fecha_probable_parto")

    prenez_id: int
    monta_id: int | None = None
    metodo: str | None = None
    resultado: bool = False
    fecha_probable_parto: date | None = None
    tipo_evento_id: int | None = None
    fecha: date | None = None
    descripcion: str | None = None


class PartoSchema(Record):
    id_field: ClassVar[str] = "evento_id"

    evento_id: int
    prenez_id: int | None = None
    tipo_evento_id: int | None = None
    fecha: date | None = None
    descripcion: str | None = None


class EventoSanitarioSchema(Record):
    id_field: ClassVar[str] = "evento_sanitario_id"

    evento_sanitario_id: int
    animal_id: int | None = None
    tipo_evento_id: int | None = None
    fecha: date | None = None
    # "Completado" or "Pendiente"
    estado: str | bool | None = None
    diagnostico: str | None = None
    tratamiento: str | None = None
    descripcion: str | None = None

    @property
    def completed(self) -> bool:
        return self.estado is True or self.estado == "Completado"


class TipoEventoSchema(Record):
    id_field: ClassVar[str] = "tipo_evento_id"

    tipo_evento_id: int
    nombre: str = ""
    padre_id: int | None = None
