from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import ClassVar

from bovino.interfaces.http.schemas.base import Record


class PesajeSchema(Record):
    id_field: ClassVar[str] = "pesaje_id"

    pesaje_id: int
    animal_id: int | None = None
    unidad_id: int | None = None
    peso: Decimal = Decimal("0")
    fecha: date | None = None


class ProduccionLecheraSchema(Record):
    id_field: ClassVar[str] = "produccion_id"

    produccion_id: int
    animal_id: int | None = None
    unidad_id: int | None = None
    cantidad: int = 0
    fecha: date | None = None


class ProduccionCarneSchema(Record):
    id_field: ClassVar[str] = "produccion_id"

    produccion_id: int
    animal_id: int | None = None
    unidad_id: int | None = None
    matadero_id: int | None = None
    pesaje_id: int | None = None
    peso_canal: Decimal = Decimal("0")
    fecha: date | None = None
