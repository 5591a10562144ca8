from __future__ import annotations

from datetime import date
from typing import ClassVar

from bovino.domain.value_objects.sex import Sex
from bovino.interfaces.http.schemas.base import Record


class AnimalSchema(Record):
    id_field: ClassVar[str] = "animal_id"
    date_fields: ClassVar[tuple[str, ...]] = ("fecha_nacimiento", "fecha_destete")

    animal_id: int
    arete: str = ""
    nombre: str | None = None
    sexo: str | None = None
    fecha_nacimiento: date | None = None
    fecha_destete: date | None = None
    raza_id: int | None = None
    lote_id: int | None = None
    animal_madre_id: int | None = None
    animal_padre_id: int | None = None
    imagen: str | None = None

    @property
    def sex(self) -> Sex | None:
        return Sex.parse(self.sexo)

    @property
    def has_parents(self) -> bool:
        return self.animal_madre_id is not None or self.animal_padre_id is not None

    @property
    def breed_name(self) -> str | None:
        raza = self.related("raza")
        return raza.get("nombre") if raza else None
