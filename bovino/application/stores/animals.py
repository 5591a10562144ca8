from __future__ import annotations

from bovino.application.stores.entity_store import EntityStore
from bovino.domain.value_objects.sex import Sex
from bovino.interfaces.http.schemas.animals import AnimalSchema


class AnimalStore(EntityStore[AnimalSchema]):
    resource = "animales"
    schema = AnimalSchema
    label = "animales"
    multipart = True
    nullable_fields = ("lote_id", "raza_id", "animal_madre_id", "animal_padre_id")

    def by_sex(self, sex: Sex | str) -> list[AnimalSchema]:
        sex = Sex.parse(sex)
        return [a for a in self.items if a.sex is sex]

    def by_tag(self, arete: str) -> AnimalSchema | None:
        return next((a for a in self.items if a.arete == arete), None)
