from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from bovino.application.forms.base import EntityForm
from bovino.application.forms.fields import FieldKind, FieldSpec, Option
from bovino.domain.rules.breeding import (
    eligible_as_female,
    eligible_as_male,
    eligible_females,
    eligible_males,
    months_between,
)
from bovino.domain.value_objects.sex import Sex
from bovino.interfaces.http.schemas.animals import AnimalSchema
from bovino.utils.datetime_tz import parse_local_date, today

MOTHER_TOO_YOUNG = "La madre seleccionada no cumple con la edad mínima de 15 meses para reproducción"
FATHER_TOO_YOUNG = "El padre seleccionado no cumple con la edad mínima de 18 meses para reproducción"


def animal_label(animal: AnimalSchema, *, with_breed: bool = False) -> str:
    if with_breed:
        breed = animal.breed_name
        return f"{animal.arete} - {breed}" if breed else animal.arete
    return f"{animal.arete} - {animal.nombre or 'Sin nombre'}"


def animal_age_label(animal: AnimalSchema, on: date) -> str:
    months = months_between(animal.fecha_nacimiento, on) if animal.fecha_nacimiento else 0
    return f"{animal_label(animal)} ({months} meses)"


def animal_options(animals: list[AnimalSchema]) -> list[Option]:
    return [Option(str(a.animal_id), animal_label(a)) for a in animals if not a.is_deleted]


def _valid_sex(value: Any, values: Mapping[str, Any]) -> str | None:
    return None if Sex.parse(value) else "El sexo es obligatorio"


class AnimalForm(EntityForm):
    store_name = "animales"
    dependencies = ("lotes", "razas", "animales")
    fields = {
        "arete": FieldSpec(
            required="El número de arete es obligatorio",
            min_length=(1, "El número de arete es requerido"),
            max_length=(255, "El número de arete no puede tener más de 255 caracteres"),
        ),
        "sexo": FieldSpec(required="El sexo es obligatorio", validators=(_valid_sex,)),
        "raza_id": FieldSpec(FieldKind.CHOICE, required="La raza es requerida", nullable=True),
        "fecha_nacimiento": FieldSpec(
            FieldKind.DATE, required="La fecha de nacimiento es obligatoria"
        ),
        "fecha_destete": FieldSpec(FieldKind.DATE),
        "lote_id": FieldSpec(FieldKind.CHOICE, required="El lote es requerido", nullable=True),
        "mostrar_padres": FieldSpec(FieldKind.BOOLEAN, send=False),
        "animal_madre_id": FieldSpec(FieldKind.CHOICE, nullable=True),
        "animal_padre_id": FieldSpec(FieldKind.CHOICE, nullable=True),
        "imagen": FieldSpec(FieldKind.FILE),
    }

    def initial_values(self) -> dict[str, Any]:
        values = super().initial_values()
        if isinstance(self.record, AnimalSchema):
            values["mostrar_padres"] = self.record.has_parents
        return values

    def _candidates(self) -> list[AnimalSchema]:
        own_id = self.record.pk if self.record is not None else None
        return [a for a in self.context.animales.items if a.animal_id != own_id]

    def options(self) -> dict[str, list[Option]]:
        on = today()
        return {
            "sexo": [Option(s.value, s.label) for s in Sex],
            "animal_madre_id": [
                Option(str(a.animal_id), animal_label(a, with_breed=True))
                for a in eligible_females(self._candidates(), on)
            ],
            "animal_padre_id": [
                Option(str(a.animal_id), animal_label(a, with_breed=True))
                for a in eligible_males(self._candidates(), on)
            ],
            "lote_id": [
                Option(str(lote.lote_id), f"{lote.codigo} - {lote.descripcion or ''}")
                for lote in self.context.lotes.active()
            ],
            "raza_id": [
                Option(str(raza.raza_id), raza.nombre) for raza in self.context.razas.active()
            ],
        }

    def clean(self, values: Mapping[str, Any]) -> dict[str, str]:
        errors: dict[str, str] = {}
        born = parse_local_date(values.get("fecha_nacimiento"))
        weaned = parse_local_date(values.get("fecha_destete"))
        if born and weaned and weaned < born:
            errors["fecha_destete"] = (
                "La fecha de destete no puede ser anterior a la fecha de nacimiento"
            )

        if values.get("mostrar_padres"):
            on = today()
            mother = self.context.animales.find(values.get("animal_madre_id"))
            if mother and not (
                mother.fecha_nacimiento and eligible_as_female(mother.fecha_nacimiento, on)
            ):
                errors["animal_madre_id"] = MOTHER_TOO_YOUNG
            father = self.context.animales.find(values.get("animal_padre_id"))
            if father and not (
                father.fecha_nacimiento and eligible_as_male(father.fecha_nacimiento, on)
            ):
                errors["animal_padre_id"] = FATHER_TOO_YOUNG
        return errors

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if not self.values.get("mostrar_padres"):
            payload["animal_madre_id"] = None
            payload["animal_padre_id"] = None
        return payload
