from __future__ import annotations

from typing import Any, Mapping

from bovino.application.forms.animals import animal_options
from bovino.application.forms.base import EntityForm
from bovino.application.forms.error_routing import ErrorRule
from bovino.application.forms.fields import FieldKind, FieldSpec, Option
from bovino.application.forms.insumos import unit_options
from bovino.domain.value_objects.sex import Sex
from bovino.interfaces.http.schemas.base import Unidad
from bovino.utils.datetime_tz import today

ONLY_FEMALES = "Solo animales hembra pueden tener producción lechera"


class _UnitsForm(EntityForm):
    """Form whose unit options come from the target store's unit endpoint."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.units: list[Unidad] = []

    async def load_extra(self) -> bool:
        result = await self.store.fetch_units()
        if result.success:
            self.units = result.data or []
        return result.success


class PesajeForm(_UnitsForm):
    store_name = "pesajes"
    dependencies = ("animales",)
    fields = {
        "animal_id": FieldSpec(FieldKind.CHOICE, required="El animal es obligatorio"),
        "peso": FieldSpec(
            FieldKind.DECIMAL,
            required="El peso es obligatorio",
            min_value=(0.01, "El peso debe ser mayor a 0"),
            pattern=(r"\d*\.?\d+", "El peso debe ser un número válido"),
            invalid="El peso debe ser un número válido",
        ),
        "unidad_id": FieldSpec(FieldKind.CHOICE, required="La unidad es obligatoria"),
        "fecha": FieldSpec(FieldKind.DATE, required="La fecha es requerida", default_factory=today),
    }

    def options(self) -> dict[str, list[Option]]:
        return {
            "animal_id": animal_options(self.context.animales.items),
            "unidad_id": unit_options(self.units),
        }


class ProduccionLecheraForm(_UnitsForm):
    store_name = "produccion_lechera"
    dependencies = ("animales",)
    fields = {
        "animal_id": FieldSpec(FieldKind.CHOICE, required="El animal es obligatorio"),
        "cantidad": FieldSpec(
            FieldKind.INTEGER,
            required="La cantidad es obligatoria",
            min_value=(1, "La cantidad debe ser mayor a 0"),
            pattern=(r"\d+", "La cantidad debe ser un número entero válido"),
            invalid="La cantidad debe ser un número entero válido",
        ),
        "unidad_id": FieldSpec(FieldKind.CHOICE, required="La unidad de medida es obligatoria"),
        "fecha": FieldSpec(
            FieldKind.DATE,
            required="La fecha de producción es requerida",
            default_factory=today,
        ),
        "descripcion": FieldSpec(),
    }
    error_rules = (
        ErrorRule(("hembra",), "animal_id", ONLY_FEMALES),
        ErrorRule(("animal",), "animal_id", "Animal no válido"),
        ErrorRule(("unidad",), "unidad_id", "Unidad no válida"),
        ErrorRule(("cantidad",), "cantidad", "Cantidad no válida"),
        ErrorRule(("fecha",), "fecha", "Fecha no válida"),
    )

    def options(self) -> dict[str, list[Option]]:
        females = [a for a in self.context.animales.items if a.sex is Sex.FEMALE]
        return {
            "animal_id": animal_options(females),
            "unidad_id": unit_options(self.units),
        }

    def clean(self, values: Mapping[str, Any]) -> dict[str, str]:
        animal = self.context.animales.find(values.get("animal_id"))
        if animal is not None and animal.sex is not Sex.FEMALE:
            return {"animal_id": ONLY_FEMALES}
        return {}


class ProduccionCarneForm(_UnitsForm):
    store_name = "produccion_carne"
    dependencies = ("animales", "mataderos")
    fields = {
        "animal_id": FieldSpec(FieldKind.CHOICE, required="El animal es obligatorio"),
        "matadero_id": FieldSpec(FieldKind.CHOICE, required="El matadero es obligatorio"),
        "unidad_id": FieldSpec(FieldKind.CHOICE, required="La unidad de medida es obligatoria"),
        "peso_canal": FieldSpec(
            FieldKind.DECIMAL,
            required="El peso de la canal es obligatorio",
            min_value=(0.1, "El peso debe ser mayor a 0"),
            max_value=(1000, "El peso no puede ser mayor a 1000 kg"),
            invalid="El peso debe ser un número válido",
        ),
        "fecha": FieldSpec(FieldKind.DATE, required="La fecha es obligatoria", default_factory=today),
    }
    error_rules = (
        ErrorRule(("matadero",), "matadero_id"),
        ErrorRule(("animal",), "animal_id"),
        ErrorRule(("peso",), "peso_canal"),
    )

    def options(self) -> dict[str, list[Option]]:
        return {
            "animal_id": animal_options(self.context.animales.items),
            "matadero_id": [
                Option(str(m.matadero_id), m.ubicacion) for m in self.context.mataderos.active()
            ],
            "unidad_id": unit_options(self.units),
        }
