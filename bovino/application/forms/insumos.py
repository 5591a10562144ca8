from __future__ import annotations

from typing import Any, Mapping

from bovino.application.forms.animals import animal_options
from bovino.application.forms.base import EntityForm
from bovino.application.forms.error_routing import ErrorRule
from bovino.application.forms.fields import FieldKind, FieldSpec, Option, to_number
from bovino.domain.rules.stock import exceeds_stock, selectable_insumos
from bovino.interfaces.http.schemas.base import Unidad
from bovino.interfaces.http.schemas.insumos import InsumoSchema
from bovino.utils.datetime_tz import today


def unit_options(units: list[Unidad]) -> list[Option]:
    return [Option(str(u.unidad_id), u.nombre) for u in units if not u.is_deleted]


class InsumoForm(EntityForm):
    store_name = "insumos"
    dependencies = ("tipos_insumo",)
    managed_label = "insumos"
    fields = {
        "nombre": FieldSpec(
            required="El nombre es obligatorio",
            min_length=(1, "El nombre es requerido"),
            max_length=(255, "El nombre no puede tener más de 255 caracteres"),
        ),
        "descripcion": FieldSpec(),
        "tipo_insumo_id": FieldSpec(
            FieldKind.CHOICE, required="El tipo de insumo es obligatorio", nullable=True
        ),
        "cantidad": FieldSpec(
            FieldKind.INTEGER,
            required="La cantidad es obligatoria",
            min_value=(0, "La cantidad debe ser mayor o igual a 0"),
            invalid="La cantidad debe ser un número entero",
        ),
        "unidad_id": FieldSpec(
            FieldKind.CHOICE, required="La unidad de medida es obligatoria", nullable=True
        ),
        "imagen": FieldSpec(FieldKind.FILE),
    }
    error_rules = (
        ErrorRule(
            ("nombre", "existe"),
            "nombre",
            "Ya existe un insumo con este nombre. Por favor, use un nombre diferente.",
        ),
        ErrorRule(
            ("cantidad",), "cantidad", "La cantidad es requerida y debe ser mayor o igual a 0"
        ),
        ErrorRule(("tipo_insumo", "tipo"), "tipo_insumo_id", "El tipo de insumo especificado no existe"),
        ErrorRule(("unidad",), "unidad_id", "La unidad especificada no existe"),
    )

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.units: list[Unidad] = []

    async def load_extra(self) -> bool:
        result = await self.context.insumos.fetch_units()
        if result.success:
            self.units = result.data or []
        return result.success

    def options(self) -> dict[str, list[Option]]:
        return {
            "tipo_insumo_id": [
                Option(str(t.tipo_insumo_id), t.nombre) for t in self.context.tipos_insumo.active()
            ],
            "unidad_id": unit_options(self.units),
        }


class TipoInsumoForm(EntityForm):
    store_name = "tipos_insumo"
    managed_label = "tipos de insumo"
    fields = {
        "nombre": FieldSpec(
            required="El nombre es obligatorio",
            min_length=(1, "El nombre es requerido"),
            max_length=(255, "El nombre no puede tener más de 255 caracteres"),
        ),
    }
    error_rules = (
        ErrorRule(
            ("nombre", "existe"),
            "nombre",
            "Ya existe un tipo de insumo con este nombre. Por favor, use un nombre diferente.",
        ),
    )


class AlimentacionForm(EntityForm):
    store_name = "alimentaciones"
    dependencies = ("animales", "insumos")
    fields = {
        "animal_id": FieldSpec(FieldKind.CHOICE, required="El animal es obligatorio"),
        "insumo_id": FieldSpec(FieldKind.CHOICE, required="El insumo es obligatorio"),
        "cantidad": FieldSpec(
            FieldKind.INTEGER,
            required="La cantidad es obligatoria",
            min_value=(1, "La cantidad debe ser mayor a 0"),
            invalid="La cantidad debe ser un número entero",
        ),
        "fecha": FieldSpec(FieldKind.DATE, required="La fecha es requerida", default_factory=today),
    }
    error_rules = (
        ErrorRule(("stock",), "cantidad"),
        ErrorRule(("cantidad",), "cantidad"),
    )

    @property
    def selected_insumo(self) -> InsumoSchema | None:
        return self.context.insumos.find(self.values.get("insumo_id"))

    def options(self) -> dict[str, list[Option]]:
        return {
            "animal_id": animal_options(self.context.animales.items),
            "insumo_id": [
                Option(
                    str(i.insumo_id),
                    f"{i.nombre} - Stock: {i.cantidad} {i.unit_name or ''}".rstrip(),
                )
                for i in selectable_insumos(self.context.insumos.items)
            ],
        }

    def clean(self, values: Mapping[str, Any]) -> dict[str, str]:
        insumo = self.selected_insumo
        requested = to_number(values.get("cantidad"), FieldKind.INTEGER)
        if insumo is not None and requested is not None and exceeds_stock(insumo, requested):
            return {
                "cantidad": (
                    f"La cantidad no puede ser mayor al stock disponible ({insumo.cantidad})"
                )
            }
        return {}
