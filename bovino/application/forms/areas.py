from __future__ import annotations

from bovino.application.forms.base import EntityForm
from bovino.application.forms.error_routing import ErrorRule
from bovino.application.forms.fields import FieldKind, FieldSpec, Option


class LoteForm(EntityForm):
    store_name = "lotes"
    dependencies = ("potreros",)
    managed_label = "lotes"
    fields = {
        "codigo": FieldSpec(
            required="El código del lote es obligatorio",
            min_length=(1, "El código del lote es requerido"),
            max_length=(50, "El código no puede tener más de 50 caracteres"),
        ),
        "descripcion": FieldSpec(
            required="La descripción es requerida",
            max_length=(1000, "La descripción no puede tener más de 1000 caracteres"),
        ),
        "potrero_id": FieldSpec(FieldKind.CHOICE, required="El potrero es requerido"),
    }
    error_rules = (
        ErrorRule(
            ("código", "codigo", "existe"),
            "codigo",
            "Ya existe un lote con este código. Por favor, use un código diferente.",
        ),
        ErrorRule(("descripción", "descripcion"), "descripcion", "La descripción es requerida"),
        ErrorRule(("potrero",), "potrero_id", "El potrero es requerido"),
    )

    def options(self) -> dict[str, list[Option]]:
        return {
            "potrero_id": [
                Option(str(p.potrero_id), p.ubicacion) for p in self.context.potreros.active()
            ]
        }


class PotreroForm(EntityForm):
    store_name = "potreros"
    managed_label = "potreros"
    fields = {
        "ubicacion": FieldSpec(
            required="La ubicación es requerida",
            min_length=(1, "La ubicación es requerida"),
            max_length=(255, "La ubicación no puede tener más de 255 caracteres"),
        ),
    }
    error_rules = (
        ErrorRule(
            ("ubicación", "ubicacion", "existe"),
            "ubicacion",
            "Ya existe un potrero con esta ubicación. Por favor, use una ubicación diferente.",
        ),
        ErrorRule(
            ("lotes",),
            message="No se puede eliminar el potrero porque está asignado a uno o más lotes.",
        ),
    )


class RazaForm(EntityForm):
    store_name = "razas"
    managed_label = "razas"
    fields = {
        "nombre": FieldSpec(
            required="El nombre es requerido",
            min_length=(2, "El nombre debe tener al menos 2 caracteres"),
            max_length=(100, "El nombre no puede tener más de 100 caracteres"),
        ),
        "descripcion": FieldSpec(
            max_length=(500, "La descripción no puede tener más de 500 caracteres"),
        ),
    }
    error_rules = (
        ErrorRule(
            ("nombre", "existe"),
            "nombre",
            "Ya existe una raza con este nombre. Por favor, use un nombre diferente.",
        ),
    )


class MataderoForm(EntityForm):
    store_name = "mataderos"
    managed_label = "mataderos"
    fields = {
        "ubicacion": FieldSpec(
            required="La ubicación es obligatoria",
            min_length=(2, "La ubicación debe tener al menos 2 caracteres"),
            max_length=(255, "La ubicación no puede tener más de 255 caracteres"),
        ),
    }
    error_rules = (
        ErrorRule(
            ("ubicación", "ubicacion", "existe"),
            "ubicacion",
            "Ya existe un matadero con esta ubicación. Por favor, use una ubicación diferente.",
        ),
    )
