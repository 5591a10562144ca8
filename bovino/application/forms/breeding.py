from __future__ import annotations

from typing import Any, Mapping

from bovino.application.forms.animals import animal_age_label
from bovino.application.forms.base import EntityForm
from bovino.application.forms.error_routing import ErrorRule
from bovino.application.forms.fields import FieldKind, FieldSpec, Option
from bovino.domain.rules.breeding import (
    eligible_females,
    eligible_males,
    expected_calving_date,
    is_breeding_eligible,
)
from bovino.domain.value_objects.sex import Sex
from bovino.interfaces.http.schemas.breeding import MontaSchema
from bovino.utils.datetime_tz import parse_local_date, today

NO_PARENT_LABEL = "Sin evento asociado (categoría principal)"


def monta_label(context, monta: MontaSchema) -> str:
    """`<número> - Hembra: <arete>`, plus the male when there is one."""

    def arete(relation: str, animal_id: int | None) -> str | None:
        nested = monta.related(relation)
        if nested and nested.get("arete"):
            return nested["arete"]
        animal = context.animales.find(animal_id)
        return animal.arete if animal is not None else None

    female = arete("hembra", monta.animal_hembra_id) or "N/A"
    label = f"{monta.numero_monta or monta.monta_id} - Hembra: {female}"
    male = arete("macho", monta.animal_macho_id)
    if male:
        label += f" - Macho: {male}"
    return label


class MontaForm(EntityForm):
    """Breeding event. Once created only its completion state can change."""

    store_name = "montas"
    dependencies = ("animales", "tipos_evento")
    fields = {
        "animal_hembra_id": FieldSpec(FieldKind.CHOICE, required="La hembra es obligatoria"),
        "animal_macho_id": FieldSpec(FieldKind.CHOICE, nullable=True),
        "tipo_evento_id": FieldSpec(
            FieldKind.CHOICE, required="El tipo de evento es obligatorio"
        ),
        "fecha": FieldSpec(
            FieldKind.DATE,
            required="La fecha de la monta es obligatoria",
            default_factory=today,
        ),
        "descripcion": FieldSpec(),
        "estado": FieldSpec(FieldKind.BOOLEAN, default=True),
    }

    def toggle_estado(self) -> None:
        self.set_value("estado", not self.values.get("estado"))

    def _event_date(self):
        return parse_local_date(self.values.get("fecha")) or today()

    def options(self) -> dict[str, list[Option]]:
        on = self._event_date()
        animals = self.context.animales.items
        return {
            "animal_hembra_id": [
                Option(str(a.animal_id), animal_age_label(a, on))
                for a in eligible_females(animals, on)
            ],
            "animal_macho_id": [
                Option(str(a.animal_id), animal_age_label(a, on))
                for a in eligible_males(animals, on)
            ],
            "tipo_evento_id": [
                Option(str(t.tipo_evento_id), t.nombre)
                for t in self.context.tipos_evento.active()
            ],
        }

    def validate(self) -> bool:
        if self.is_editing:
            self.field_errors = {}
            return True
        return super().validate()

    def clean(self, values: Mapping[str, Any]) -> dict[str, str]:
        errors: dict[str, str] = {}
        on = self._event_date()
        female = self.context.animales.find(values.get("animal_hembra_id"))
        if female and not is_breeding_eligible(Sex.FEMALE, female.fecha_nacimiento, on):
            errors["animal_hembra_id"] = (
                "La hembra seleccionada no cumple con la edad mínima de 15 meses para reproducción"
            )
        male = self.context.animales.find(values.get("animal_macho_id"))
        if male and not is_breeding_eligible(Sex.MALE, male.fecha_nacimiento, on):
            errors["animal_macho_id"] = (
                "El macho seleccionado no cumple con la edad mínima de 18 meses para reproducción"
            )
        return errors

    def to_payload(self) -> dict[str, Any]:
        if self.is_editing:
            return {"estado": bool(self.values.get("estado"))}
        return super().to_payload()


class TipoEventoForm(EntityForm):
    store_name = "tipos_evento"
    dependencies = ("tipos_evento",)
    managed_label = "tipos de evento"
    fields = {
        "nombre": FieldSpec(
            required="El nombre es requerido",
            min_length=(1, "El nombre es requerido"),
            max_length=(255, "El nombre no puede tener más de 255 caracteres"),
        ),
        "padre_id": FieldSpec(FieldKind.CHOICE, nullable=True),
    }
    error_rules = (
        # Hierarchy messages may also say "existe"; they belong on the parent field
        ErrorRule(("padre", "jerarquía", "jerarquia"), "padre_id"),
        ErrorRule(
            ("nombre", "existe"),
            "nombre",
            "Ya existe un tipo de evento con este nombre. Por favor, use un nombre diferente.",
        ),
    )

    async def load_extra(self) -> bool:
        result = await self.context.tipos_evento.fetch_parents()
        return result.success

    def options(self) -> dict[str, list[Option]]:
        editing_id = self.record.pk if self.record is not None else None
        candidates = self.context.tipos_evento.parent_candidates(editing_id)
        return {
            "padre_id": [
                Option("", NO_PARENT_LABEL),
                *(Option(str(t.tipo_evento_id), t.nombre) for t in candidates),
            ]
        }

    def clean(self, values: Mapping[str, Any]) -> dict[str, str]:
        padre = values.get("padre_id")
        if padre and self.record is not None and str(padre) == str(self.record.pk):
            return {"padre_id": "Un tipo de evento no puede ser su propio padre"}
        return {}


class DiagnosticoForm(EntityForm):
    """Pregnancy check on a completed breeding event."""

    store_name = "diagnosticos"
    dependencies = ("montas", "diagnosticos", "animales")
    fields = {
        "monta_id": FieldSpec(FieldKind.CHOICE, required="La monta es obligatoria"),
        "metodo": FieldSpec(
            required="El método de diagnóstico es obligatorio",
            min_length=(2, "El método debe tener al menos 2 caracteres"),
        ),
        "resultado": FieldSpec(FieldKind.BOOLEAN),
        "fecha_probable_parto": FieldSpec(FieldKind.DATE),
    }
    error_rules = (
        ErrorRule(("monta",), "monta_id"),
        ErrorRule(("método", "metodo"), "metodo"),
        ErrorRule(("fecha probable", "parto"), "fecha_probable_parto"),
    )

    def set_value(self, name: str, value: Any) -> None:
        super().set_value(name, value)
        if name == "resultado" and value and not self.values.get("fecha_probable_parto"):
            self.values["fecha_probable_parto"] = expected_calving_date(today())

    def options(self) -> dict[str, list[Option]]:
        diagnosed = {
            d.monta_id for d in self.context.diagnosticos.items if not d.is_deleted
        }
        if self.record is not None:
            diagnosed.discard(self.record.monta_id)
        montas = [
            m
            for m in self.context.montas.active()
            if m.estado and m.monta_id not in diagnosed
        ]
        return {"monta_id": [Option(str(m.monta_id), monta_label(self.context, m)) for m in montas]}

    def clean(self, values: Mapping[str, Any]) -> dict[str, str]:
        if not values.get("resultado"):
            return {}
        expected = parse_local_date(values.get("fecha_probable_parto"))
        if expected is None:
            return {
                "fecha_probable_parto": (
                    "La fecha probable de parto es requerida para diagnósticos positivos"
                )
            }
        if not self.is_editing and expected < today():
            return {"fecha_probable_parto": "La fecha debe ser hoy o en el futuro"}
        return {}

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        # The server rejects a calving date on a negative result
        if not payload["resultado"]:
            payload["fecha_probable_parto"] = None
        return payload


class PartoForm(EntityForm):
    store_name = "partos"
    dependencies = ("diagnosticos", "montas", "animales", "tipos_evento")
    fields = {
        "prenez_id": FieldSpec(FieldKind.CHOICE, required="El diagnóstico es obligatorio"),
        "tipo_evento_id": FieldSpec(
            FieldKind.CHOICE, required="El tipo de evento es obligatorio"
        ),
        "fecha": FieldSpec(
            FieldKind.DATE,
            required="La fecha del parto es requerida",
            default_factory=today,
        ),
        "descripcion": FieldSpec(),
    }
    error_rules = (
        ErrorRule(("diagnóstico", "diagnostico"), "prenez_id", "Diagnóstico no válido"),
        ErrorRule(("tipo de evento",), "tipo_evento_id", "Tipo de evento no válido"),
        ErrorRule(("fecha",), "fecha", "Fecha no válida"),
    )

    def _diagnosis_label(self, diagnostico) -> str:
        monta = self.context.montas.find(diagnostico.monta_id)
        if monta is None:
            return f"Diagnóstico {diagnostico.prenez_id}"
        return monta_label(self.context, monta)

    def options(self) -> dict[str, list[Option]]:
        positives = [d for d in self.context.diagnosticos.active() if d.resultado]
        return {
            "prenez_id": [
                Option(str(d.prenez_id), self._diagnosis_label(d)) for d in positives
            ],
            "tipo_evento_id": [
                Option(str(t.tipo_evento_id), t.nombre)
                for t in self.context.tipos_evento.active()
            ],
        }
