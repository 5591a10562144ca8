from __future__ import annotations

import logging
from typing import Any

from bovino.application.forms.base import EntityForm
from bovino.application.forms.error_routing import ErrorRule
from bovino.application.forms.fields import FieldKind, FieldSpec, Option, is_empty, to_number
from bovino.application.forms.lines import LineItemsMixin
from bovino.domain.rules.stock import exceeds_stock, selectable_insumos
from bovino.utils.datetime_tz import parse_local_date, today

logger = logging.getLogger(__name__)

COMPLETED = "Completado"
PENDING = "Pendiente"
DUPLICATE_EVENT = (
    "Ya existe un evento sanitario de este tipo para el animal en la fecha seleccionada"
)
INVALID_SUPPLY_LINE = (
    "Los IDs de insumos y las cantidades deben ser números válidos mayores a 0"
)


class EventoSanitarioForm(LineItemsMixin, EntityForm):
    """Health event, optionally consuming supplies from stock."""

    store_name = "eventos_sanitarios"
    dependencies = ("animales", "tipos_evento", "insumos")
    blank_line = {"insumo_id": "", "cantidad": 1}
    fields = {
        "animal_id": FieldSpec(FieldKind.CHOICE, required="El animal es obligatorio"),
        "tipo_evento_id": FieldSpec(
            FieldKind.CHOICE, required="El tipo de evento es obligatorio"
        ),
        "fecha": FieldSpec(FieldKind.DATE, required="La fecha es requerida", default_factory=today),
        "diagnostico": FieldSpec(),
        "tratamiento": FieldSpec(),
        # Sent as "Completado" / "Pendiente"
        "estado": FieldSpec(FieldKind.BOOLEAN, default=True, send=False),
    }
    error_rules = (
        ErrorRule(("stock",)),
        ErrorRule(("insumo",)),
        ErrorRule(("animal",), "animal_id"),
        ErrorRule(("tipo de evento",), "tipo_evento_id"),
        ErrorRule(("fecha",), "fecha"),
    )

    def initial_values(self) -> dict[str, Any]:
        values = super().initial_values()
        if self.record is not None:
            values["estado"] = self.record.completed
        return values

    def toggle_estado(self) -> None:
        self.set_value("estado", not self.values.get("estado"))

    def options(self) -> dict[str, list[Option]]:
        return {
            "animal_id": [
                Option(str(a.animal_id), a.arete) for a in self.context.animales.active()
            ],
            "tipo_evento_id": [
                Option(str(t.tipo_evento_id), t.nombre)
                for t in self.context.tipos_evento.active()
            ],
            "insumo_id": [
                Option(str(i.insumo_id), f"{i.nombre} - Stock: {i.cantidad}")
                for i in selectable_insumos(self.context.insumos.items)
            ],
        }

    def before_submit(self) -> str | None:
        for line in self.lines:
            if is_empty(line.get("insumo_id")) or is_empty(line.get("cantidad")):
                return "Todos los insumos deben tener insumo y cantidad completos"
            insumo_id = to_number(line["insumo_id"], FieldKind.CHOICE)
            quantity = to_number(line["cantidad"], FieldKind.INTEGER)
            if not insumo_id or not quantity or insumo_id <= 0 or quantity <= 0:
                return INVALID_SUPPLY_LINE
            insumo = self.context.insumos.find(insumo_id)
            if exceeds_stock(insumo, quantity):
                return (
                    f"Stock insuficiente para el insumo {insumo.nombre}. "
                    f"Stock disponible: {insumo.cantidad}"
                )
        return None

    async def verify(self) -> str | None:
        if self.is_editing:
            return None
        result = await self.store.check_duplicate(
            int(self.values["animal_id"]),
            int(self.values["tipo_evento_id"]),
            parse_local_date(self.values["fecha"]),
        )
        if not result.success:
            logger.warning("Skipping duplicate check: %s", result.error)
            return None
        return DUPLICATE_EVENT if result.data else None

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["estado"] = COMPLETED if self.values.get("estado") else PENDING
        payload["insumos"] = [
            {
                "insumo_id": int(to_number(line["insumo_id"], FieldKind.CHOICE)),
                "cantidad": int(to_number(line["cantidad"], FieldKind.INTEGER)),
            }
            for line in self.lines
        ]
        return payload
