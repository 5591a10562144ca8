from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, ClassVar

from bovino.application.forms.animals import animal_label
from bovino.application.forms.base import EntityForm
from bovino.application.forms.error_routing import ErrorRule
from bovino.application.forms.fields import FieldKind, FieldSpec, Option, is_empty, to_number
from bovino.application.forms.lines import LineItemsMixin
from bovino.domain.rules.purchases import available_for_purchase, purchase_total, to_decimal
from bovino.interfaces.http.schemas.animals import AnimalSchema
from bovino.utils.datetime_tz import today


def supplier_options(context) -> list[Option]:
    return [Option(str(p.proveedor_id), p.nombre_compania) for p in context.proveedores.active()]


class PurchaseForm(LineItemsMixin, EntityForm, ABC):
    """Purchase header plus editable detail lines."""

    with_quantity: ClassVar[bool] = True
    fields = {
        "proveedor_id": FieldSpec(FieldKind.CHOICE, required="El proveedor es obligatorio"),
        "fecha": FieldSpec(FieldKind.DATE, required="La fecha es requerida", default_factory=today),
    }

    @property
    def total(self) -> Decimal:
        return purchase_total(self.lines, with_quantity=self.with_quantity)

    @abstractmethod
    def line_payload(self, line: dict[str, Any]) -> dict[str, Any]:
        """Wire form of one detail line."""

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["detalles"] = [self.line_payload(line) for line in self.lines]
        return payload


class CompraAnimalForm(PurchaseForm):
    store_name = "compras_animales"
    dependencies = ("proveedores", "animales", "compras_animales")
    with_quantity = False
    blank_line = {"animal_id": "", "precio": "", "observaciones": ""}

    def available_animals(self) -> list[AnimalSchema]:
        """Animals never bought before and not born on the farm."""
        return available_for_purchase(
            self.context.animales.items, self.context.compras_animales.items
        )

    def options(self) -> dict[str, list[Option]]:
        return {
            "proveedor_id": supplier_options(self.context),
            "animal_id": [
                Option(str(a.animal_id), animal_label(a)) for a in self.available_animals()
            ],
        }

    def before_submit(self) -> str | None:
        if not self.lines:
            return "Debe agregar al menos un animal a la compra"
        available = {str(a.animal_id) for a in self.available_animals()}
        for line in self.lines:
            if is_empty(line.get("animal_id")) or is_empty(line.get("precio")):
                return "Todos los animales deben tener animal y precio completos"
            if to_decimal(line["precio"]) <= 0:
                return "El precio debe ser mayor a 0"
            if str(line["animal_id"]) not in available:
                return "El animal seleccionado ya no está disponible para compra."
        return None

    def line_payload(self, line: dict[str, Any]) -> dict[str, Any]:
        observaciones = line.get("observaciones")
        return {
            "animal_id": int(line["animal_id"]),
            "precio": to_decimal(line["precio"]),
            "observaciones": observaciones.strip() if observaciones else None,
        }


class CompraInsumoForm(PurchaseForm):
    store_name = "compras_insumo"
    dependencies = ("proveedores", "insumos")
    with_quantity = True
    blank_line = {"insumo_id": "", "cantidad": 1, "precio": ""}

    def options(self) -> dict[str, list[Option]]:
        return {
            "proveedor_id": supplier_options(self.context),
            "insumo_id": [
                Option(
                    str(i.insumo_id),
                    f"{i.nombre} ({i.unit_name})" if i.unit_name else i.nombre,
                )
                for i in self.context.insumos.active()
            ],
        }

    def before_submit(self) -> str | None:
        if not self.lines:
            return "Debe agregar al menos un insumo a la compra"
        for line in self.lines:
            if any(is_empty(line.get(key)) for key in ("insumo_id", "cantidad", "precio")):
                return "Todos los insumos deben tener insumo, cantidad y precio completos"
            quantity = to_number(line["cantidad"], FieldKind.INTEGER)
            if quantity is None or quantity <= 0 or to_decimal(line["precio"]) <= 0:
                return "La cantidad y el precio deben ser mayores a 0"
        return None

    def line_payload(self, line: dict[str, Any]) -> dict[str, Any]:
        return {
            "insumo_id": int(line["insumo_id"]),
            "cantidad": int(to_number(line["cantidad"], FieldKind.INTEGER)),
            "precio": to_decimal(line["precio"]),
        }


class ProveedorForm(EntityForm):
    store_name = "proveedores"
    managed_label = "proveedores"
    fields = {
        "nombre_compañia": FieldSpec(
            required="El nombre de la compañía es requerido",
            min_length=(2, "El nombre debe tener al menos 2 caracteres"),
            max_length=(255, "El nombre no puede tener más de 255 caracteres"),
        ),
        "nombre_contacto": FieldSpec(
            required="El nombre del contacto es requerido",
            min_length=(2, "El nombre debe tener al menos 2 caracteres"),
            max_length=(255, "El nombre no puede tener más de 255 caracteres"),
        ),
        "telefono_local": FieldSpec(
            required="El teléfono es requerido",
            pattern=(r"[0-9]{8}", "El teléfono debe tener exactamente 8 dígitos"),
        ),
    }
    error_rules = (
        ErrorRule(
            ("compañía", "compañia", "existe"),
            "nombre_compañia",
            "Ya existe un proveedor con este nombre. Por favor, use un nombre diferente.",
        ),
        ErrorRule(
            ("teléfono", "telefono", "8 dígitos"),
            "telefono_local",
            "El teléfono debe tener exactamente 8 dígitos numéricos.",
        ),
    )
