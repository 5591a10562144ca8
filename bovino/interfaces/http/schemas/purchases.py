from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from bovino.interfaces.http.schemas.base import Record


class PurchaseLine(BaseModel):
    """Detail row of a purchase (`detalles`)."""

    model_config = ConfigDict(extra="allow")

    detalle_id: int | None = None
    animal_id: int | None = None
    insumo_id: int | None = None
    cantidad: int | None = None
    precio: Decimal = Decimal("0")
    observaciones: str | None = None


class PurchaseSchema(Record):
    numero_compra: str | None = None
    proveedor_id: int | None = None
    fecha: date | None = None
    detalles: list[PurchaseLine] = []
    total: Decimal | None = None


class CompraAnimalSchema(PurchaseSchema):
    id_field: ClassVar[str] = "compra_animal_id"

    compra_animal_id: int


class CompraInsumoSchema(PurchaseSchema):
    id_field: ClassVar[str] = "compra_insumo_id"

    compra_insumo_id: int


class CompraSchema(PurchaseSchema):
    id_field: ClassVar[str] = "compra_id"

    compra_id: int


class DetalleCompraSchema(Record):
    id_field: ClassVar[str] = "detalle_id"

    detalle_id: int
    compra_id: int | None = None
    insumo_id: int | None = None
    animal_id: int | None = None
    cantidad: int | None = None
    precio: Decimal = Decimal("0")


class ProveedorSchema(Record):
    model_config = ConfigDict(extra="allow", from_attributes=True, populate_by_name=True)
    id_field: ClassVar[str] = "proveedor_id"

    proveedor_id: int
    nombre_compania: str = Field("", alias="nombre_compañia")
    nombre_contacto: str | None = None
    telefono_local: str | None = None
