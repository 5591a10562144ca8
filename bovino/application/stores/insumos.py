from __future__ import annotations

from typing import Literal

from bovino.application.result import Result
from bovino.application.stores.entity_store import EntityStore
from bovino.domain.rules import stock
from bovino.interfaces.http.schemas.base import Unidad
from bovino.interfaces.http.schemas.insumos import (
    AlimentacionSchema,
    InsumoSchema,
    TipoInsumoSchema,
)


def parse_units(data: object) -> list[Unidad]:
    return [Unidad.model_validate(row) for row in data or []]


class InsumoStore(EntityStore[InsumoSchema]):
    resource = "insumos"
    schema = InsumoSchema
    label = "insumos"
    multipart = True
    nullable_fields = ("tipo_insumo_id", "unidad_id")

    def __init__(self, *args, low_stock_level: int = 10, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.low_stock_level = low_stock_level

    async def update_quantity(
        self, insumo_id: int, cantidad: int, operacion: Literal["sumar", "restar"]
    ) -> Result[InsumoSchema]:
        """Add to or subtract from the stock. Sent as JSON even though the store is multipart."""
        return await self._mutate(
            "PUT",
            self._path(insumo_id, "cantidad"),
            {"cantidad": cantidad, "operacion": operacion},
            as_json=True,
        )

    async def fetch_units(self) -> Result[list[Unidad]]:
        return await self._query(self._path("unidades"), parse=parse_units)

    def by_type(self, tipo_insumo_id: int) -> list[InsumoSchema]:
        return [i for i in self.items if i.tipo_insumo_id == tipo_insumo_id]

    def low_stock(self, level: int | None = None) -> list[InsumoSchema]:
        return stock.low_stock(self.items, self.low_stock_level if level is None else level)

    def by_name(self, nombre: str) -> InsumoSchema | None:
        wanted = nombre.lower()
        return next((i for i in self.items if i.nombre.lower() == wanted), None)


class TipoInsumoStore(EntityStore[TipoInsumoSchema]):
    resource = "tipoInsumo"
    schema = TipoInsumoSchema
    label = "tipos de insumo"


class AlimentacionStore(EntityStore[AlimentacionSchema]):
    resource = "alimentaciones"
    schema = AlimentacionSchema
    label = "alimentaciones"

    async def fetch_by_animal(self, animal_id: int) -> Result[list[AlimentacionSchema]]:
        return await self._query(self._path("animal", animal_id), parse=self._parse_list)

    async def fetch_by_insumo(self, insumo_id: int) -> Result[list[AlimentacionSchema]]:
        return await self._query(self._path("insumo", insumo_id), parse=self._parse_list)
