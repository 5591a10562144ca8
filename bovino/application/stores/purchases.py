from __future__ import annotations

from decimal import Decimal

from bovino.application.result import Result
from bovino.application.stores.entity_store import EntityStore, T
from bovino.domain.rules.purchases import purchased_animal_ids, purchase_total
from bovino.interfaces.http.schemas.purchases import (
    CompraAnimalSchema,
    CompraInsumoSchema,
    CompraSchema,
    DetalleCompraSchema,
    ProveedorSchema,
)


class _PurchaseStore(EntityStore[T]):
    with_quantity = True

    async def fetch_by_number(self, numero_compra: str) -> Result[T]:
        return await self._query(self._path("numero", numero_compra), parse=self._parse_one)

    def total_of(self, item_id: int) -> Decimal | None:
        purchase = self.find(item_id)
        if purchase is None:
            return None
        return purchase.total if purchase.total is not None else purchase_total(
            purchase.detalles, with_quantity=self.with_quantity
        )


class CompraAnimalStore(_PurchaseStore[CompraAnimalSchema]):
    resource = "comprasAnimales"
    schema = CompraAnimalSchema
    label = "compras de animales"
    with_quantity = False

    def purchased_animal_ids(self) -> set[int]:
        return purchased_animal_ids(self.items)


class CompraInsumoStore(_PurchaseStore[CompraInsumoSchema]):
    resource = "comprasInsumo"
    schema = CompraInsumoSchema
    label = "compras de insumos"


class CompraStore(_PurchaseStore[CompraSchema]):
    resource = "compras"
    schema = CompraSchema
    label = "compras"


class DetalleCompraStore(EntityStore[DetalleCompraSchema]):
    resource = "detalleCompra"
    schema = DetalleCompraSchema
    label = "detalles de compra"

    async def fetch_by_purchase(self, compra_id: int) -> Result[list[DetalleCompraSchema]]:
        return await self._query(self._path("compra", compra_id), parse=self._parse_list)

    def for_purchase(self, compra_id: int) -> list[DetalleCompraSchema]:
        return [d for d in self.items if d.compra_id == compra_id]


class ProveedorStore(EntityStore[ProveedorSchema]):
    resource = "proveedores"
    schema = ProveedorSchema
    label = "proveedores"
