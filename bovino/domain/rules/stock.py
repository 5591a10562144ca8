from __future__ import annotations

from typing import Iterable, Protocol


class StockItem(Protocol):
    insumo_id: int
    cantidad: int
    deleted_at: object


def is_selectable(insumo: StockItem) -> bool:
    return insumo.deleted_at is None and insumo.cantidad > 0


def selectable_insumos(insumos: Iterable[StockItem]) -> list:
    """Supplies that can be consumed: not deleted and with stock left.

    Stock is whatever the last fetch returned; it is never decremented locally.
    """
    return [i for i in insumos if is_selectable(i)]


def exceeds_stock(insumo: StockItem | None, requested: int) -> bool:
    return insumo is not None and requested > insumo.cantidad


def low_stock(insumos: Iterable[StockItem], level: int = 10) -> list:
    return [i for i in insumos if i.cantidad <= level]
