from __future__ import annotations

from decimal import Decimal

from bovino.domain.rules.purchases import (
    available_for_purchase,
    purchase_total,
    purchased_animal_ids,
)
from bovino.domain.rules.stock import exceeds_stock, low_stock, selectable_insumos
from bovino.interfaces.http.schemas.animals import AnimalSchema
from bovino.interfaces.http.schemas.insumos import InsumoSchema
from bovino.interfaces.http.schemas.purchases import CompraAnimalSchema


def insumo(insumo_id: int, cantidad: int, **extra) -> InsumoSchema:
    return InsumoSchema.model_validate(
        {"insumo_id": insumo_id, "nombre": f"Insumo {insumo_id}", "cantidad": cantidad, **extra}
    )


def test_zero_stock_and_deleted_insumos_are_not_selectable():
    items = [
        insumo(1, 0),
        insumo(2, 5),
        insumo(3, 8, deleted_at="2024-01-01T00:00:00Z"),
    ]
    assert [i.insumo_id for i in selectable_insumos(items)] == [2]


def test_exceeds_stock_compares_against_last_fetched_quantity():
    item = insumo(1, 5)
    assert exceeds_stock(item, 6) is True
    assert exceeds_stock(item, 5) is False
    assert exceeds_stock(None, 100) is False


def test_low_stock_uses_inclusive_level():
    items = [insumo(1, 10), insumo(2, 11), insumo(3, 0)]
    assert [i.insumo_id for i in low_stock(items, 10)] == [1, 3]


def test_animals_with_parents_or_already_purchased_are_not_available():
    animals = [
        AnimalSchema(animal_id=1, arete="A-1"),
        AnimalSchema(animal_id=2, arete="A-2", animal_madre_id=9),
        AnimalSchema(animal_id=3, arete="A-3"),
        AnimalSchema(animal_id=4, arete="A-4", animal_padre_id=8),
    ]
    purchases = [
        CompraAnimalSchema.model_validate(
            {"compra_animal_id": 1, "detalles": [{"animal_id": 3, "precio": "100.00"}]}
        )
    ]
    assert purchased_animal_ids(purchases) == {3}
    assert [a.animal_id for a in available_for_purchase(animals, purchases)] == [1]


def test_supply_purchase_total_multiplies_price_by_quantity():
    lines = [
        {"insumo_id": 1, "cantidad": 2, "precio": "10.50"},
        {"insumo_id": 2, "cantidad": 1, "precio": "80"},
    ]
    assert purchase_total(lines, with_quantity=True) == Decimal("101.00")


def test_animal_purchase_total_sums_prices_only():
    lines = [{"animal_id": 1, "precio": "250.10"}, {"animal_id": 2, "precio": 49.9}]
    assert purchase_total(lines, with_quantity=False) == Decimal("300.00")


def test_purchase_total_treats_blank_prices_as_zero():
    assert purchase_total([{"precio": ""}, {"precio": None}], with_quantity=False) == Decimal("0.00")
