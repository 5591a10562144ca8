from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

CENT = Decimal("0.01")


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def purchased_animal_ids(purchases: Iterable[Any]) -> set[int]:
    """Every `animal_id` referenced by any existing purchase line."""
    ids: set[int] = set()
    for purchase in purchases:
        for line in _get(purchase, "detalles") or []:
            animal_id = _get(line, "animal_id")
            if animal_id:
                ids.add(int(animal_id))
    return ids


def is_available_for_purchase(animal: Any, purchased: set[int]) -> bool:
    # Having a recorded parent is taken as "born on the farm"
    born_on_farm = bool(_get(animal, "animal_madre_id") or _get(animal, "animal_padre_id"))
    return (
        not born_on_farm
        and _get(animal, "animal_id") not in purchased
        and _get(animal, "deleted_at") is None
    )


def available_for_purchase(animals: Iterable[Any], purchases: Iterable[Any]) -> list:
    purchased = purchased_animal_ids(purchases)
    return [a for a in animals if is_available_for_purchase(a, purchased)]


def line_amount(line: Any, *, with_quantity: bool) -> Decimal:
    price = to_decimal(_get(line, "precio"))
    if not with_quantity:
        return price
    return price * to_decimal(_get(line, "cantidad"))


def purchase_total(lines: Iterable[Any], *, with_quantity: bool) -> Decimal:
    """Sum of price (animal purchases) or price x quantity (supply purchases)."""
    total = sum((line_amount(line, with_quantity=with_quantity) for line in lines), Decimal("0"))
    return total.quantize(CENT, rounding=ROUND_HALF_UP)
