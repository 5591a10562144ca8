from __future__ import annotations

from bovino.application.result import Result
from bovino.application.stores.entity_store import EntityStore
from bovino.interfaces.http.schemas.areas import (
    LoteSchema,
    MataderoSchema,
    PotreroSchema,
    RazaSchema,
)


class LoteStore(EntityStore[LoteSchema]):
    resource = "lotes"
    schema = LoteSchema
    label = "lotes"

    async def fetch_without_pasture(self) -> Result[list[LoteSchema]]:
        return await self._query(self._path("sin-potrero"), parse=self._parse_list)


class PotreroStore(EntityStore[PotreroSchema]):
    resource = "potreros"
    schema = PotreroSchema
    label = "potreros"


class RazaStore(EntityStore[RazaSchema]):
    resource = "razas"
    schema = RazaSchema
    label = "razas"


class MataderoStore(EntityStore[MataderoSchema]):
    resource = "mataderos"
    schema = MataderoSchema
    label = "mataderos"
