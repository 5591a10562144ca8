from __future__ import annotations

from datetime import date
from decimal import Decimal

from bovino.application.result import Result
from bovino.application.stores.entity_store import EntityStore
from bovino.application.stores.insumos import parse_units
from bovino.interfaces.http.schemas.areas import MataderoSchema
from bovino.interfaces.http.schemas.base import Unidad
from bovino.interfaces.http.schemas.production import (
    PesajeSchema,
    ProduccionCarneSchema,
    ProduccionLecheraSchema,
)
from bovino.utils.datetime_tz import format_local_date


class PesajeStore(EntityStore[PesajeSchema]):
    resource = "pesajes"
    schema = PesajeSchema
    label = "pesajes"

    async def fetch_by_animal(self, animal_id: int) -> Result[list[PesajeSchema]]:
        return await self._query(self._path("animal", animal_id), parse=self._parse_list)

    async def search(
        self, query: str = "", *, fecha_inicio: date | None = None, fecha_fin: date | None = None
    ) -> Result[list[PesajeSchema]]:
        params = {
            "query": query or None,
            "fecha_inicio": format_local_date(fecha_inicio),
            "fecha_fin": format_local_date(fecha_fin),
        }
        return await self._query(
            self._path("search", "buscar"), params=params, parse=self._parse_list
        )

    async def fetch_units(self) -> Result[list[Unidad]]:
        return await self._query(self._path("unidades", "list"), parse=parse_units)

    def by_animal(self, animal_id: int) -> list[PesajeSchema]:
        return [p for p in self.items if p.animal_id == animal_id]

    def by_date(self, fecha: date) -> list[PesajeSchema]:
        return [p for p in self.items if p.fecha == fecha]

    def by_date_range(self, start: date, end: date) -> list[PesajeSchema]:
        return [p for p in self.items if p.fecha is not None and start <= p.fecha <= end]

    def latest_for_animal(self, animal_id: int) -> PesajeSchema | None:
        dated = [p for p in self.by_animal(animal_id) if p.fecha is not None]
        return max(dated, key=lambda p: p.fecha, default=None)

    def weight_history(self, animal_id: int) -> list[dict]:
        dated = sorted(
            (p for p in self.by_animal(animal_id) if p.fecha is not None), key=lambda p: p.fecha
        )
        return [
            {"fecha": p.fecha, "peso": p.peso, "unidad": (p.related("unidad") or {}).get("nombre")}
            for p in dated
        ]

    def recent(self, limit: int = 10) -> list[PesajeSchema]:
        dated = sorted(
            (p for p in self.items if p.fecha is not None), key=lambda p: p.fecha, reverse=True
        )
        return dated[:limit]

    def statistics(self) -> dict:
        if not self.items:
            return {
                "total_pesajes": 0,
                "promedio_peso": Decimal("0"),
                "peso_maximo": Decimal("0"),
                "peso_minimo": Decimal("0"),
                "animales_unicos": 0,
            }
        weights = [p.peso for p in self.items]
        return {
            "total_pesajes": len(weights),
            "promedio_peso": sum(weights, Decimal("0")) / len(weights),
            "peso_maximo": max(weights),
            "peso_minimo": min(weights),
            "animales_unicos": len({p.animal_id for p in self.items}),
        }


class ProduccionLecheraStore(EntityStore[ProduccionLecheraSchema]):
    resource = "produccionLechera"
    schema = ProduccionLecheraSchema
    label = "producciones lecheras"

    async def fetch_units(self) -> Result[list[Unidad]]:
        return await self._query(self._path("unidades", "list"), parse=parse_units)


class ProduccionCarneStore(EntityStore[ProduccionCarneSchema]):
    resource = "produccionCarne"
    schema = ProduccionCarneSchema
    label = "producciones de carne"

    async def fetch_units(self) -> Result[list[Unidad]]:
        return await self._query(self._path("unidades", "list"), parse=parse_units)

    async def fetch_mataderos(self) -> Result[list[MataderoSchema]]:
        return await self._query(
            self._path("mataderos", "list"),
            parse=lambda data: [MataderoSchema.model_validate(row) for row in data or []],
        )
