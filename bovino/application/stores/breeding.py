from __future__ import annotations

import logging
from datetime import date

from bovino.application.errors import AppError
from bovino.application.result import Result
from bovino.application.stores.entity_store import EntityStore
from bovino.domain.rules.type_tree import parent_type_candidates
from bovino.interfaces.http.schemas.breeding import (
    DiagnosticoSchema,
    EventoSanitarioSchema,
    MontaSchema,
    PartoSchema,
    TipoEventoSchema,
)
from bovino.utils.datetime_tz import format_local_date

logger = logging.getLogger(__name__)


class MontaStore(EntityStore[MontaSchema]):
    resource = "montas"
    schema = MontaSchema
    label = "montas"

    def pending(self) -> list[MontaSchema]:
        return [m for m in self.items if not m.estado]


class DiagnosticoStore(EntityStore[DiagnosticoSchema]):
    resource = "diagnosticos"
    schema = DiagnosticoSchema
    label = "diagnósticos"


class PartoStore(EntityStore[PartoSchema]):
    resource = "partos"
    schema = PartoSchema
    label = "partos"


class EventoSanitarioStore(EntityStore[EventoSanitarioSchema]):
    resource = "eventosSanitario"
    schema = EventoSanitarioSchema
    label = "eventos sanitarios"

    async def fetch_by_animal(self, animal_id: int) -> Result[list[EventoSanitarioSchema]]:
        return await self._query(self._path("animal", animal_id), parse=self._parse_list)

    async def check_duplicate(
        self, animal_id: int, tipo_evento_id: int, fecha: date
    ) -> Result[bool]:
        try:
            envelope = await self.api.get(
                "eventos-sanitarios/check/duplicado",
                params={
                    "animal_id": animal_id,
                    "tipo_evento_id": tipo_evento_id,
                    "fecha": format_local_date(fecha),
                },
            )
        except AppError as exc:
            logger.warning("Duplicate check failed: %s", exc.message)
            return Result.from_error(exc)
        return Result.ok(bool(envelope.extra("duplicado", False)))


class TipoEventoStore(EntityStore[TipoEventoSchema]):
    resource = "types"
    schema = TipoEventoSchema
    label = "tipos de evento"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.parent_types: list[TipoEventoSchema] = []

    async def fetch_parents(self) -> Result[list[TipoEventoSchema]]:
        result = await self._query(self._path("padres"), parse=self._parse_list)
        if result.success:
            self.parent_types = result.data
        return result

    def parent_candidates(self, editing_id: int | None = None) -> list[TipoEventoSchema]:
        source = self.parent_types or self.items
        return parent_type_candidates(source, editing_id)

    def reset(self) -> None:
        super().reset()
        self.parent_types = []
