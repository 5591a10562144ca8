from __future__ import annotations

from datetime import datetime
from typing import ClassVar

from pydantic import BaseModel, ConfigDict

from bovino.interfaces.http.schemas.base import Record


class NotificationSchema(Record):
    id_field: ClassVar[str] = "notificacion_id"

    notificacion_id: int
    usuario_id: int | None = None
    titulo: str = ""
    mensaje: str = ""
    tipo: str | None = None
    modulo: str | None = None
    leida: bool = False
    created_at: datetime | None = None


class PersistedNotifications(BaseModel):
    """Slice of the notification store mirrored to local storage."""

    model_config = ConfigDict(extra="ignore")

    notificaciones: list[NotificationSchema] = []
    notificaciones_no_leidas: int = 0
