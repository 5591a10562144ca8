from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from bovino.application.errors import AppError, InvalidResponse
from bovino.application.result import Result
from bovino.config.settings import Settings
from bovino.infrastructure.http.api_client import ApiClient
from bovino.infrastructure.push.channel import PushChannel
from bovino.infrastructure.push.desktop import DesktopNotifier, Permission
from bovino.infrastructure.storage.local_storage import KeyValueStorage, read_state, write_state
from bovino.interfaces.http.schemas.notifications import (
    NotificationSchema,
    PersistedNotifications,
)

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[], PushChannel]


class NotificationStore:
    """Per-user notification feed kept in sync by fetch and by the push channel.

    Only `notificaciones` and `notificaciones_no_leidas` are mirrored to local
    storage; they are rewritten on every change and read back on construction.
    Read/clear mutations are applied locally first and are not rolled back
    when the request fails.
    """

    def __init__(
        self,
        api: ApiClient,
        storage: KeyValueStorage,
        *,
        settings: Settings,
        channel_factory: ChannelFactory | None = None,
        notifier: DesktopNotifier | None = None,
    ) -> None:
        self.api = api
        self.storage = storage
        self.settings = settings
        self.channel_factory = channel_factory
        self.notifier = notifier
        self.channel: PushChannel | None = None
        self.notificaciones: list[NotificationSchema] = []
        self.notificaciones_no_leidas = 0
        self.loading = False
        self.error: str | None = None
        self._rehydrate()

    # -- persistence -------------------------------------------------------

    def _rehydrate(self) -> None:
        state = read_state(self.storage, self.settings.notifications_storage_key)
        if state is None:
            return
        try:
            persisted = PersistedNotifications.model_validate(state)
        except PydanticValidationError:
            logger.warning("Discarding persisted notifications with unexpected shape")
            return
        self.notificaciones = persisted.notificaciones
        self.notificaciones_no_leidas = persisted.notificaciones_no_leidas
        logger.debug("Rehydrated %s notifications", len(self.notificaciones))

    def _persist(self) -> None:
        snapshot = PersistedNotifications(
            notificaciones=self.notificaciones,
            notificaciones_no_leidas=self.notificaciones_no_leidas,
        )
        try:
            write_state(
                self.storage, self.settings.notifications_storage_key, snapshot.model_dump_json()
            )
        except OSError as e:
            logger.warning("Could not persist notifications: %s", e)

    def _count_unread(self) -> int:
        return sum(1 for n in self.notificaciones if not n.leida)

    def _replace(self, items: list[NotificationSchema], unread: int | None = None) -> None:
        self.notificaciones = items
        self.notificaciones_no_leidas = self._count_unread() if unread is None else unread
        self._persist()

    # -- fetch -------------------------------------------------------------

    async def fetch_all(self, user_id: int | None) -> Result[list[NotificationSchema]]:
        if not user_id:
            return Result.fail("Usuario no identificado")
        if self.loading:
            return Result.ok(self.notificaciones)

        self.loading = True
        self.error = None
        try:
            envelope = await self.api.get(f"notificaciones/usuario/{user_id}")
            items = self._parse_list(envelope.data)
        except AppError as exc:
            self.error = exc.message or "Error al cargar notificaciones"
            logger.warning("Notification fetch failed: user=%s error=%s", user_id, exc.message)
            return Result.from_error(exc)
        finally:
            self.loading = False

        unread = envelope.extra("noLeidas")
        self._replace(items, int(unread) if unread is not None else None)
        logger.debug("Fetched %s notifications for user=%s", len(items), user_id)

        await self._open_channel(user_id)
        await self._request_permission()
        return Result.ok(self.notificaciones)

    async def force_reload(self, user_id: int | None) -> Result[list[NotificationSchema]]:
        self.loading = False
        return await self.fetch_all(user_id)

    @staticmethod
    def _parse_list(data: Any) -> list[NotificationSchema]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise InvalidResponse("Respuesta inválida del servidor para notificaciones")
        try:
            return [NotificationSchema.model_validate(row) for row in data]
        except PydanticValidationError as exc:
            raise InvalidResponse(
                "Respuesta inválida del servidor para notificaciones",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    # -- push --------------------------------------------------------------

    async def _open_channel(self, user_id: int) -> None:
        if not self.settings.push_enabled or self.channel_factory is None:
            return
        if self.channel is not None and self.channel.user_id == user_id:
            return
        if self.channel is None:
            self.channel = self.channel_factory()
        try:
            await self.channel.open(user_id, self.receive)
        except AppError as exc:
            logger.warning("Push channel unavailable: user=%s error=%s", user_id, exc.message)

    async def _request_permission(self) -> None:
        if self.notifier is None or self.notifier.permission is not Permission.DEFAULT:
            return
        permission = await self.notifier.request_permission()
        logger.info("Desktop notification permission: %s", permission.value)

    def receive(self, payload: dict[str, Any]) -> NotificationSchema | None:
        """Merge one pushed notification into the feed."""
        try:
            notification = NotificationSchema.model_validate(payload)
        except PydanticValidationError:
            logger.warning("Ignoring malformed pushed notification")
            return None
        self._replace([notification, *self.notificaciones])
        logger.info("Notification received: id=%s", notification.notificacion_id)
        if self.notifier is not None and self.notifier.permission is Permission.GRANTED:
            self.notifier.show(notification.titulo, notification.mensaje)
        return notification

    # -- mutations ---------------------------------------------------------

    async def mark_read(self, notificacion_id: int) -> Result[None]:
        self._replace(
            [
                n.model_copy(update={"leida": True}) if n.notificacion_id == notificacion_id else n
                for n in self.notificaciones
            ]
        )
        try:
            await self.api.put(f"notificaciones/{notificacion_id}/leer")
        except AppError as exc:
            logger.warning(
                "Mark read failed: id=%s error=%s (local state kept)", notificacion_id, exc.message
            )
            return Result.from_error(exc)
        return Result.ok()

    async def mark_all_read(self, user_id: int) -> Result[None]:
        self._replace([n.model_copy(update={"leida": True}) for n in self.notificaciones], 0)
        try:
            await self.api.put(f"notificaciones/usuario/{user_id}/leer-todas")
        except AppError as exc:
            logger.warning(
                "Mark all read failed: user=%s error=%s (local state kept)", user_id, exc.message
            )
            return Result.from_error(exc)
        return Result.ok()

    async def clear_read(self, user_id: int) -> Result[int]:
        try:
            envelope = await self.api.delete(f"notificaciones/usuario/{user_id}/limpiar")
        except AppError as exc:
            self.error = exc.message
            logger.warning("Clearing read notifications failed: user=%s", user_id)
            return Result.from_error(exc)
        self._replace([n for n in self.notificaciones if not n.leida])
        removed = envelope.extra("eliminadas", 0)
        logger.info("Cleared %s read notifications for user=%s", removed, user_id)
        return Result.ok(int(removed or 0))

    def clear_error(self) -> None:
        self.error = None

    async def close(self) -> None:
        if self.channel is not None:
            await self.channel.close()
            self.channel = None
