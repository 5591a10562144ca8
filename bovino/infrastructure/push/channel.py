from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Protocol

import socketio
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from bovino.application.errors import NetworkError
from bovino.config.settings import Settings

logger = logging.getLogger(__name__)

NotificationHandler = Callable[[dict[str, Any]], Awaitable[None] | None]


class PushChannel(Protocol):
    user_id: int | None

    async def open(self, user_id: int, on_notification: NotificationHandler) -> None: ...

    async def close(self) -> None: ...


class SocketIOPushChannel:
    """Persistent Socket.IO connection registered to one user id."""

    def __init__(self, settings: Settings, client: socketio.AsyncClient | None = None) -> None:
        self.settings = settings
        self.client = client or socketio.AsyncClient(reconnection=True)
        self.user_id: int | None = None
        self._handler: NotificationHandler | None = None
        self.client.on(settings.push_notification_event, self._dispatch)
        self.client.on("connect", self._on_connect)

    async def open(self, user_id: int, on_notification: NotificationHandler) -> None:
        self._handler = on_notification
        if self.client.connected:
            self.user_id = user_id
            await self._register()
            return
        cookies = self.settings.session_cookies()
        headers = (
            {"Cookie": "; ".join(f"{k}={v}" for k, v in cookies.items())} if cookies else {}
        )
        try:
            await self.client.connect(self.settings.push_url, headers=headers)
        except SocketIOConnectionError as exc:
            raise NetworkError(f"No se pudo conectar al canal de notificaciones: {exc}") from exc
        # Bound only after a successful connect
        self.user_id = user_id
        await self._register()
        logger.info("Push channel connected: user=%s url=%s", user_id, self.settings.push_url)

    async def _on_connect(self) -> None:
        # Re-register after reconnects
        if self.user_id is not None:
            await self._register()

    async def _register(self) -> None:
        await self.client.emit(self.settings.push_register_event, self.user_id)

    async def _dispatch(self, payload: dict[str, Any]) -> None:
        if self._handler is None:
            return
        outcome = self._handler(payload)
        if inspect.isawaitable(outcome):
            await outcome

    async def close(self) -> None:
        if self.client.connected:
            await self.client.disconnect()
        logger.info("Push channel closed: user=%s", self.user_id)
        self.user_id = None
        self._handler = None
