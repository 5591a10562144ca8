from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class DesktopNotifier(Protocol):
    permission: Permission

    async def request_permission(self) -> Permission: ...

    def show(self, title: str, body: str) -> None: ...


class LoggingDesktopNotifier:
    """Notifier that only logs; grants permission when asked."""

    def __init__(self, permission: Permission = Permission.DEFAULT) -> None:
        self.permission = permission

    async def request_permission(self) -> Permission:
        if self.permission is Permission.DEFAULT:
            self.permission = Permission.GRANTED
        return self.permission

    def show(self, title: str, body: str) -> None:  # pragma: no cover - side effect only
        logger.info("Desktop notification (logging provider): title=%s body_len=%s", title, len(body))
