from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    api_base_url: str = "http://localhost:3000/api"
    request_timeout_seconds: float = 15.0
    log_level: str = "INFO"
    environment: str = "dev"
    # Session cookie issued by the API login flow (forwarded on every request)
    session_cookie_name: str = "token"
    session_token: SecretStr | None = None
    # Durable local storage (browser localStorage counterpart)
    storage_dir: Path = Path(".bovino")
    notifications_storage_key: str = "notificaciones-storage"
    # Push channel (Socket.IO)
    push_enabled: bool = True
    push_register_event: str = "registrar-usuario"
    push_notification_event: str = "nueva-notificacion"
    # Derived queries
    low_stock_level: int = 10

    model_config = SettingsConfigDict(
        env_prefix="BOVINO_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def push_url(self) -> str:
        """API origin without the trailing `/api` segment."""
        parts = urlsplit(self.api_base_url)
        path = parts.path
        if path.endswith("/api"):
            path = path[: -len("/api")]
        return urlunsplit((parts.scheme, parts.netloc, path, "", ""))

    def session_cookies(self) -> dict[str, str]:
        if self.session_token is None:
            return {}
        return {self.session_cookie_name: self.session_token.get_secret_value()}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
