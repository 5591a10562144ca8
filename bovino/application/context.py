from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from bovino.application.stores.animals import AnimalStore
from bovino.application.stores.areas import LoteStore, MataderoStore, PotreroStore, RazaStore
from bovino.application.stores.breeding import (
    DiagnosticoStore,
    EventoSanitarioStore,
    MontaStore,
    PartoStore,
    TipoEventoStore,
)
from bovino.application.stores.entity_store import EntityStore
from bovino.application.stores.insumos import AlimentacionStore, InsumoStore, TipoInsumoStore
from bovino.application.stores.notification_store import NotificationStore
from bovino.application.stores.production import (
    PesajeStore,
    ProduccionCarneStore,
    ProduccionLecheraStore,
)
from bovino.application.stores.purchases import (
    CompraAnimalStore,
    CompraInsumoStore,
    CompraStore,
    DetalleCompraStore,
    ProveedorStore,
)
from bovino.config.logging import configure_logging
from bovino.config.settings import Settings, get_settings
from bovino.infrastructure.http.api_client import ApiClient
from bovino.infrastructure.push.channel import PushChannel, SocketIOPushChannel
from bovino.infrastructure.push.desktop import DesktopNotifier, LoggingDesktopNotifier
from bovino.infrastructure.storage.local_storage import FileStorage, KeyValueStorage

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Owns the HTTP client and every store; built once at start-up and injected."""

    settings: Settings
    api: ApiClient
    animales: AnimalStore
    alimentaciones: AlimentacionStore
    compras_animales: CompraAnimalStore
    compras_insumo: CompraInsumoStore
    compras: CompraStore
    detalle_compra: DetalleCompraStore
    diagnosticos: DiagnosticoStore
    eventos_sanitarios: EventoSanitarioStore
    insumos: InsumoStore
    lotes: LoteStore
    mataderos: MataderoStore
    montas: MontaStore
    partos: PartoStore
    pesajes: PesajeStore
    potreros: PotreroStore
    produccion_carne: ProduccionCarneStore
    produccion_lechera: ProduccionLecheraStore
    proveedores: ProveedorStore
    razas: RazaStore
    tipos_insumo: TipoInsumoStore
    tipos_evento: TipoEventoStore
    notificaciones: NotificationStore

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        storage: KeyValueStorage | None = None,
        channel: PushChannel | None = None,
        notifier: DesktopNotifier | None = None,
    ) -> AppContext:
        settings = settings or get_settings()
        configure_logging(settings.log_level)
        api = ApiClient(settings, transport=transport)
        storage = storage or FileStorage(settings.storage_dir)
        if channel is not None:
            channel_factory = lambda: channel  # noqa: E731
        else:
            channel_factory = lambda: SocketIOPushChannel(settings)  # noqa: E731
        logger.info(
            "Building application context: env=%s api=%s", settings.environment, settings.api_base_url
        )
        return cls(
            settings=settings,
            api=api,
            animales=AnimalStore(api),
            alimentaciones=AlimentacionStore(api),
            compras_animales=CompraAnimalStore(api),
            compras_insumo=CompraInsumoStore(api),
            compras=CompraStore(api),
            detalle_compra=DetalleCompraStore(api),
            diagnosticos=DiagnosticoStore(api),
            eventos_sanitarios=EventoSanitarioStore(api),
            insumos=InsumoStore(api, low_stock_level=settings.low_stock_level),
            lotes=LoteStore(api),
            mataderos=MataderoStore(api),
            montas=MontaStore(api),
            partos=PartoStore(api),
            pesajes=PesajeStore(api),
            potreros=PotreroStore(api),
            produccion_carne=ProduccionCarneStore(api),
            produccion_lechera=ProduccionLecheraStore(api),
            proveedores=ProveedorStore(api),
            razas=RazaStore(api),
            tipos_insumo=TipoInsumoStore(api),
            tipos_evento=TipoEventoStore(api),
            notificaciones=NotificationStore(
                api,
                storage,
                settings=settings,
                channel_factory=channel_factory,
                notifier=notifier or LoggingDesktopNotifier(),
            ),
        )

    def entity_stores(self) -> list[EntityStore]:
        return [value for value in vars(self).values() if isinstance(value, EntityStore)]

    def reset(self) -> None:
        """Drop every cached collection (e.g. on logout)."""
        for store in self.entity_stores():
            store.reset()

    async def aclose(self) -> None:
        await self.notificaciones.close()
        await self.api.aclose()

    async def __aenter__(self) -> AppContext:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
