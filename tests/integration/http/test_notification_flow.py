from __future__ import annotations

import json

from conftest import envelope

from bovino.infrastructure.push.desktop import Permission

FEED = [
    {"notificacion_id": 1, "usuario_id": 7, "titulo": "Stock bajo", "mensaje": "Sal", "leida": False},
    {"notificacion_id": 2, "usuario_id": 7, "titulo": "Parto", "mensaje": "Luna", "leida": True},
]


async def test_feed_push_and_read_flow(context, server, channel, notifier, storage):
    server.route(
        "GET", "notificaciones/usuario/7", lambda request: envelope(FEED, noLeidas=1)
    )
    server.route("PUT", "notificaciones/3/leer", lambda request: envelope(None))
    store = context.notificaciones

    result = await store.fetch_all(7)

    assert result.success
    assert store.notificaciones_no_leidas == 1
    assert channel.opened == [7]
    assert notifier.permission is Permission.GRANTED

    channel.push(
        {"notificacion_id": 3, "usuario_id": 7, "titulo": "Monta", "mensaje": "Pendiente"}
    )

    assert [n.notificacion_id for n in store.notificaciones] == [3, 1, 2]
    assert store.notificaciones_no_leidas == 2
    assert notifier.shown == [("Monta", "Pendiente")]

    await store.mark_read(3)

    assert store.notificaciones_no_leidas == 1
    assert len(server.calls("PUT", "notificaciones/3/leer")) == 1
    saved = json.loads(storage.get_item("notificaciones-storage"))
    assert set(saved["state"]) == {"notificaciones", "notificaciones_no_leidas"}
    assert saved["state"]["notificaciones_no_leidas"] == 1


async def test_clear_read_keeps_unread_items(context, server):
    server.route(
        "GET", "notificaciones/usuario/7", lambda request: envelope(FEED, noLeidas=1)
    )
    server.route(
        "DELETE",
        "notificaciones/usuario/7/limpiar",
        lambda request: envelope(None, eliminadas=1),
    )
    store = context.notificaciones
    await store.fetch_all(7)

    result = await store.clear_read(7)

    assert result.data == 1
    assert [n.notificacion_id for n in store.notificaciones] == [1]


async def test_failed_fetch_sets_error_and_skips_channel(context, server, channel):
    server.route(
        "GET",
        "notificaciones/usuario/7",
        lambda request: envelope(ok=False, status=500, msg="Error interno"),
    )

    result = await context.notificaciones.fetch_all(7)

    assert result.success is False
    assert context.notificaciones.error == "Error interno"
    assert channel.opened == []


async def test_closing_the_store_closes_the_channel(context, server, channel):
    server.route("GET", "notificaciones/usuario/7", lambda request: envelope([]))
    await context.notificaciones.fetch_all(7)

    await context.notificaciones.close()

    assert channel.closed is True
    assert context.notificaciones.channel is None
