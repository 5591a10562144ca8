from __future__ import annotations

import json
from datetime import date, timedelta

from conftest import envelope

from bovino.application.forms.breeding import DiagnosticoForm, PartoForm
from bovino.application.forms.fields import FormState, Option
from bovino.application.forms.health import DUPLICATE_EVENT, EventoSanitarioForm
from bovino.domain.rules.breeding import GESTATION_DAYS
from bovino.utils.datetime_tz import format_local_date, today

ANIMALS = (
    {"animal_id": 10, "arete": "H-10", "sexo": "H"},
    {"animal_id": 11, "arete": "T-11", "sexo": "M"},
)
MONTAS = (
    {
        "monta_id": 1,
        "numero_monta": "M-001",
        "animal_hembra_id": 10,
        "animal_macho_id": 11,
        "estado": True,
    },
    {"monta_id": 2, "numero_monta": "M-002", "animal_hembra_id": 10, "estado": False},
    {"monta_id": 3, "numero_monta": "M-003", "animal_hembra_id": 99, "estado": True},
)


def duplicate_answer(found: bool, seen: list):
    def handler(request):
        seen.append(dict(request.url.params))
        return envelope(None, duplicado=found)

    return handler


async def test_diagnosis_offers_completed_montas_without_a_diagnosis(context, server):
    server.seed("animales", *ANIMALS)
    server.seed("montas", *MONTAS)
    server.seed("diagnosticos", {"prenez_id": 7, "monta_id": 3, "resultado": False})
    form = DiagnosticoForm(context)

    assert await form.mount()
    assert form.options()["monta_id"] == [Option("1", "M-001 - Hembra: H-10 - Macho: T-11")]


async def test_positive_diagnosis_suggests_a_calving_date_and_posts_it(context, server):
    server.seed("montas", *MONTAS)
    form = DiagnosticoForm(context)
    await form.mount()

    form.set_value("monta_id", "1")
    form.set_value("metodo", "Ecografía")
    form.set_value("resultado", True)
    expected = today() + timedelta(days=GESTATION_DAYS)
    assert form.values["fecha_probable_parto"] == expected

    result = await form.submit()

    assert result.success, form.field_errors
    assert json.loads(server.calls("POST", "diagnosticos")[0].content) == {
        "monta_id": 1,
        "metodo": "Ecografía",
        "resultado": True,
        "fecha_probable_parto": format_local_date(expected),
    }


async def test_negative_diagnosis_drops_the_calving_date(context, server):
    form = DiagnosticoForm(context)
    form.set_value("monta_id", "1")
    form.set_value("metodo", "Palpación")
    form.set_value("resultado", True)
    form.set_value("resultado", False)

    result = await form.submit()

    assert result.success
    body = json.loads(server.calls("POST", "diagnosticos")[0].content)
    assert body["resultado"] is False
    assert body["fecha_probable_parto"] is None


async def test_positive_diagnosis_needs_a_future_calving_date(context, server):
    form = DiagnosticoForm(context)
    form.set_value("monta_id", "1")
    form.set_value("metodo", "E")
    form.set_value("resultado", True)
    form.set_value("fecha_probable_parto", today() - timedelta(days=1))

    result = await form.submit()

    assert result.success is False
    assert form.field_errors == {
        "metodo": "El método debe tener al menos 2 caracteres",
        "fecha_probable_parto": "La fecha debe ser hoy o en el futuro",
    }
    assert server.calls("POST", "diagnosticos") == []


async def test_calving_form_lists_positive_diagnoses_and_routes_errors(context, server):
    server.seed("animales", *ANIMALS)
    server.seed("montas", *MONTAS)
    server.seed(
        "diagnosticos",
        {"prenez_id": 5, "monta_id": 1, "resultado": True},
        {"prenez_id": 6, "monta_id": 2, "resultado": False},
    )
    server.seed("types", {"tipo_evento_id": 3, "nombre": "Parto normal"})
    server.route(
        "POST",
        "partos",
        lambda request: envelope(ok=False, status=400, msg="El diagnóstico ya tiene un parto"),
    )
    form = PartoForm(context)

    assert await form.mount()
    assert form.options() == {
        "prenez_id": [Option("5", "M-001 - Hembra: H-10 - Macho: T-11")],
        "tipo_evento_id": [Option("3", "Parto normal")],
    }

    form.set_value("prenez_id", "5")
    form.set_value("tipo_evento_id", "3")
    form.set_value("fecha", date(2024, 10, 20))
    result = await form.submit()

    assert result.success is False
    assert form.field_errors == {"prenez_id": "Diagnóstico no válido"}
    assert json.loads(server.calls("POST", "partos")[0].content) == {
        "prenez_id": 5,
        "tipo_evento_id": 3,
        "fecha": "2024-10-20",
        "descripcion": None,
    }


def fill_health_event(form: EventoSanitarioForm) -> None:
    form.set_value("animal_id", "10")
    form.set_value("tipo_evento_id", "3")
    form.set_value("fecha", date(2024, 3, 15))
    form.set_value("diagnostico", "Parásitos")


async def test_health_event_checks_duplicates_then_posts_supplies(context, server):
    server.seed("insumos", {"insumo_id": 1, "nombre": "Ivermectina", "cantidad": 3})
    seen: list = []
    server.route("GET", "eventos-sanitarios/check/duplicado", duplicate_answer(False, seen))
    form = EventoSanitarioForm(context)
    await form.mount()

    fill_health_event(form)
    form.toggle_estado()
    form.add_line(insumo_id="1", cantidad="2")
    result = await form.submit()

    assert result.success, form.form_error
    assert seen == [{"animal_id": "10", "tipo_evento_id": "3", "fecha": "2024-03-15"}]
    assert json.loads(server.calls("POST", "eventosSanitario")[0].content) == {
        "animal_id": 10,
        "tipo_evento_id": 3,
        "fecha": "2024-03-15",
        "diagnostico": "Parásitos",
        "tratamiento": None,
        "estado": "Pendiente",
        "insumos": [{"insumo_id": 1, "cantidad": 2}],
    }
    assert form.lines == []
    assert form.state is FormState.SUCCESS


async def test_duplicate_health_event_is_not_posted(context, server):
    server.route("GET", "eventos-sanitarios/check/duplicado", duplicate_answer(True, []))
    form = EventoSanitarioForm(context)
    fill_health_event(form)

    result = await form.submit()

    assert result.success is False
    assert form.form_error == DUPLICATE_EVENT
    assert form.state is FormState.EDITING
    assert server.calls("POST", "eventosSanitario") == []


async def test_failed_duplicate_check_does_not_block_the_event(context, server):
    form = EventoSanitarioForm(context)
    fill_health_event(form)

    # No duplicate route: the check answers 404
    result = await form.submit()

    assert result.success
    assert len(server.calls("POST", "eventosSanitario")) == 1


async def test_health_event_refuses_supplies_beyond_stock(context, server):
    server.seed("insumos", {"insumo_id": 1, "nombre": "Ivermectina", "cantidad": 3})
    await context.insumos.fetch_all()
    form = EventoSanitarioForm(context)
    fill_health_event(form)
    form.add_line(insumo_id="1", cantidad=5)

    result = await form.submit()

    assert result.success is False
    assert form.form_error == "Stock insuficiente para el insumo Ivermectina. Stock disponible: 3"
    assert server.calls("GET", "eventos-sanitarios/check/duplicado") == []

    form.update_line(0, insumo_id="abc")
    assert (await form.submit()).success is False
    assert form.form_error == (
        "Los IDs de insumos y las cantidades deben ser números válidos mayores a 0"
    )


async def test_editing_a_health_event_skips_the_duplicate_check(context, server):
    server.seed(
        "eventosSanitario",
        {
            "evento_sanitario_id": 1,
            "animal_id": 10,
            "tipo_evento_id": 3,
            "fecha": "2024-03-15",
            "estado": "Pendiente",
        },
    )
    await context.eventos_sanitarios.fetch_all()
    form = EventoSanitarioForm(context, context.eventos_sanitarios.find(1))
    assert form.values["estado"] is False

    form.toggle_estado()
    result = await form.submit()

    assert result.success
    assert json.loads(server.calls("PUT", "eventosSanitario/1")[0].content)["estado"] == "Completado"
    assert server.calls("GET", "eventos-sanitarios/check/duplicado") == []
    assert context.eventos_sanitarios.find(1).completed
