from __future__ import annotations

import json
from datetime import date, timedelta
from decimal import Decimal

import pytest
from conftest import envelope, parse_multipart

from bovino.application.forms.animals import FATHER_TOO_YOUNG, AnimalForm
from bovino.application.forms.areas import RazaForm
from bovino.application.forms.base import LOAD_ERROR_MESSAGE
from bovino.application.forms.breeding import MontaForm
from bovino.application.forms.error_routing import PERMISSION_BANNER
from bovino.application.forms.fields import FormState, Option
from bovino.application.forms.insumos import AlimentacionForm
from bovino.application.forms.purchases import CompraAnimalForm, CompraInsumoForm, PurchaseForm
from bovino.infrastructure.http.multipart import ImageUpload
from bovino.utils.datetime_tz import format_local_date, today

PROVEEDOR = {
    "proveedor_id": 1,
    "nombre_compañia": "AgroSur",
    "nombre_contacto": "Ana",
    "telefono_local": "22223333",
}


def years_ago(years: int) -> str:
    return format_local_date(today() - timedelta(days=365 * years + 30))


async def test_animal_form_posts_multipart_and_clears_hidden_parents(context, server):
    server.seed("lotes", {"lote_id": 1, "codigo": "L-1", "descripcion": "Engorde"})
    server.seed("razas", {"raza_id": 2, "nombre": "Brahman"})
    form = AnimalForm(context)

    assert await form.mount()
    assert form.options()["lote_id"] == [Option("1", "L-1 - Engorde")]

    form.set_value("arete", " A-100 ")
    form.set_value("sexo", "M")
    form.set_value("raza_id", "2")
    form.set_value("lote_id", "1")
    form.set_value("fecha_nacimiento", date(2024, 3, 15))
    form.set_value("imagen", ImageUpload("vaca.jpg", b"\xff\xd8\xff", "image/jpeg"))
    result = await form.submit()

    assert result.success, form.field_errors
    request = server.calls("POST", "animales")[0]
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert parse_multipart(request) == {
        "arete": "A-100",
        "sexo": "M",
        "raza_id": "2",
        "fecha_nacimiento": "2024-03-15",
        "lote_id": "1",
        "animal_madre_id": "",
        "animal_padre_id": "",
        "imagen": "vaca.jpg",
    }
    assert context.animales.by_tag("A-100").fecha_nacimiento == date(2024, 3, 15)
    assert form.state is FormState.SUCCESS
    assert form.values["arete"] == ""


async def test_animal_form_rejects_a_father_too_young_to_breed(context, server):
    server.seed(
        "animales",
        {"animal_id": 1, "arete": "M-1", "sexo": "H", "fecha_nacimiento": years_ago(3)},
        {"animal_id": 2, "arete": "T-1", "sexo": "M", "fecha_nacimiento": years_ago(0)},
        {"animal_id": 3, "arete": "T-2", "sexo": "M", "fecha_nacimiento": years_ago(2)},
    )
    form = AnimalForm(context)
    await form.mount()

    assert [o.value for o in form.options()["animal_madre_id"]] == ["1"]
    assert [o.value for o in form.options()["animal_padre_id"]] == ["3"]

    form.set_value("arete", "A-200")
    form.set_value("sexo", "H")
    form.set_value("raza_id", "2")
    form.set_value("lote_id", "1")
    form.set_value("fecha_nacimiento", today())
    form.set_value("mostrar_padres", True)
    form.set_value("animal_madre_id", "1")
    form.set_value("animal_padre_id", "2")
    result = await form.submit()

    assert result.success is False
    assert form.field_errors == {"animal_padre_id": FATHER_TOO_YOUNG}
    assert server.calls("POST", "animales") == []


async def test_editing_a_monta_only_sends_its_state(context, server):
    server.seed(
        "montas",
        {
            "monta_id": 1,
            "animal_hembra_id": 5,
            "tipo_evento_id": 2,
            "fecha": "2024-01-10",
            "estado": False,
        },
    )
    await context.montas.fetch_all()
    form = MontaForm(context, context.montas.find(1))
    assert form.values["estado"] is False

    form.toggle_estado()
    result = await form.submit()

    assert result.success
    assert json.loads(server.calls("PUT", "montas/1")[0].content) == {"estado": True}
    assert context.montas.find(1).estado is True


async def test_feeding_form_hides_empty_supplies_and_caps_quantity(context, server):
    server.seed("animales", {"animal_id": 1, "arete": "A-1", "nombre": "Luna", "sexo": "H"})
    server.seed(
        "insumos",
        {"insumo_id": 1, "nombre": "Sal", "cantidad": 5, "unidad": {"nombre": "kg"}},
        {"insumo_id": 2, "nombre": "Melaza", "cantidad": 0},
    )
    form = AlimentacionForm(context)
    assert await form.mount()

    assert form.options()["insumo_id"] == [Option("1", "Sal - Stock: 5 kg")]
    assert form.options()["animal_id"] == [Option("1", "A-1 - Luna")]

    form.set_value("animal_id", "1")
    form.set_value("insumo_id", "1")
    form.set_value("cantidad", "6")
    result = await form.submit()

    assert result.success is False
    assert form.field_errors == {
        "cantidad": "La cantidad no puede ser mayor al stock disponible (5)"
    }
    assert server.calls("POST", "alimentaciones") == []

    form.set_value("cantidad", "5")
    result = await form.submit()

    assert result.success
    assert json.loads(server.calls("POST", "alimentaciones")[0].content) == {
        "animal_id": 1,
        "insumo_id": 1,
        "cantidad": 5,
        "fecha": format_local_date(today()),
    }


async def test_animal_purchase_offers_only_bought_in_animals(context, server):
    server.seed("proveedores", PROVEEDOR)
    server.seed(
        "animales",
        {"animal_id": 1, "arete": "A-1", "nombre": "Luna", "sexo": "H"},
        {"animal_id": 2, "arete": "A-2", "sexo": "H", "animal_madre_id": 1},
        {"animal_id": 3, "arete": "A-3", "sexo": "M"},
    )
    server.seed(
        "comprasAnimales",
        {
            "compra_animal_id": 1,
            "proveedor_id": 1,
            "fecha": "2024-01-01",
            "detalles": [{"animal_id": 3, "precio": "500.00"}],
        },
    )
    form = CompraAnimalForm(context)
    assert await form.mount()

    assert form.options() == {
        "proveedor_id": [Option("1", "AgroSur")],
        "animal_id": [Option("1", "A-1 - Luna")],
    }

    form.set_value("proveedor_id", "1")
    form.add_line(animal_id="2", precio="250")
    result = await form.submit()

    assert result.success is False
    assert form.form_error == "El animal seleccionado ya no está disponible para compra."
    assert server.calls("POST", "comprasAnimales") == []


async def test_supply_purchase_sends_lines_and_total(context, server):
    server.seed("proveedores", PROVEEDOR)
    server.seed("insumos", {"insumo_id": 1, "nombre": "Sal", "cantidad": 5})
    form = CompraInsumoForm(context)
    await form.mount()

    form.set_value("proveedor_id", "1")
    form.set_value("fecha", date(2024, 3, 15))
    form.add_line(insumo_id="1", cantidad="3", precio="33.50")
    form.add_line(insumo_id="1", precio="0.50")

    assert form.total == Decimal("101.00")
    result = await form.submit()

    assert result.success, form.form_error
    assert json.loads(server.calls("POST", "comprasInsumo")[0].content) == {
        "proveedor_id": 1,
        "fecha": "2024-03-15",
        "detalles": [
            {"insumo_id": 1, "cantidad": 3, "precio": 33.5},
            {"insumo_id": 1, "cantidad": 1, "precio": 0.5},
        ],
    }
    assert form.lines == []
    assert len(context.compras_insumo.items) == 1


async def test_supply_purchase_needs_at_least_one_line(context, server):
    form = CompraInsumoForm(context)
    form.set_value("proveedor_id", "1")

    result = await form.submit()

    assert result.success is False
    assert form.form_error == "Debe agregar al menos un insumo a la compra"


async def test_submit_is_ignored_while_a_submission_is_running(context, server):
    form = RazaForm(context)
    form.set_value("nombre", "Gyr")
    form.state = FormState.SUBMITTING

    result = await form.submit()

    assert result.code == "busy"
    assert server.calls("POST", "razas") == []


async def test_server_rejection_is_routed_to_the_field(context, server):
    server.route(
        "POST",
        "razas",
        lambda request: envelope(ok=False, msg="Ya existe una raza con ese nombre"),
    )
    form = RazaForm(context)
    form.set_value("nombre", "Holstein")

    result = await form.submit()

    assert result.success is False
    assert form.field_errors == {
        "nombre": "Ya existe una raza con este nombre. Por favor, use un nombre diferente."
    }
    assert form.form_error is None
    assert form.values["nombre"] == "Holstein"


async def test_forbidden_status_shows_the_permission_banner(context, server):
    server.route(
        "POST",
        "razas",
        lambda request: envelope(ok=False, status=403, msg="Acceso denegado"),
    )
    form = RazaForm(context)
    form.set_value("nombre", "Holstein")

    await form.submit()

    assert form.form_error == PERMISSION_BANNER
    assert form.field_errors == {}


async def test_mount_reports_dependency_failures(context, server):
    server.route("GET", "lotes", lambda request: envelope(ok=False, status=500, msg="Fallo"))
    form = AnimalForm(context)

    assert await form.mount() is False
    assert form.form_error == LOAD_ERROR_MESSAGE


async def test_purchase_form_base_needs_a_line_format(context):
    with pytest.raises(TypeError):
        PurchaseForm(context)
