from dataclasses import replace

import pytest

from hexagono.services import email_templates
from hexagono.services.email_templates import QuoteEmailData


@pytest.fixture
def data():
    return QuoteEmailData(
        quote_number="COT-20240315-0042",
        client_name="María <b>González</b>",
        client_email="maria@example.com",
        service_type="CORPORATE_WEB",
        estimated_price=380000,
        tracking_url="https://hexagono.test/cotizacion/seguimiento/" + "a" * 32,
        admin_url="https://hexagono.test/admin/cotizaciones/abc",
    )


def test_from_quote_builds_urls(make_quote):
    quote = make_quote()
    data = QuoteEmailData.from_quote(quote, "https://hexagono.test/")

    assert data.tracking_url == f"https://hexagono.test/cotizacion/seguimiento/{quote.access_token}"
    assert data.admin_url == f"https://hexagono.test/admin/cotizaciones/{quote.id}"
    assert data.service_type == "CORPORATE_WEB"


def test_client_confirmation(data):
    message = email_templates.client_confirmation(data)

    assert message.to == "maria@example.com"
    assert message.subject == "Cotización COT-20240315-0042 - Web Corporativa - Hexágono Web"
    assert "$380.000" in message.html
    assert data.tracking_url in message.html
    assert data.tracking_url in message.text


def test_client_name_is_escaped_in_html(data):
    html = email_templates.client_confirmation(data).html
    assert "<b>González</b>" not in html
    assert "&lt;b&gt;" in html


def test_admin_mail_for_high_priority(data):
    message = email_templates.admin_new_quote(data)

    assert message.to == "admin@hexagono.xyz"
    assert message.subject == "🔥 URGENTE - Nueva Cotización COT-20240315-0042 - Web Corporativa"
    assert "COTIZACIÓN URGENTE" in message.text
    assert "$300.000" in message.text


def test_admin_mail_for_regular_quote(data):
    regular = replace(data, estimated_price=300000)
    message = email_templates.admin_new_quote(regular, to="otro@hexagono.xyz")

    assert message.to == "otro@hexagono.xyz"
    assert message.subject == "Nueva Cotización COT-20240315-0042 - Web Corporativa"
    assert "URGENTE" not in message.text


def test_status_update_mail(data):
    message = email_templates.status_update(data, "QUOTED", "PENDING", "Te enviamos la propuesta")

    assert message.subject == "Actualización de cotización COT-20240315-0042 - Cotizada"
    assert "Te enviamos la propuesta" in message.text
    assert "¡Tu cotización está lista!" in message.text


def test_reminder_mail(data):
    message = email_templates.reminder(data)

    assert message.subject == "Recordatorio: Tu cotización COT-20240315-0042 está siendo procesada"
    assert message.to == "maria@example.com"
    assert data.tracking_url in message.html


def test_missing_price_shows_a_consultar(data):
    no_price = replace(data, estimated_price=None)
    assert "A consultar" in email_templates.client_confirmation(no_price).text


@pytest.mark.parametrize(
    "price, expected",
    [(None, False), (0, False), (300000, False), (300001, True)],
)
def test_is_high_priority(price, expected):
    assert email_templates.is_high_priority(price) is expected
