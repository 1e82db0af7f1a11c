# hexagono/services/email_templates.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from hexagono.core.settings import settings
from hexagono.services.email import EmailMessage
from hexagono.services.i18n import translate
from hexagono.web.jinja_filters import format_date_ar, format_datetime_ar, format_price

# hexagono/
#   services/email_templates.py  (este archivo)
#   templates/emails/*.html|*.txt
TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["price"] = format_price
_env.filters["date_ar"] = format_date_ar
_env.filters["datetime_ar"] = format_datetime_ar


@dataclass(frozen=True)
class QuoteEmailData:
    quote_number: str
    client_name: str
    client_email: str
    service_type: str
    tracking_url: str
    estimated_price: Optional[int] = None
    admin_url: Optional[str] = None

    @classmethod
    def from_quote(cls, quote, base_url: Optional[str] = None) -> "QuoteEmailData":
        base = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
        service = getattr(quote.service_type, "value", quote.service_type)
        return cls(
            quote_number=quote.quote_number,
            client_name=quote.client_name,
            client_email=quote.client_email,
            service_type=service,
            estimated_price=quote.estimated_price,
            tracking_url=f"{base}/cotizacion/seguimiento/{quote.access_token}",
            admin_url=f"{base}/admin/cotizaciones/{quote.id}",
        )


def render_template(name: str, context: Mapping[str, Any]) -> str:
    template = _env.get_template(name)
    return template.render(**context)


def _company() -> dict:
    return {
        "name": settings.COMPANY_NAME,
        "email": settings.COMPANY_EMAIL,
        "phone": settings.COMPANY_PHONE,
        "website": settings.COMPANY_WEBSITE,
    }


def _render(name: str, subject: str, to, **context) -> EmailMessage:
    now = datetime.now()
    ctx = {"subject": subject, "company": _company(), "now": now, "year": now.year, **context}
    return EmailMessage(
        to=to,
        subject=subject,
        html=render_template(f"emails/{name}.html", ctx),
        text=render_template(f"emails/{name}.txt", ctx),
    )


def service_display_name(service_type: str) -> str:
    return translate(f"service.{service_type}", "es")


def status_display_name(status: str) -> str:
    return translate(f"status.{status}", "es")


def is_high_priority(estimated_price: Optional[int]) -> bool:
    return bool(estimated_price) and estimated_price > settings.HIGH_PRIORITY_THRESHOLD


# ---- templates ----


def client_confirmation(data: QuoteEmailData) -> EmailMessage:
    service_name = service_display_name(data.service_type)
    subject = f"Cotización {data.quote_number} - {service_name} - {settings.COMPANY_NAME}"
    return _render(
        "client_confirmation",
        subject,
        data.client_email,
        quote=data,
        service_name=service_name,
    )


def admin_new_quote(data: QuoteEmailData, to: Optional[str] = None) -> EmailMessage:
    service_name = service_display_name(data.service_type)
    high = is_high_priority(data.estimated_price)
    prefix = "🔥 URGENTE - " if high else ""
    subject = f"{prefix}Nueva Cotización {data.quote_number} - {service_name}"
    return _render(
        "admin_new_quote",
        subject,
        to or settings.ADMIN_EMAIL,
        quote=data,
        service_name=service_name,
        high_priority=high,
        threshold=settings.HIGH_PRIORITY_THRESHOLD,
    )


def status_update(
    data: QuoteEmailData,
    new_status: str,
    previous_status: Optional[str] = None,
    status_message: Optional[str] = None,
) -> EmailMessage:
    status_name = status_display_name(new_status)
    subject = f"Actualización de cotización {data.quote_number} - {status_name}"
    return _render(
        "status_update",
        subject,
        data.client_email,
        quote=data,
        service_name=service_display_name(data.service_type),
        new_status=new_status,
        previous_status=previous_status,
        status_name=status_name,
        status_message=status_message,
    )


def reminder(data: QuoteEmailData) -> EmailMessage:
    subject = f"Recordatorio: Tu cotización {data.quote_number} está siendo procesada"
    return _render(
        "reminder",
        subject,
        data.client_email,
        quote=data,
        service_name=service_display_name(data.service_type),
    )
