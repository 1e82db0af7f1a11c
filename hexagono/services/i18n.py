from __future__ import annotations

import re
from typing import Dict, Optional, Set

# ============ CONFIGURACIÓN ============

SUPPORTED: Set[str] = {"es", "en"}
FALLBACK = "es"

# Pesos q= del header Accept-Language
Q_WEIGHT_PATTERN = re.compile(r"q=([0-9.]+)")

MESSAGES: Dict[str, Dict[str, str]] = {
    "es": {
        "errors.validation": "Datos de entrada inválidos",
        "errors.changed_by_required": "El campo changedBy es obligatorio",
        "errors.invalid_status": "Estado de cotización inválido: {status}",
        "errors.invalid_token": "Token inválido",
        "errors.quote_not_found": "Cotización no encontrada",
        "errors.invalid_transition": "No se puede pasar de {previous} a {new}",
        "errors.unknown_service_type": "Tipo de servicio desconocido: {service_type}",
        "errors.no_fields_to_update": "No hay campos válidos para actualizar",
        "errors.note_required": "La nota no puede estar vacía",
        "errors.author_required": "El autor de la nota es obligatorio",
        "errors.unauthorized": "No autorizado",
        "errors.forbidden_env": "Este endpoint solo está disponible en desarrollo",
        "errors.rate_limited": "Demasiadas solicitudes, intentá de nuevo más tarde",
        "errors.internal": "Error interno del servidor",
        "pricing.disclaimer": (
            "Este es un precio estimado. El costo final puede variar según "
            "los requerimientos específicos del proyecto."
        ),
        "quotes.created": "Cotización creada exitosamente",
        "quotes.initial_history_note": "Cotización creada automáticamente",
        "status.PENDING": "Pendiente",
        "status.IN_REVIEW": "En revisión",
        "status.QUOTED": "Cotizada",
        "status.COMPLETED": "Completada",
        "status.CANCELLED": "Cancelada",
        "service.LANDING_PAGE": "Landing Page",
        "service.CORPORATE_WEB": "Web Corporativa",
        "service.ECOMMERCE": "Tienda Online",
        "service.SOCIAL_MEDIA": "Gestión de Redes Sociales",
    },
    "en": {
        "errors.validation": "Invalid input data",
        "errors.changed_by_required": "changedBy is required",
        "errors.invalid_status": "Invalid quote status: {status}",
        "errors.invalid_token": "Invalid token",
        "errors.quote_not_found": "Quote not found",
        "errors.invalid_transition": "Cannot move from {previous} to {new}",
        "errors.unknown_service_type": "Unknown service type: {service_type}",
        "errors.no_fields_to_update": "No valid fields to update",
        "errors.note_required": "Note must not be empty",
        "errors.author_required": "Note author is required",
        "errors.unauthorized": "Unauthorized",
        "errors.forbidden_env": "This endpoint is only available in development",
        "errors.rate_limited": "Too many requests, please try again later",
        "errors.internal": "Internal server error",
        "pricing.disclaimer": (
            "This is an estimated price. The final cost may vary depending on "
            "the specific requirements of the project."
        ),
        "quotes.created": "Quote created successfully",
        "quotes.initial_history_note": "Quote created automatically",
        "status.PENDING": "Pending",
        "status.IN_REVIEW": "In review",
        "status.QUOTED": "Quoted",
        "status.COMPLETED": "Completed",
        "status.CANCELLED": "Cancelled",
        "service.LANDING_PAGE": "Landing Page",
        "service.CORPORATE_WEB": "Corporate Website",
        "service.ECOMMERCE": "Online Store",
        "service.SOCIAL_MEDIA": "Social Media Management",
    },
}


# ============ CORE ============


def translate(key: str, lang: Optional[str] = None, **params) -> str:
    """
    Busca `key` en el catálogo del idioma pedido, con fallback a español y
    finalmente a la key misma. Los params se interpolan con str.format.
    """
    code = _normalize_lang(lang) or FALLBACK
    catalog = MESSAGES.get(code) or MESSAGES[FALLBACK]
    template = catalog.get(key) or MESSAGES[FALLBACK].get(key) or key
    if not params:
        return template
    try:
        return template.format(**params)
    except (KeyError, IndexError):
        return template


def pick_language(
    *,
    accept_language: Optional[str] = None,
    user_pref: Optional[str] = None,
    fallback: str = FALLBACK,
) -> str:
    """
    Determina el idioma:
    1. Elección explícita (?lang=)
    2. Accept-Language del navegador (con q-values)
    3. Fallback (es)
    """
    if user_pref:
        code = _normalize_lang(user_pref)
        if code in SUPPORTED:
            return code

    browser_lang = _parse_accept_language(accept_language)
    if browser_lang:
        return browser_lang

    return fallback if fallback in SUPPORTED else FALLBACK


# ============ HELPERS ============


def _normalize_lang(code: Optional[str]) -> Optional[str]:
    """es-AR → es"""
    if not code:
        return None
    return code.strip().lower().split("-")[0].split("_")[0]


def _parse_accept_language(header: Optional[str]) -> Optional[str]:
    """
    Parsea Accept-Language con q-values.
    Ej: "es-AR,es;q=0.9,en-US;q=0.8,en;q=0.7"
    """
    if not header:
        return None

    options = []
    for part in header.split(","):
        part = part.strip()
        if not part:
            continue

        if ";" in part:
            locale, *params = part.split(";")
            q = 1.0
            for param in params:
                match = Q_WEIGHT_PATTERN.search(param)
                if match:
                    try:
                        q = float(match.group(1))
                    except ValueError:
                        pass
        else:
            locale = part
            q = 1.0

        code = _normalize_lang(locale)
        if code and code in SUPPORTED:
            options.append((q, code))

    # sort estable: a igual q gana el orden del header
    options.sort(key=lambda opt: opt[0], reverse=True)

    return options[0][1] if options else None


# ============ FASTAPI ============


def get_request_language(request) -> str:
    """Idioma del request actual (query ?lang= > Accept-Language > es)."""
    from hexagono.core.settings import settings

    return pick_language(
        accept_language=request.headers.get("accept-language"),
        user_pref=request.query_params.get("lang"),
        fallback=settings.DEFAULT_LANGUAGE,
    )
