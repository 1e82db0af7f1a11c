# hexagono/core/errors.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from hexagono.services.i18n import translate


class QuoteError(Exception):
    """
    Base de todos los errores de dominio del sistema de cotizaciones.

    - `message_key` se resuelve contra el catálogo i18n al construir la respuesta
    - `context` viaja al log estructurado (quote_id, operation, actor, ...)
    """

    status_code: int = 400
    code: str = "QUOTE_ERROR"
    message_key: str = "errors.internal"
    headers: Optional[Dict[str, str]] = None

    def __init__(
        self,
        message_key: Optional[str] = None,
        *,
        field: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
        **params: Any,
    ):
        self.message_key = message_key or self.message_key
        self.field = field
        self.details = details
        self.context = context or {}
        self.params = params
        super().__init__(self.message())

    def message(self, lang: Optional[str] = None) -> str:
        return translate(self.message_key, lang, **self.params)

    def to_payload(self, lang: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message(lang), "code": self.code}
        if self.field:
            payload["field"] = self.field
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(QuoteError):
    status_code = 400
    code = "VALIDATION_ERROR"
    message_key = "errors.validation"


class InvalidInput(ValidationError):
    code = "PRICING_ERROR"


class NotFound(QuoteError):
    status_code = 404
    code = "QUOTE_NOT_FOUND"
    message_key = "errors.quote_not_found"


class InvalidTransition(QuoteError):
    status_code = 409
    code = "INVALID_TRANSITION"
    message_key = "errors.invalid_transition"


class UnauthorizedAccess(QuoteError):
    status_code = 401
    code = "UNAUTHORIZED"
    message_key = "errors.unauthorized"


class NotificationFailure(QuoteError):
    """Nunca llega al cliente: se loguea y la operación que la disparó sigue."""

    status_code = 502
    code = "NOTIFICATION_FAILURE"
    message_key = "errors.internal"
