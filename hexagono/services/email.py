# hexagono/services/email.py
from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import requests

from hexagono.core.errors import NotificationFailure
from hexagono.core.logging_config import logger
from hexagono.core.settings import settings
from hexagono.infra.retry import retry_on

RESEND_SEND_URL = "https://api.resend.com/emails"


@dataclass(frozen=True)
class EmailMessage:
    to: Union[str, List[str]]
    subject: str
    html: str
    text: Optional[str] = None
    tags: Optional[Dict[str, str]] = None


class _RetryableSendError(RuntimeError):
    """Error de red o 5xx/429: vale la pena reintentar."""


class ResendMailer:
    """
    Envía e-mails por la API HTTP de Resend.

    Sin RESEND_API_KEY corre en modo dev: no sale nada por la red, solo se
    loguea el mensaje y se devuelve un id local.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_addr: Optional[str] = None,
        reply_to: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_base: Optional[float] = None,
        http: Optional[requests.Session] = None,
        timeout: float = 15,
    ):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.from_addr = from_addr or f"{settings.COMPANY_NAME} <{settings.COMPANY_EMAIL}>"
        self.reply_to = reply_to or settings.COMPANY_EMAIL
        self.max_retries = max_retries or settings.EMAIL_MAX_RETRIES
        self.retry_base = retry_base if retry_base is not None else settings.EMAIL_RETRY_BASE_SECONDS
        self.http = http or requests.Session()
        self.timeout = timeout

    @property
    def dev_mode(self) -> bool:
        return not self.api_key

    def send(self, message: EmailMessage) -> str:
        """
        Devuelve el id del mensaje del proveedor.
        Raises NotificationFailure si no se pudo enviar tras los reintentos.
        """
        if self.dev_mode:
            message_id = f"dev-{uuid.uuid4()}"
            logger.info(
                "email_dev_mode",
                to=message.to,
                subject=message.subject,
                message_id=message_id,
            )
            return message_id

        try:
            return retry_on(
                lambda: self._post(message),
                attempts=self.max_retries,
                base=self.retry_base,
                is_retryable=lambda e: isinstance(e, _RetryableSendError),
                on_retry=lambda attempt, e, delay: logger.warning(
                    "email_send_retry",
                    attempt=attempt,
                    delay=round(delay, 2),
                    error=str(e),
                ),
            )
        except (_RetryableSendError, NotificationFailure) as e:
            logger.error("email_send_failed", to=message.to, subject=message.subject, error=str(e))
            if isinstance(e, NotificationFailure):
                raise
            raise NotificationFailure(context={"reason": str(e)}) from e

    def _post(self, message: EmailMessage) -> str:
        payload: Dict[str, Any] = {
            "from": self.from_addr,
            "to": message.to if isinstance(message.to, list) else [message.to],
            "subject": message.subject,
            "html": message.html,
            "reply_to": self.reply_to,
        }
        if message.text:
            payload["text"] = message.text
        if message.tags:
            payload["tags"] = [{"name": k, "value": v} for k, v in message.tags.items()]

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        try:
            r = self.http.post(
                RESEND_SEND_URL,
                headers=headers,
                data=json.dumps(payload),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise _RetryableSendError(f"resend_network_error:{type(e).__name__}:{e}") from e

        if r.status_code == 429 or r.status_code >= 500:
            raise _RetryableSendError(f"resend_send_failed:{r.status_code}")
        if r.status_code >= 300:
            try:
                data = r.json()
            except ValueError:
                data = {"raw": r.text}
            raise NotificationFailure(context={"reason": f"resend_send_failed:{r.status_code}:{data}"})

        data = r.json()
        message_id = str(data.get("id") or "")
        if not message_id:
            raise NotificationFailure(context={"reason": f"resend_send_failed:no_id:{data}"})
        logger.info("email_sent", to=message.to, subject=message.subject, message_id=message_id)
        return message_id
