# hexagono/services/notifications.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, Optional, Protocol

from sqlalchemy.orm import Session

from hexagono.core.errors import NotificationFailure
from hexagono.core.logging_config import logger
from hexagono.core.settings import settings
from hexagono.db import SessionLocal
from hexagono.domain.quotes import reminder_due
from hexagono.models.quote import as_utc, utcnow
from hexagono.observability.metrics import notifications_counter
from hexagono.repositories import quotes as repo
from hexagono.services import email_templates
from hexagono.services.email import EmailMessage, ResendMailer
from hexagono.services.email_templates import QuoteEmailData


class Mailer(Protocol):
    def send(self, message: EmailMessage) -> str: ...


class NotificationService:
    """
    Mails del ciclo de vida de una cotización.

    Cada método abre su propia sesión (corre después del commit, en background
    o en un thread del pool) y nunca propaga errores: los loguea y devuelve
    False.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        mailer: Optional[Mailer] = None,
        *,
        base_url: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
        max_workers: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.mailer = mailer or ResendMailer()
        self.base_url = base_url or settings.PUBLIC_BASE_URL
        self.clock = clock
        self.max_workers = max_workers or settings.REMINDER_MAX_CONCURRENCY

    # ---- helpers ----

    def _deliver(self, kind: str, message: EmailMessage, **log_ctx) -> bool:
        try:
            message_id = self.mailer.send(message)
        except NotificationFailure as e:
            notifications_counter.labels(kind=kind, result="failed").inc()
            logger.error("notification_failed", kind=kind, reason=e.context.get("reason"), **log_ctx)
            return False
        except Exception as e:
            notifications_counter.labels(kind=kind, result="failed").inc()
            logger.exception("notification_failed", kind=kind, error=str(e), **log_ctx)
            return False
        notifications_counter.labels(kind=kind, result="sent").inc()
        logger.info("notification_sent", kind=kind, message_id=message_id, **log_ctx)
        return True

    def _email_data(self, db: Session, quote_id: str) -> Optional[QuoteEmailData]:
        quote = repo.get_quote_by_id(db, quote_id)
        if quote is None:
            logger.warning("notification_quote_not_found", quote_id=quote_id)
            return None
        return QuoteEmailData.from_quote(quote, self.base_url)

    # ---- mails ----

    def send_new_quote_notifications(self, quote_id: str) -> Dict[str, bool]:
        """Confirmación al cliente + aviso al admin."""
        with self.session_factory() as db:
            data = self._email_data(db, quote_id)
        if data is None:
            return {"client_notified": False, "admin_notified": False}

        ctx = {"quote_id": quote_id, "quote_number": data.quote_number}
        client_notified = self._deliver(
            "client_confirmation", email_templates.client_confirmation(data), **ctx
        )
        admin_notified = self._deliver(
            "admin_new_quote", email_templates.admin_new_quote(data), **ctx
        )
        return {"client_notified": client_notified, "admin_notified": admin_notified}

    def send_status_update_notification(
        self,
        quote_id: str,
        new_status: str,
        previous_status: Optional[str] = None,
        status_message: Optional[str] = None,
    ) -> bool:
        with self.session_factory() as db:
            data = self._email_data(db, quote_id)
        if data is None:
            return False
        message = email_templates.status_update(
            data,
            new_status=getattr(new_status, "value", new_status),
            previous_status=getattr(previous_status, "value", previous_status),
            status_message=status_message,
        )
        return self._deliver(
            "status_update",
            message,
            quote_id=quote_id,
            quote_number=data.quote_number,
            new_status=getattr(new_status, "value", new_status),
        )

    def send_high_priority_notification(self, quote_id: str) -> bool:
        with self.session_factory() as db:
            data = self._email_data(db, quote_id)
        if data is None:
            return False
        if not email_templates.is_high_priority(data.estimated_price):
            return False
        return self._deliver(
            "high_priority",
            email_templates.admin_new_quote(data),
            quote_id=quote_id,
            quote_number=data.quote_number,
            estimated_price=data.estimated_price,
        )

    def send_reminder_notification(self, quote_id: str) -> bool:
        """
        Recordatorio al cliente si la cotización sigue pendiente hace más de
        REMINDER_THRESHOLD_HOURS y no se mandó otro dentro de esa ventana.
        El recordatorio se marca antes de enviar y se libera si el envío falla.
        """
        now = self.clock()
        threshold = timedelta(hours=settings.REMINDER_THRESHOLD_HOURS)

        with self.session_factory() as db:
            quote = repo.get_quote_by_id(db, quote_id)
            if quote is None:
                logger.info("reminder_quote_not_found", quote_id=quote_id)
                return False

            if not reminder_due(
                quote.status,
                as_utc(quote.created_at),
                as_utc(quote.last_reminder_at),
                now,
                threshold,
            ):
                logger.info(
                    "reminder_not_needed",
                    quote_id=quote_id,
                    status=quote.status.value,
                    hours_since_created=round((now - as_utc(quote.created_at)).total_seconds() / 3600, 1),
                )
                return False

            previous_reminder_at = quote.last_reminder_at
            data = QuoteEmailData.from_quote(quote, self.base_url)

            if not repo.claim_reminder(db, quote_id, now=now, reminded_before=now - threshold):
                db.rollback()
                logger.info("reminder_already_claimed", quote_id=quote_id)
                return False
            db.commit()

            sent = self._deliver(
                "reminder",
                email_templates.reminder(data),
                quote_id=quote_id,
                quote_number=data.quote_number,
            )
            if not sent:
                repo.release_reminder(db, quote_id, previous_reminder_at=previous_reminder_at)
                db.commit()
            return sent

    def send_bulk_reminder_notifications(self, quote_ids: Iterable[str]) -> Dict[str, int]:
        """
        Manda recordatorios con concurrencia acotada (max_workers). Un fallo
        individual no corta el lote.
        """
        ids = list(quote_ids)
        logger.info("bulk_reminders_started", count=len(ids), max_workers=self.max_workers)

        def _one(qid: str) -> bool:
            try:
                return self.send_reminder_notification(qid)
            except Exception as e:
                logger.exception("bulk_reminder_item_failed", quote_id=qid, error=str(e))
                return False

        results = []
        if ids:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                results = list(pool.map(_one, ids))

        sent = sum(1 for r in results if r)
        summary = {"processed": len(ids), "sent": sent, "failed": len(ids) - sent}
        logger.info("bulk_reminders_finished", **summary)
        return summary
