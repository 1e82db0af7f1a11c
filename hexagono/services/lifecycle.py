# hexagono/services/lifecycle.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hexagono.core.errors import InvalidTransition, NotFound, ValidationError
from hexagono.core.logging_config import logger
from hexagono.core.settings import settings
from hexagono.domain.quotes import (
    INITIAL_STATUS,
    Priority,
    QuoteStatus,
    can_transition,
    parse_status,
    reminder_due,
)
from hexagono.models.quote import Quote, QuoteNote, QuoteStatusHistory, as_utc, utcnow
from hexagono.observability.metrics import quotes_created_counter, status_updates_counter
from hexagono.repositories import quotes as repo
from hexagono.schemas.quote import QuoteCreateRequest
from hexagono.services.i18n import translate
from hexagono.services.notifications import NotificationService
from hexagono.services.pricing_engine import PricingEngine, pricing_engine
from hexagono.services.quote_number import generate_access_token, generate_quote_number

# dispatch(fn, *args, **kwargs): BackgroundTasks.add_task en HTTP, inline en scripts/tests
Dispatch = Callable[..., Any]


def run_inline(fn: Callable[..., Any], *args, **kwargs) -> None:
    fn(*args, **kwargs)


@dataclass(frozen=True)
class StatusUpdate:
    id: str
    status: QuoteStatus
    updated_at: datetime
    previous_status: QuoteStatus
    changed: bool


@dataclass(frozen=True)
class StatusHistory:
    current_status: QuoteStatus
    entries: List[QuoteStatusHistory]


UPDATABLE_FIELDS = ("priority", "assigned_to", "estimated_price")


class QuoteLifecycleManager:
    """
    Orquesta el ciclo de vida de una cotización sobre una sesión por request:
    alta, transiciones de estado con historial, notas, recordatorios.

    Las notificaciones se disparan siempre después del commit vía `dispatch`;
    si fallan no afectan el resultado de la operación.
    """

    def __init__(
        self,
        db: Session,
        *,
        notifications: Optional[NotificationService] = None,
        dispatch: Optional[Dispatch] = None,
        pricing: Optional[PricingEngine] = None,
        clock: Callable[[], datetime] = utcnow,
        enforce_transitions: Optional[bool] = None,
    ):
        self.db = db
        self.notifications = notifications or NotificationService()
        self.dispatch = dispatch or run_inline
        self.pricing = pricing or pricing_engine
        self.clock = clock
        self.enforce_transitions = (
            settings.ENFORCE_STATUS_TRANSITIONS if enforce_transitions is None else enforce_transitions
        )
        self.reminder_threshold = timedelta(hours=settings.REMINDER_THRESHOLD_HOURS)

    # ---- lectura ----

    def _get(self, quote_id: str, operation: str) -> Quote:
        quote = repo.get_quote_by_id(self.db, quote_id)
        if quote is None:
            raise NotFound(context={"quote_id": quote_id, "operation": operation})
        return quote

    def get_quote(self, quote_id: str) -> Quote:
        quote = repo.get_quote_with_relations(self.db, quote_id)
        if quote is None:
            raise NotFound(context={"quote_id": quote_id, "operation": "get_quote"})
        return quote

    def get_status_history(self, quote_id: str) -> StatusHistory:
        quote = self._get(quote_id, "get_status_history")
        return StatusHistory(
            current_status=quote.status,
            entries=repo.list_status_history(self.db, quote.id),
        )

    # ---- alta ----

    def create_quote(self, payload: QuoteCreateRequest) -> Quote:
        estimate = self.pricing.estimate(
            payload.service_type, payload.features, payload.additional_requirements
        )
        dropped = [f for f in payload.features if f not in self.pricing.feature_costs]
        if dropped:
            logger.info("quote_unknown_features_ignored", features=dropped)

        priority = self.pricing.calculate_priority(estimate.total_estimate)
        line_items = [(item.name, item.cost) for item in estimate.additional_features]
        attachments = [a.model_dump() for a in payload.attachments]
        max_attempts = settings.QUOTE_NUMBER_MAX_ATTEMPTS

        for attempt in range(1, max_attempts + 1):
            now = self.clock()
            quote = Quote(
                quote_number=generate_quote_number(),
                access_token=generate_access_token(),
                client_name=payload.client_name,
                client_email=str(payload.client_email),
                client_phone=payload.client_phone,
                client_company=payload.client_company,
                service_type=payload.service_type,
                timeline=payload.timeline,
                budget_range=payload.budget_range,
                description=payload.description,
                additional_requirements=payload.additional_requirements,
                estimated_price=estimate.total_estimate,
                status=INITIAL_STATUS,
                priority=priority,
                reminder_count=0,
                created_at=now,
                updated_at=now,
            )
            try:
                repo.add_quote(
                    self.db,
                    quote,
                    features=line_items,
                    attachments=attachments,
                    history_note=translate("quotes.initial_history_note", "es"),
                )
                self.db.commit()
                break
            except IntegrityError:
                self.db.rollback()
                logger.warning(
                    "quote_number_collision",
                    attempt=attempt,
                    quote_number=quote.quote_number,
                )
                if attempt == max_attempts:
                    raise

        self.db.refresh(quote)
        quotes_created_counter.labels(
            service_type=quote.service_type.value, priority=quote.priority.value
        ).inc()
        logger.info(
            "quote_created",
            quote_id=quote.id,
            quote_number=quote.quote_number,
            service_type=quote.service_type.value,
            estimated_price=quote.estimated_price,
            priority=quote.priority.value,
        )

        self.dispatch(self.notifications.send_new_quote_notifications, quote.id)
        return quote

    # ---- estado ----

    def update_status(
        self,
        quote_id: str,
        new_status,
        changed_by: Optional[str],
        notes: Optional[str] = None,
    ) -> StatusUpdate:
        if not changed_by or not changed_by.strip():
            raise ValidationError(
                "errors.changed_by_required",
                field="changedBy",
                context={"quote_id": quote_id, "operation": "update_status"},
            )
        status = parse_status(new_status)
        if status is None:
            raise ValidationError(
                "errors.invalid_status",
                field="status",
                status=new_status,
                context={"quote_id": quote_id, "operation": "update_status"},
            )
        changed_by = changed_by.strip()
        log = logger.bind(quote_id=quote_id, operation="update_status", actor=changed_by)

        quote = self._get(quote_id, "update_status")
        previous = quote.status

        if previous == status:
            status_updates_counter.labels(result="noop").inc()
            log.info("quote_status_unchanged", status=status.value)
            return StatusUpdate(
                id=quote.id,
                status=status,
                updated_at=as_utc(quote.updated_at),
                previous_status=previous,
                changed=False,
            )

        if self.enforce_transitions and not can_transition(previous, status):
            status_updates_counter.labels(result="rejected").inc()
            raise InvalidTransition(
                field="status",
                previous=previous.value,
                new=status.value,
                context={"quote_id": quote_id, "operation": "update_status", "actor": changed_by},
            )

        try:
            entry = repo.set_status(
                self.db,
                quote,
                status,
                changed_by=changed_by,
                notes=notes,
                now=self.clock(),
            )
            if entry is None:
                # otro request cambió el estado después de nuestra lectura
                self.db.rollback()
                self.db.refresh(quote)
                status_updates_counter.labels(result="rejected").inc()
                log.warning(
                    "quote_status_conflict",
                    expected_status=previous.value,
                    current_status=quote.status.value,
                    new_status=status.value,
                )
                raise InvalidTransition(
                    field="status",
                    previous=quote.status.value,
                    new=status.value,
                    context={"quote_id": quote_id, "operation": "update_status", "actor": changed_by},
                )
            self.db.commit()
        except InvalidTransition:
            raise
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(quote)

        status_updates_counter.labels(result="changed").inc()
        log.info(
            "quote_status_updated",
            previous_status=previous.value,
            new_status=status.value,
        )

        self.dispatch(
            self.notifications.send_status_update_notification,
            quote.id,
            status.value,
            previous.value,
            notes,
        )
        return StatusUpdate(
            id=quote.id,
            status=quote.status,
            updated_at=as_utc(quote.updated_at),
            previous_status=previous,
            changed=True,
        )

    # ---- edición admin ----

    def update_details(self, quote_id: str, changes: Dict[str, Any]) -> Quote:
        """
        `changes` viene de `model_dump(exclude_unset=True)`: una key presente con
        None significa "borrar" (assigned_to / estimated_price). priority no
        acepta None.
        """
        updates = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if updates.get("priority", ...) is None:
            updates.pop("priority")
        if not updates:
            raise ValidationError(
                "errors.no_fields_to_update",
                context={"quote_id": quote_id, "operation": "update_details"},
            )

        quote = self._get(quote_id, "update_details")
        old_price = quote.estimated_price

        if "priority" in updates:
            quote.priority = Priority(updates["priority"])
        if "assigned_to" in updates:
            assignee = (updates["assigned_to"] or "").strip()
            quote.assigned_to = assignee or None
        if "estimated_price" in updates:
            quote.estimated_price = updates["estimated_price"]
        quote.updated_at = self.clock()

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(quote)
        logger.info("quote_updated", quote_id=quote.id, fields=sorted(updates))

        threshold = settings.HIGH_PRIORITY_THRESHOLD
        if (old_price or 0) <= threshold < (quote.estimated_price or 0):
            self.dispatch(self.notifications.send_high_priority_notification, quote.id)
        return quote

    def add_note(
        self,
        quote_id: str,
        author: Optional[str],
        note: Optional[str],
        is_internal: bool = True,
    ) -> QuoteNote:
        if not author or not author.strip():
            raise ValidationError("errors.author_required", field="author")
        if not note or not note.strip():
            raise ValidationError("errors.note_required", field="note")

        quote = self._get(quote_id, "add_note")
        entry = repo.add_note(
            self.db, quote, author=author.strip(), note=note.strip(), is_internal=is_internal
        )
        self.db.commit()
        self.db.refresh(entry)
        logger.info("quote_note_added", quote_id=quote.id, note_id=entry.id, is_internal=is_internal)
        return entry

    # ---- recordatorios ----

    def is_eligible_for_reminder(self, quote: Quote, now: Optional[datetime] = None) -> bool:
        return reminder_due(
            quote.status,
            as_utc(quote.created_at),
            as_utc(quote.last_reminder_at),
            now or self.clock(),
            self.reminder_threshold,
        )

    def send_reminder(self, quote_id: str) -> bool:
        """False si no existe, no corresponde o falló el envío. Nunca levanta."""
        try:
            return self.notifications.send_reminder_notification(quote_id)
        except Exception as e:
            logger.exception("reminder_failed", quote_id=quote_id, error=str(e))
            return False

    def send_bulk_reminders(self) -> Dict[str, int]:
        now = self.clock()
        cutoff = now - self.reminder_threshold
        ids = repo.find_reminder_candidate_ids(
            self.db,
            created_before=cutoff,
            reminded_before=cutoff,
            limit=settings.REMINDER_BATCH_LIMIT,
        )
        return self.notifications.send_bulk_reminder_notifications(ids)
