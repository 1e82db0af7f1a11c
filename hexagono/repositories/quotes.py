# hexagono/repositories/quotes.py
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import case, func, or_, update
from sqlalchemy.orm import Session, selectinload

from hexagono.domain.quotes import AWAITING_ACTION, QuoteStatus
from hexagono.models.quote import (
    Quote,
    QuoteAttachment,
    QuoteFeature,
    QuoteNote,
    QuoteStatusHistory,
    utcnow,
)


def get_quote_by_id(db: Session, quote_id: str) -> Quote | None:
    return db.query(Quote).filter(Quote.id == quote_id).first()


def get_quote_with_relations(db: Session, quote_id: str) -> Quote | None:
    return (
        db.query(Quote)
        .options(
            selectinload(Quote.features),
            selectinload(Quote.attachments),
            selectinload(Quote.notes),
            selectinload(Quote.status_history),
        )
        .filter(Quote.id == quote_id)
        .first()
    )


def get_quote_by_token(db: Session, access_token: str) -> Quote | None:
    return db.query(Quote).filter(Quote.access_token == access_token).first()


def add_quote(
    db: Session,
    quote: Quote,
    *,
    features: Iterable[Tuple[str, int]] = (),
    attachments: Iterable[Dict] = (),
    changed_by: str = "system",
    history_note: Optional[str] = None,
) -> Quote:
    """
    Agrega la cotización con sus features, adjuntos y la primera fila de
    historial (None → status inicial). Hace flush pero no commit: el que llama
    controla la transacción (y los reintentos por colisión de número).
    """
    if quote.created_at is None:
        quote.created_at = utcnow()
    if quote.updated_at is None:
        quote.updated_at = quote.created_at
    for name, cost in features:
        quote.features.append(QuoteFeature(feature_name=name, feature_cost=cost))
    for att in attachments:
        quote.attachments.append(QuoteAttachment(**att))
    quote.status_history.append(
        QuoteStatusHistory(
            previous_status=None,
            new_status=quote.status,
            changed_by=changed_by,
            notes=history_note,
            created_at=quote.created_at,
        )
    )
    db.add(quote)
    db.flush()
    return quote


def set_status(
    db: Session,
    quote: Quote,
    new_status: QuoteStatus,
    *,
    changed_by: str,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[QuoteStatusHistory]:
    """
    Cambia el estado con un UPDATE condicional sobre el estado leído
    (`quote.status`) y agrega la fila de historial; sin commit.
    Devuelve None si otro request cambió el estado en el medio.
    """
    now = now or utcnow()
    previous = quote.status
    result = db.execute(
        update(Quote)
        .where(Quote.id == quote.id)
        .where(Quote.status == previous)
        .values(status=new_status, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return None

    entry = QuoteStatusHistory(
        quote_id=quote.id,
        previous_status=previous,
        new_status=new_status,
        changed_by=changed_by,
        notes=notes,
        created_at=now,
    )
    db.add(entry)
    db.flush()
    return entry


def list_status_history(db: Session, quote_id: str) -> List[QuoteStatusHistory]:
    return (
        db.query(QuoteStatusHistory)
        .filter(QuoteStatusHistory.quote_id == quote_id)
        .order_by(QuoteStatusHistory.id.asc())
        .all()
    )


def list_quotes(
    db: Session,
    *,
    status: Optional[QuoteStatus] = None,
    priority=None,
    service_type=None,
    assigned_to: Optional[str] = None,
    created_from: Optional[datetime] = None,
    created_to: Optional[datetime] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Quote], int]:
    q = db.query(Quote)
    if status is not None:
        q = q.filter(Quote.status == status)
    if priority is not None:
        q = q.filter(Quote.priority == priority)
    if service_type is not None:
        q = q.filter(Quote.service_type == service_type)
    if assigned_to:
        q = q.filter(Quote.assigned_to == assigned_to)
    if created_from is not None:
        q = q.filter(Quote.created_at >= created_from)
    if created_to is not None:
        q = q.filter(Quote.created_at <= created_to)

    total = q.count()
    items = (
        q.options(selectinload(Quote.features))
        .order_by(Quote.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def find_reminder_candidate_ids(
    db: Session,
    *,
    created_before: datetime,
    reminded_before: datetime,
    limit: int,
) -> List[str]:
    """Ids de cotizaciones esperando acción, viejas y sin recordatorio reciente."""
    rows = (
        db.query(Quote.id)
        .filter(Quote.status.in_(list(AWAITING_ACTION)))
        .filter(Quote.created_at <= created_before)
        .filter(
            or_(
                Quote.last_reminder_at.is_(None),
                Quote.last_reminder_at <= reminded_before,
            )
        )
        .order_by(Quote.created_at.asc())
        .limit(limit)
        .all()
    )
    return [r[0] for r in rows]


def claim_reminder(
    db: Session, quote_id: str, *, now: datetime, reminded_before: datetime
) -> bool:
    """
    Marca el recordatorio con un UPDATE condicional. Devuelve False si otro
    proceso ya lo marcó dentro de la ventana.
    """
    result = db.execute(
        update(Quote)
        .where(Quote.id == quote_id)
        .where(Quote.status.in_(list(AWAITING_ACTION)))
        .where(
            or_(
                Quote.last_reminder_at.is_(None),
                Quote.last_reminder_at <= reminded_before,
            )
        )
        .values(last_reminder_at=now, reminder_count=Quote.reminder_count + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def release_reminder(
    db: Session, quote_id: str, *, previous_reminder_at: Optional[datetime]
) -> None:
    """Deshace `claim_reminder` cuando el envío falló."""
    db.execute(
        update(Quote)
        .where(Quote.id == quote_id)
        .values(
            last_reminder_at=previous_reminder_at,
            reminder_count=case(
                (Quote.reminder_count > 0, Quote.reminder_count - 1), else_=0
            ),
        )
        .execution_options(synchronize_session=False)
    )


def add_note(
    db: Session,
    quote: Quote,
    *,
    author: str,
    note: str,
    is_internal: bool = True,
) -> QuoteNote:
    entry = QuoteNote(quote_id=quote.id, author=author, note=note, is_internal=is_internal)
    db.add(entry)
    db.flush()
    return entry


def list_notes(
    db: Session, quote_id: str, *, include_internal: bool = True
) -> List[QuoteNote]:
    q = db.query(QuoteNote).filter(QuoteNote.quote_id == quote_id)
    if not include_internal:
        q = q.filter(QuoteNote.is_internal.is_(False))
    return q.order_by(QuoteNote.created_at.desc(), QuoteNote.id.desc()).all()


def count_by_status(db: Session) -> Dict[str, int]:
    rows: Sequence = (
        db.query(Quote.status, func.count(Quote.id)).group_by(Quote.status).all()
    )
    counts = {s.value: 0 for s in QuoteStatus}
    for status, n in rows:
        key = status.value if isinstance(status, QuoteStatus) else str(status)
        counts[key] = n
    return counts
