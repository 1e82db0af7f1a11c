# hexagono/services/tracking.py
from __future__ import annotations

from datetime import timedelta

from sqlalchemy.orm import Session

from hexagono.core.errors import NotFound, ValidationError
from hexagono.core.settings import settings
from hexagono.models.quote import as_utc
from hexagono.repositories import quotes as repo
from hexagono.schemas.tracking import (
    PublicNoteOut,
    TrackingFeatureOut,
    TrackingHistoryEntryOut,
    TrackingView,
)
from hexagono.services.quote_number import is_valid_access_token


def get_tracking_view(db: Session, access_token: str) -> TrackingView:
    """
    Vista pública de una cotización a partir del token de seguimiento.
    Token mal formado → ValidationError; token desconocido → NotFound.
    """
    if not is_valid_access_token(access_token):
        raise ValidationError("errors.invalid_token", field="token")

    quote = repo.get_quote_by_token(db, access_token)
    if quote is None:
        # no logueamos el token completo
        raise NotFound(context={"operation": "track", "token_prefix": access_token[:6]})

    created_at = as_utc(quote.created_at)
    history = repo.list_status_history(db, quote.id)
    public_notes = repo.list_notes(db, quote.id, include_internal=False)

    return TrackingView(
        quote_number=quote.quote_number,
        status=quote.status,
        priority=quote.priority,
        created_at=created_at,
        updated_at=as_utc(quote.updated_at),
        estimated_response_date=created_at + timedelta(hours=settings.ESTIMATED_RESPONSE_HOURS),
        client_name=quote.client_name,
        service_type=quote.service_type,
        estimated_price=quote.estimated_price,
        timeline=quote.timeline,
        features=[
            TrackingFeatureOut(name=f.feature_name, cost=f.feature_cost) for f in quote.features
        ],
        status_history=[
            TrackingHistoryEntryOut(status=h.new_status, created_at=h.created_at, notes=h.notes)
            for h in history
        ],
        public_notes=[PublicNoteOut(content=n.note, created_at=n.created_at) for n in public_notes],
    )
