# hexagono/schemas/tracking.py
from typing import List, Optional

from hexagono.domain.quotes import Priority, QuoteStatus, ServiceType
from hexagono.schemas.common import CamelModel, UTCDateTime


class TrackingFeatureOut(CamelModel):
    name: str
    cost: int


class TrackingHistoryEntryOut(CamelModel):
    status: QuoteStatus
    created_at: UTCDateTime
    notes: Optional[str] = None


class PublicNoteOut(CamelModel):
    content: str
    created_at: UTCDateTime


class TrackingView(CamelModel):
    """Proyección pública: sin id interno, e-mail, teléfono, asignado ni notas internas."""

    quote_number: str
    status: QuoteStatus
    priority: Priority
    created_at: UTCDateTime
    updated_at: UTCDateTime
    estimated_response_date: UTCDateTime
    client_name: str
    service_type: ServiceType
    estimated_price: Optional[int]
    timeline: Optional[str]
    features: List[TrackingFeatureOut]
    status_history: List[TrackingHistoryEntryOut]
    public_notes: List[PublicNoteOut]
