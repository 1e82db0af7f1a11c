# hexagono/domain/quotes.py
from __future__ import annotations

import enum
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional


class ServiceType(str, enum.Enum):
    LANDING_PAGE = "LANDING_PAGE"
    CORPORATE_WEB = "CORPORATE_WEB"
    ECOMMERCE = "ECOMMERCE"
    SOCIAL_MEDIA = "SOCIAL_MEDIA"


class QuoteStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    QUOTED = "QUOTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


INITIAL_STATUS = QuoteStatus.PENDING
TERMINAL_STATUSES: FrozenSet[QuoteStatus] = frozenset(
    {QuoteStatus.COMPLETED, QuoteStatus.CANCELLED}
)
# estados que todavía esperan una acción del equipo (elegibles para recordatorio)
AWAITING_ACTION: FrozenSet[QuoteStatus] = frozenset({QuoteStatus.PENDING})

# Grafo dirigido, solo hacia adelante
TRANSITIONS: Mapping[QuoteStatus, FrozenSet[QuoteStatus]] = MappingProxyType(
    {
        QuoteStatus.PENDING: frozenset(
            {QuoteStatus.IN_REVIEW, QuoteStatus.QUOTED, QuoteStatus.CANCELLED}
        ),
        QuoteStatus.IN_REVIEW: frozenset({QuoteStatus.QUOTED, QuoteStatus.CANCELLED}),
        QuoteStatus.QUOTED: frozenset({QuoteStatus.COMPLETED, QuoteStatus.CANCELLED}),
        QuoteStatus.COMPLETED: frozenset(),
        QuoteStatus.CANCELLED: frozenset(),
    }
)


def parse_status(value) -> QuoteStatus | None:
    """'quoted' / QuoteStatus.QUOTED → QuoteStatus.QUOTED; cualquier otra cosa → None."""
    if isinstance(value, QuoteStatus):
        return value
    if not isinstance(value, str):
        return None
    try:
        return QuoteStatus(value.strip().upper())
    except ValueError:
        return None


def parse_service_type(value) -> ServiceType | None:
    if isinstance(value, ServiceType):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ServiceType(value.strip().upper())
    except ValueError:
        return None


def can_transition(previous: QuoteStatus, new: QuoteStatus) -> bool:
    if previous == new:
        return True
    return new in TRANSITIONS.get(previous, frozenset())


def reminder_due(
    status: QuoteStatus,
    created_at: datetime,
    last_reminder_at: Optional[datetime],
    now: datetime,
    threshold: timedelta,
) -> bool:
    """
    Un recordatorio corresponde si la cotización sigue esperando al equipo,
    tiene al menos `threshold` de antigüedad y no se mandó otro recordatorio
    dentro de la misma ventana. Todos los datetimes deben ser aware (UTC).
    """
    if status not in AWAITING_ACTION:
        return False
    if now - created_at < threshold:
        return False
    if last_reminder_at is not None and now - last_reminder_at < threshold:
        return False
    return True
