from __future__ import annotations

from functools import lru_cache

from fastapi import BackgroundTasks, Depends
from sqlalchemy.orm import Session

from hexagono.db import get_db
from hexagono.services.lifecycle import QuoteLifecycleManager
from hexagono.services.notifications import NotificationService


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    """Un único NotificationService (mailer + session factory) por proceso."""
    return NotificationService()


def get_lifecycle(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> QuoteLifecycleManager:
    # las notificaciones corren después de enviar la respuesta
    return QuoteLifecycleManager(
        db,
        notifications=notifications,
        dispatch=background_tasks.add_task,
    )
