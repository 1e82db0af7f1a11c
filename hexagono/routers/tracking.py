# hexagono/routers/tracking.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hexagono.db import get_db
from hexagono.schemas.tracking import TrackingView
from hexagono.services.tracking import get_tracking_view

router = APIRouter(prefix="/api/quotes/track", tags=["tracking"])


@router.get("/{token}", response_model=TrackingView)
def track_quote(token: str, db: Session = Depends(get_db)) -> TrackingView:
    return get_tracking_view(db, token)
