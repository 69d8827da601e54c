from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from pos_app.database import get_db
from pos_app.services import stats_service

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("")
def dashboard_stats(request: Request, threshold: int | None = Query(None, ge=0), db: Session = Depends(get_db)):
    if threshold is None:
        threshold = request.app.state.settings.LOW_STOCK_THRESHOLD
    return stats_service.get_stats(db, threshold)
