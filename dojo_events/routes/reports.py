from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dojo_events.database.db import get_db
from dojo_events.schemas.reports import StatsOverviewOut
from dojo_events.services.events import get_stats_overview

router = APIRouter(prefix="/stats", tags=["reports"])


@router.get("/overview", response_model=StatsOverviewOut)
def stats_overview(db: Session = Depends(get_db)):
    """Aggregate totals across all events."""
    return get_stats_overview(db)
