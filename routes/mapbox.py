from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas import UsageStats
from services.mapbox_request_limiter import MapboxRequestLimiter

router = APIRouter(prefix="/mapbox", tags=["Mapbox"])


@router.get("/usage", response_model=UsageStats)
def usage(db: Session = Depends(get_db)):
    """Mapbox requests made this month against the configured ceiling."""
    return MapboxRequestLimiter(db).get_usage_stats()
