"""
Period key routes.
"""
import logging
from fastapi import APIRouter, Depends, Query

from tallyup.api.dependencies import valid_month_key
from tallyup.core.config import get_period_timezone
from tallyup.core.periods import period_boundaries, resolve_period
from tallyup.schemas.period import PeriodKeyResponse, PeriodBoundariesResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/periods", tags=["periods"])


@router.get("/key", response_model=PeriodKeyResponse)
async def get_period_key(value: str = Query(None, description="YYYY-MM-DD date or ISO-8601 date-time")):
    """Derive the month key of a date."""
    resolution = resolve_period(value, tz=get_period_timezone())
    if resolution.fell_back:
        logger.warning(f"Could not read date {value!r}, using current month {resolution.key}")

    return PeriodKeyResponse(key=resolution.key, fell_back=resolution.fell_back)


@router.get("/{month_key}", response_model=PeriodBoundariesResponse)
async def get_period_boundaries(month_key: str = Depends(valid_month_key)):
    """Get the first and last instant of a month."""
    bounds = period_boundaries(month_key)

    return PeriodBoundariesResponse(key=month_key, start=bounds.start, end=bounds.end)
