"""Registrations Route — read access to the per-day attribution table.

Invariants:
    - Read-only: no route mutates the table (updates come from the scheduler)
    - Unknown days return 200 with empty counts, never 404
    - Handlers are sync (def): FastAPI runs them in its threadpool, so a reader
      waiting on the table lock never blocks the event loop

Design Decisions:
    - Date path parameter validated by FastAPI (datetime.date) before the engine sees it
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends

from regcounter.schemas.registrations import KnownDates, RegistrationDay
from regcounter.services.aggregation_engine import AggregationEngine
from regcounter.services.engine_provider import get_engine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/registrations", tags=["registrations"])


@router.get("/", response_model=KnownDates)
def list_known_dates(engine: AggregationEngine = Depends(get_engine)):
    """Every day the table has an entry for, oldest first."""
    return KnownDates(dates=[date.fromisoformat(d) for d in engine.known_dates()])


@router.get("/{day}", response_model=RegistrationDay)
def get_registrations(day: date, engine: AggregationEngine = Depends(get_engine)):
    """Registrations per admin on one day."""
    counts = engine.query(day)
    return RegistrationDay(
        day=day,
        counts=dict(sorted(counts.items())),
        total=sum(counts.values()),
    )
