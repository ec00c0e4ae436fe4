"""Registration Schemas — Pydantic models for the registrations API.

Invariants:
    - RegistrationDay.counts keys are admin client database ids, values >= 0

Design Decisions:
    - Separate response schemas from core types: the API contract can evolve
      without touching the persisted format
"""

from datetime import date

from pydantic import BaseModel, Field


class RegistrationDay(BaseModel):
    """Per-admin registration counts for one calendar day."""
    day: date
    counts: dict[int, int] = Field(default_factory=dict)
    total: int = 0


class KnownDates(BaseModel):
    dates: list[date]
