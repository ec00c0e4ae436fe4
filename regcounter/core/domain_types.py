"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ClientId and AdminId are TeamSpeak client database ids (non-negative ints)
    - DateKey is always an ISO calendar day "YYYY-MM-DD"
    - A DayRecord maps each admin at most once to a non-negative count
    - All engine lifecycle states encoded as an Enum — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enum for EngineState: serializes to JSON in health responses without custom encoders
"""

from datetime import date, datetime
from enum import Enum
from typing import Mapping, NewType

from regcounter.core.errors import InvalidDateError


# ─── Identity Types ──────────────────────────────────────────────

ClientId = NewType("ClientId", int)
AdminId = NewType("AdminId", int)
DateKey = NewType("DateKey", str)       # "YYYY-MM-DD"


# ─── Aggregate Types ─────────────────────────────────────────────

DayRecord = Mapping[int, int]           # admin id -> distinct registered clients
DayTable = Mapping[str, DayRecord]      # date key -> DayRecord


# ─── Enums ───────────────────────────────────────────────────────

class EngineState(str, Enum):
    """AggregationEngine lifecycle. PERSISTED is terminal."""
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    PERSISTED = "persisted"


# ─── Conversions ─────────────────────────────────────────────────

def to_date_key(value: date | str) -> DateKey:
    """Normalize a date or ISO string into a DateKey. Raises InvalidDateError."""
    if isinstance(value, datetime):
        return DateKey(value.date().isoformat())
    if isinstance(value, date):
        return DateKey(value.isoformat())
    try:
        parsed = date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidDateError(str(value))
    # fromisoformat accepts "20240110" on 3.11+; keep the canonical form only
    if parsed.isoformat() != value:
        raise InvalidDateError(value)
    return DateKey(value)
