"""Event Extraction — turns raw TeamSpeak 3 server log lines into registration events.

Invariants:
    - extract_event is pure: same line + same group set → same result, no side effects
    - Only "client added to servergroup" lines whose group id is configured can match
    - Unrelated or garbled lines yield NO_MATCH: no exception and no log record
    - iter_events is lazy; re-iterating a re-iterable source restarts the scan

Design Decisions:
    - Tagged result (Matched | NoMatch) over Optional: callers pattern-match the outcome
      and a missing match cannot be confused with a falsy event
    - Group id captured as \\d+ and checked against a set, instead of interpolating the
      ids into the regex: no alternation prefix surprises, one compiled pattern for all
      configurations
"""

import re
from collections.abc import Collection, Iterable, Iterator
from dataclasses import dataclass
from datetime import date

from regcounter.core.domain_types import AdminId, ClientId, DateKey

# 2016-02-01 18:06:53.904660|INFO    |VirtualServer |  1| client (id:27010) was added to
# servergroup 'Registered'(id:641) by client 'Markus'(id:25767)
_REGISTRATION_LINE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})"
    r".*client \(id:(?P<client>\d+)\) was added to servergroup "
    r".*\(id:(?P<group>\d+)\) by client "
    r".*\(id:(?P<admin>\d+)\)"
)


@dataclass(frozen=True)
class RegistrationEvent:
    """One client registered by one admin on one day."""
    date: DateKey
    client_id: ClientId
    admin_id: AdminId


@dataclass(frozen=True)
class Matched:
    event: RegistrationEvent


class NoMatch:
    """Line is not a registration event."""
    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_MATCH"


NO_MATCH = NoMatch()

ExtractResult = Matched | NoMatch


def extract_event(line: str, registration_group_ids: Collection[int]) -> ExtractResult:
    """Parse one log line. Pure, no IO."""
    m = _REGISTRATION_LINE.match(line)
    if m is None:
        return NO_MATCH
    if int(m.group("group")) not in registration_group_ids:
        return NO_MATCH
    try:
        day = date.fromisoformat(m.group("date"))
    except ValueError:
        # 2024-13-45 has the right shape but is not a day
        return NO_MATCH
    return Matched(RegistrationEvent(
        date=DateKey(day.isoformat()),
        client_id=ClientId(int(m.group("client"))),
        admin_id=AdminId(int(m.group("admin"))),
    ))


def iter_events(
    lines: Iterable[str],
    registration_group_ids: Collection[int],
    only_date: DateKey | None = None,
) -> Iterator[RegistrationEvent]:
    """Lazily yield registration events from lines, optionally limited to one day."""
    groups = frozenset(registration_group_ids)
    for line in lines:
        result = extract_event(line, groups)
        if isinstance(result, NoMatch):
            continue
        if only_date is not None and result.event.date != only_date:
            continue
        yield result.event
