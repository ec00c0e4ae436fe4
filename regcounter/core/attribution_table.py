"""Attribution Table — per-day, per-admin registration counts behind one exclusive lock.

Invariants:
    - An admin's count for a day == number of DISTINCT client ids accumulated for
      (day, admin) in the pass that built that day; duplicate events count once
    - Every read and write runs under the table's single lock
    - snapshot()/snapshot_all() return immutable copies, never the live dicts
    - snapshot() of an unknown day returns an empty mapping (never None, never raises)
    - replace_day/replace_all swap whole entries: readers never see a half-built day

Design Decisions:
    - Sets, not counters, are the accumulation unit: idempotent under replayed log lines
    - RLock + locked() context manager: the engine holds the lock across a whole scan
      (file IO included) while still calling the table's own locked methods
    - Pending sets live beside the finalized counts so a pass can be abandoned by
      finalize_counts() without touching what readers see
"""

import threading
from collections.abc import Collection, Iterator, Mapping
from contextlib import contextmanager
from types import MappingProxyType

from regcounter.core.domain_types import DayRecord, DayTable


class AttributionTable:
    """In-memory date -> admin -> count aggregate. Thread-safe."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._days: dict[str, dict[int, int]] = {}
        self._pending: dict[str, dict[int, set[int]]] = {}

    @contextmanager
    def locked(self) -> Iterator["AttributionTable"]:
        """Hold the table lock for a multi-step operation. Released on every exit path."""
        with self._lock:
            yield self

    # ─── Aggregation pass ────────────────────────────────────────

    def accumulate(self, date_key: str, admin_id: int, client_id: int) -> None:
        with self._lock:
            admins = self._pending.setdefault(date_key, {})
            admins.setdefault(admin_id, set()).add(client_id)

    def finalize_counts(self) -> dict[str, dict[int, int]]:
        """Collapse pending client sets to counts and end the pass.

        Returns the per-day records; the caller decides whether to install
        them with replace_day or replace_all.
        """
        with self._lock:
            records = {
                date_key: {admin: len(clients) for admin, clients in admins.items()}
                for date_key, admins in self._pending.items()
            }
            self._pending = {}
            return records

    def discard_pending(self) -> None:
        with self._lock:
            self._pending = {}

    # ─── Installation ────────────────────────────────────────────

    def replace_day(self, date_key: str, record: Mapping[int, int]) -> None:
        """Overwrite one day unconditionally."""
        with self._lock:
            self._days[date_key] = dict(record)

    def replace_all(self, days: DayTable) -> None:
        """Swap in a whole table in one step (load and rebuild)."""
        fresh = {date_key: dict(record) for date_key, record in days.items()}
        with self._lock:
            self._days = fresh

    # ─── Reads ───────────────────────────────────────────────────

    def snapshot(self, date_key: str) -> DayRecord:
        with self._lock:
            return MappingProxyType(dict(self._days.get(date_key, {})))

    def snapshot_all(self) -> DayTable:
        with self._lock:
            return MappingProxyType({
                date_key: MappingProxyType(dict(record))
                for date_key, record in self._days.items()
            })

    def dates(self) -> list[str]:
        with self._lock:
            return sorted(self._days)

    def __len__(self) -> int:
        with self._lock:
            return len(self._days)


def filter_to_roster(
    days: Mapping[str, Mapping[int, int]], roster: Collection[int],
) -> dict[str, dict[int, int]]:
    """Drop every admin id not in the roster. Pure, no IO.

    Days whose admins are all dropped stay present with an empty record.
    """
    allowed = frozenset(roster)
    return {
        date_key: {admin: count for admin, count in record.items() if admin in allowed}
        for date_key, record in days.items()
    }
