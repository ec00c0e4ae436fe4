"""Aggregation Engine — builds, updates, persists and serves the registration aggregate.

Invariants:
    - Lifecycle UNINITIALIZED → READY → ... → PERSISTED; nothing runs after PERSISTED
    - rebuild_from_logs and update_day hold the table lock for the whole scan,
      file IO included: readers see the table before or after, never during
    - Rebuilt and updated days are filtered to the current admin roster; a loaded
      table is NOT re-filtered unless revalidate_roster=True is passed explicitly
    - update_day replaces the target day wholesale (no merge with the previous entry)
    - The engine never reads the wall clock: every day it touches is passed in
    - A log folder that is missing or cannot be listed is fatal to rebuild_from_logs:
      the error propagates and the table and state are left as they were. Inside
      initialize that aborts startup; update_day logs it and keeps the previous entry
    - File, roster, publish and state-file failures are logged and degraded

Design Decisions:
    - Each log file is scanned fully before any of its events are accumulated, so a
      file that fails mid-read contributes nothing instead of a prefix
    - Publishing happens after the lock is released: a slow publisher must not
      stall concurrent query() callers
    - Roster filtering on rebuild drops counts of former admins (long-standing
      behaviour, see DESIGN.md open questions)
"""

import logging
from collections.abc import Collection, Mapping
from datetime import date
from pathlib import Path

from regcounter.core.attribution_table import AttributionTable, filter_to_roster
from regcounter.core.collaborator_protocols import (
    AdminRoster, LogFiles, ReportPublisher, StateStore,
)
from regcounter.core.domain_types import DateKey, DayRecord, EngineState, to_date_key
from regcounter.core.errors import (
    EngineStateError,
    LogFileReadError,
    LogFolderMissingError,
    RegCounterError,
    ReportPublishError,
    RosterUnavailableError,
)
from regcounter.core.extract_events import iter_events
from regcounter.core.persistence_codec import decode, encode

logger = logging.getLogger(__name__)


class AggregationEngine:
    """Owns the AttributionTable and every operation on it."""

    def __init__(
        self,
        log_files: LogFiles,
        state_store: StateStore,
        roster: AdminRoster,
        publisher: ReportPublisher,
        registration_group_ids: Collection[int],
    ):
        self._log_files = log_files
        self._state_store = state_store
        self._roster = roster
        self._publisher = publisher
        self._registration_group_ids = frozenset(registration_group_ids)
        self._table = AttributionTable()
        self._state = EngineState.UNINITIALIZED

    @property
    def state(self) -> EngineState:
        # single reference read; must not wait behind a running scan
        return self._state

    # ─── Lifecycle ───────────────────────────────────────────────

    def initialize(self, revalidate_roster: bool = False) -> None:
        """Load persisted state, or rebuild from logs when there is none usable."""
        with self._table.locked():
            self._require("initialize", EngineState.UNINITIALIZED)
            try:
                days = decode(self._state_store.read())
            except FileNotFoundError:
                logger.info("No persisted registration data, reading server logs")
                self.rebuild_from_logs()
                return
            except RegCounterError as e:
                logger.warning(
                    f"Persisted registration data unusable ({e.message}), "
                    "falling back to server logs",
                    extra={"error_code": e.code},
                )
                self.rebuild_from_logs()
                return

            if revalidate_roster:
                days = self._filter_by_roster(days)
            self._table.replace_all(days)
            self._state = EngineState.READY
            logger.info(
                f"Loaded registration data for {len(days)} days",
                extra={"engine_state": self._state.value},
            )

    def shutdown(self) -> None:
        """Persist the table. Write failures are logged, never raised."""
        with self._table.locked():
            self._require(
                "shut down", EngineState.UNINITIALIZED, EngineState.READY,
            )
            if self._state is EngineState.UNINITIALIZED:
                # nothing was loaded; writing would clobber the state file
                logger.warning("Engine never initialized, skipping save")
                self._state = EngineState.PERSISTED
                return
            try:
                self._state_store.write(encode(self._table.snapshot_all()))
                logger.info(f"Saved registration data for {len(self._table)} days")
            except RegCounterError as e:
                logger.error(
                    f"Failed to save registration data: {e.message}",
                    extra={"error_code": e.code},
                )
            finally:
                self._state = EngineState.PERSISTED

    # ─── Aggregation ─────────────────────────────────────────────

    def rebuild_from_logs(self) -> None:
        """Recount every day from the full log history.

        Raises LogFolderMissingError when the folder cannot be listed; the
        current table and lifecycle state are then left untouched.
        """
        with self._table.locked():
            self._require(
                "rebuild", EngineState.UNINITIALIZED, EngineState.READY,
            )
            files = self._log_files.files_for_full_history()
            logger.info(
                f"Rebuilding registration data from {len(files)} log files",
                extra={"file_count": len(files)},
            )
            try:
                events = sum(self._scan_file(path) for path in files)
                days = self._table.finalize_counts()
            finally:
                self._table.discard_pending()

            days = self._filter_by_roster(days)
            self._table.replace_all(days)
            self._state = EngineState.READY
            logger.info(
                f"Rebuilt registration data: {len(days)} days from {events} events",
                extra={"event_count": events, "engine_state": self._state.value},
            )

    def update_day(self, target_date: date | str) -> DayRecord:
        """Recount one day from its log files and publish the result.

        Returns the installed record. When no log file exists for the day,
        the previous entry is kept and nothing is published.
        """
        day_key = to_date_key(target_date)
        day = date.fromisoformat(day_key)
        with self._table.locked():
            self._require("update a day", EngineState.READY)
            try:
                files = self._log_files.files_for_day(day)
            except LogFolderMissingError as e:
                logger.error(
                    f"{e.message}, keeping previous counts for {day_key}",
                    extra={"date_key": day_key, "error_code": e.code},
                )
                return self._table.snapshot(day_key)
            if not files:
                logger.warning(
                    f"No log files for {day_key}, keeping previous counts",
                    extra={"date_key": day_key},
                )
                return self._table.snapshot(day_key)

            logger.info(
                f"Counting registrations on {day_key} in {[p.name for p in files]}",
                extra={"date_key": day_key, "file_count": len(files)},
            )
            try:
                for path in files:
                    self._scan_file(path, only_date=day_key)
                record = self._table.finalize_counts().get(day_key, {})
            finally:
                self._table.discard_pending()

            record = self._filter_by_roster({day_key: record})[day_key]
            self._table.replace_day(day_key, record)
            snapshot = self._table.snapshot(day_key)

        logger.info(
            f"Admins registered on {day_key}: {dict(sorted(snapshot.items()))}",
            extra={"date_key": day_key, "admin_count": len(snapshot)},
        )
        self._publish(day, snapshot)
        return snapshot

    # ─── Reads ───────────────────────────────────────────────────

    def query(self, day: date | str) -> DayRecord:
        """Counts for one day; empty mapping for a day never seen."""
        day_key = to_date_key(day)
        with self._table.locked():
            self._require("query", EngineState.READY)
            return self._table.snapshot(day_key)

    def known_dates(self) -> list[str]:
        with self._table.locked():
            self._require("list dates", EngineState.READY)
            return self._table.dates()

    # ─── Helpers ─────────────────────────────────────────────────

    def _require(self, operation: str, *allowed: EngineState) -> None:
        if self._state not in allowed:
            raise EngineStateError(operation, self._state.value)

    def _scan_file(self, path: Path, only_date: DateKey | None = None) -> int:
        """Accumulate one file's events. Returns how many were found."""
        try:
            events = list(iter_events(
                self._log_files.read_lines(path),
                self._registration_group_ids,
                only_date,
            ))
        except LogFileReadError as e:
            logger.error(e.message, extra={"log_file": str(path), "error_code": e.code})
            return 0
        for event in events:
            self._table.accumulate(event.date, event.admin_id, event.client_id)
        return len(events)

    def _filter_by_roster(
        self, days: Mapping[str, Mapping[int, int]],
    ) -> dict[str, dict[int, int]]:
        try:
            admins = self._roster.list_administrators()
        except RosterUnavailableError as e:
            logger.warning(
                f"{e.message}; keeping unfiltered counts",
                extra={"error_code": e.code},
            )
            return {d: dict(record) for d, record in days.items()}
        return filter_to_roster(days, admins)

    def _publish(self, day: date, counts: DayRecord) -> None:
        try:
            self._publisher.publish(day, counts)
        except ReportPublishError as e:
            logger.error(
                f"Failed to publish registrations for {day.isoformat()}: {e.message}",
                extra={"date_key": day.isoformat(), "error_code": e.code},
            )
