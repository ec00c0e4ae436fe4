"""Boundary Protocols — contracts between the engine and its external collaborators.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - Collaborators signal failure by raising their RegCounterError subclass
      (RosterUnavailableError, ReportPublishError); the engine degrades, never crashes
    - Implementations provided by the shell via constructor injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Synchronous methods: the engine runs on the scheduler thread and the
      lifespan, never inside the event loop
"""

from collections.abc import Iterator, Mapping, Sequence
from datetime import date
from pathlib import Path
from typing import Protocol


class AdminRoster(Protocol):
    """Source of the client ids currently holding an administrator group."""
    def list_administrators(self) -> Sequence[int]: ...


class ReportPublisher(Protocol):
    """Destination for the per-admin counts of a freshly updated day."""
    def publish(self, day: date, counts: Mapping[int, int]) -> None: ...


class LogFiles(Protocol):
    """Contract of infrastructure.log_source.LogSource as seen by the engine."""
    def files_for_full_history(self) -> list[Path]: ...
    def files_for_day(self, day: date) -> list[Path]: ...
    def read_lines(self, path: Path) -> Iterator[str]: ...


class StateStore(Protocol):
    """Byte-level access to the persisted aggregate."""
    def read(self) -> bytes: ...
    def write(self, data: bytes) -> None: ...
