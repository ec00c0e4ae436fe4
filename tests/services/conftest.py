"""Service test fixtures — fake collaborators around a real engine and real log files.

Invariants:
    - Log files are real files under tmp_path, read through the real LogSource
    - Roster, publisher and state store are in-memory fakes the test can steer

Design Decisions:
    - Mock at the collaborator boundary only: extractor, table and codec run for real
"""

import pytest

from regcounter.core.errors import (
    PersistedStateUnavailableError,
    ReportPublishError,
    RosterUnavailableError,
)
from regcounter.infrastructure.log_source import LogSource
from regcounter.services.aggregation_engine import AggregationEngine


class FakeRoster:
    def __init__(self, admins):
        self.admins = list(admins)
        self.fail = False
        self.calls = 0

    def list_administrators(self):
        self.calls += 1
        if self.fail:
            raise RosterUnavailableError("server query timed out")
        return list(self.admins)


class RecordingPublisher:
    def __init__(self):
        self.published = []
        self.fail = False

    def publish(self, day, counts):
        self.published.append((day, dict(counts)))
        if self.fail:
            raise ReportPublishError("channel not found")


class MemoryStateStore:
    def __init__(self, data=None):
        self.data = data
        self.writes = []
        self.fail_read = False
        self.fail_write = False

    def read(self):
        if self.fail_read:
            raise PersistedStateUnavailableError("memory", "read", "permission denied")
        if self.data is None:
            raise FileNotFoundError("regc.data")
        return self.data

    def write(self, data):
        if self.fail_write:
            raise PersistedStateUnavailableError("memory", "write", "disk full")
        self.writes.append(data)
        self.data = data


@pytest.fixture
def roster():
    return FakeRoster([100, 200])


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def state_store():
    return MemoryStateStore()


@pytest.fixture
def make_engine(log_folder, roster, publisher, state_store):
    """Build an engine over log_folder; keyword arguments override collaborators."""
    def _make(**overrides):
        kwargs = {
            "log_files": LogSource(log_folder),
            "state_store": state_store,
            "roster": roster,
            "publisher": publisher,
            "registration_group_ids": {641},
        }
        kwargs.update(overrides)
        return AggregationEngine(**kwargs)
    return _make
