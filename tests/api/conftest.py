"""API test fixtures — real engine over tmp_path logs + httpx ASGI client.

Invariants:
    - get_engine dependency overridden to the test engine
    - engine_provider.engine patched for routes that read the singleton directly

Design Decisions:
    - ASGITransport does not run the lifespan: the engine is initialized by the
      fixture, so route tests never depend on environment settings
"""

import pytest
from httpx import ASGITransport, AsyncClient

from regcounter.infrastructure.admin_roster import ConfiguredAdminRoster
from regcounter.infrastructure.log_source import LogSource
from regcounter.infrastructure.report_publisher import LoggingReportPublisher
from regcounter.infrastructure.state_file import StateFile
from regcounter.main import app
from regcounter.services import engine_provider
from regcounter.services.aggregation_engine import AggregationEngine
from regcounter.services.engine_provider import get_engine


@pytest.fixture
def engine(tmp_path, log_folder, write_log, reg_line):
    write_log("2024-01-10", [
        reg_line("2024-01-10", 1, 100),
        reg_line("2024-01-10", 2, 100),
        reg_line("2024-01-10", 3, 200),
    ])
    return AggregationEngine(
        log_files=LogSource(log_folder),
        state_store=StateFile(tmp_path / "data" / "regc.data"),
        roster=ConfiguredAdminRoster({6}, {6: [100, 200]}),
        publisher=LoggingReportPublisher(),
        registration_group_ids={641},
    )


@pytest.fixture
async def client(engine, monkeypatch):
    """FastAPI test client with the engine dependency overridden."""
    app.dependency_overrides[get_engine] = lambda: engine
    monkeypatch.setattr(engine_provider, "engine", engine)

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
