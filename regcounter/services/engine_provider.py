"""Engine Provider — wires the AggregationEngine from settings and holds the process singleton.

Invariants:
    - build_engine raises LogFolderMissingError before any state is touched
      when the configured log folder does not exist
    - get_engine() is only usable after init_engine() (FastAPI lifespan)

Design Decisions:
    - Singleton engine initialized on startup: the lifespan manages its lifecycle
      (no global import side effects)
    - get_engine doubles as the FastAPI dependency, so route tests override it
"""

from regcounter.config import Settings
from regcounter.infrastructure.admin_roster import ConfiguredAdminRoster
from regcounter.infrastructure.log_source import LogSource
from regcounter.infrastructure.report_publisher import LoggingReportPublisher
from regcounter.infrastructure.state_file import StateFile
from regcounter.services.aggregation_engine import AggregationEngine


def build_engine(settings: Settings) -> AggregationEngine:
    """Assemble an engine and its default collaborators. Does not initialize it."""
    log_source = LogSource(
        settings.log_folder,
        segment=settings.log_segment,
        include_preceding_segment=settings.include_preceding_segment,
    )
    return AggregationEngine(
        log_files=log_source,
        state_store=StateFile(settings.persisted_state_path),
        roster=ConfiguredAdminRoster(
            settings.admin_group_ids, settings.admin_group_members,
        ),
        publisher=LoggingReportPublisher(),
        registration_group_ids=settings.registration_group_ids,
    )


# Singleton (initialized on startup)
engine: AggregationEngine | None = None


def init_engine(settings: Settings) -> AggregationEngine:
    global engine
    engine = build_engine(settings)
    engine.initialize(revalidate_roster=settings.revalidate_roster_on_load)
    return engine


def get_engine() -> AggregationEngine:
    """FastAPI dependency for the aggregation engine."""
    if engine is None:
        raise RuntimeError("Aggregation engine not initialized")
    return engine
