"""Report Publisher — delivers a freshly updated day's counts.

Invariants:
    - publish() never mutates the counts it receives
    - Adapters that can fail raise ReportPublishError so the engine can log and move on

Design Decisions:
    - Default sink is a structured log record: formatting for humans (channel
      descriptions, chat) belongs to whichever adapter replaces this one
"""

import logging
from collections.abc import Mapping
from datetime import date

logger = logging.getLogger(__name__)


class LoggingReportPublisher:
    """ReportPublisher that writes the report to a logger."""

    def __init__(self, target: logging.Logger | None = None):
        self.target = target or logger

    def publish(self, day: date, counts: Mapping[int, int]) -> None:
        ordered = {admin: counts[admin] for admin in sorted(counts)}
        self.target.info(
            f"Registrations by admin on {day.isoformat()}: {ordered}",
            extra={
                "date_key": day.isoformat(),
                "admin_count": len(ordered),
                "event_count": sum(ordered.values()),
            },
        )
