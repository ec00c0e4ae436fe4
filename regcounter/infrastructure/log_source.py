"""Log Source — enumerates and reads rotated TeamSpeak 3 server log files.

Invariants:
    - Only files named ts3server_<YYYY-MM-DD>__<time>_<segment>.log with the configured
      segment are candidates; results always in lexicographic (= chronological) order
    - files_for_day(d) == every candidate whose filename date is d, plus at most one
      preceding file when include_preceding_segment is set
    - A missing folder at construction is fatal (LogFolderMissingError); a folder that
      cannot be listed later raises the same error instead of looking like an empty
      history; a single unreadable file raises LogFileReadError
    - read_lines is lazy and maps every OS-level failure to LogFileReadError

Design Decisions:
    - The server starts a new file per process start, not per day, so a file named for
      an earlier day can still hold lines for the target day. include_preceding_segment
      covers that explicitly (lines are date-filtered by the extractor anyway)
    - errors="replace" on decode: a stray invalid byte only spoils its own line,
      which then simply fails to match
"""

import re
from collections.abc import Iterator
from datetime import date
from pathlib import Path

from regcounter.core.errors import LogFileReadError, LogFolderMissingError

_LOG_FILE_NAME = re.compile(
    r"^ts3server_(?P<date>\d{4}-\d{2}-\d{2})__.*_(?P<segment>\d+)\.log$"
)


def log_file_date(path: Path) -> str | None:
    """Date encoded in a rotated log filename, or None if the name does not match."""
    m = _LOG_FILE_NAME.match(path.name)
    return m.group("date") if m else None


class LogSource:
    """Read-only view over the server's log folder."""

    def __init__(
        self, folder: Path, segment: int = 1, include_preceding_segment: bool = False,
    ):
        folder = Path(folder)
        if not folder.is_dir():
            raise LogFolderMissingError(str(folder))
        self.folder = folder
        self.segment = segment
        self.include_preceding_segment = include_preceding_segment

    def files_for_full_history(self) -> list[Path]:
        """All candidate log files, oldest first. Raises LogFolderMissingError."""
        try:
            entries = list(self.folder.iterdir())
        except OSError as e:
            raise LogFolderMissingError(str(self.folder), e.strerror or str(e)) from e
        return sorted(
            (p for p in entries if self._is_candidate(p)),
            key=lambda p: p.name,
        )

    def files_for_day(self, day: date) -> list[Path]:
        """Candidate files whose filename date equals day."""
        day_key = day.isoformat()
        history = self.files_for_full_history()
        chosen = [p for p in history if log_file_date(p) == day_key]
        if self.include_preceding_segment:
            earlier = [p for p in history if log_file_date(p) < day_key]
            if earlier:
                chosen.insert(0, earlier[-1])
        return chosen

    def read_lines(self, path: Path) -> Iterator[str]:
        """Lazily yield lines (without line endings). Raises LogFileReadError."""
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                for line in f:
                    yield line.rstrip("\r\n")
        except OSError as e:
            raise LogFileReadError(str(path), e.strerror or str(e))

    def _is_candidate(self, path: Path) -> bool:
        m = _LOG_FILE_NAME.match(path.name)
        if m is None or int(m.group("segment")) != self.segment:
            return False
        return path.is_file()
