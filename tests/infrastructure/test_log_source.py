"""Log Source — tests for file selection and tolerant reading.

Invariants:
    - Only ts3server_<date>__<time>_<segment>.log files of the configured segment qualify
    - files_for_day selects by the date in the filename, lexicographically ordered
    - Missing folder is fatal at construction; a folder that later cannot be listed
      raises LogFolderMissingError; unreadable files raise LogFileReadError
"""

from datetime import date
from pathlib import Path

import pytest

from regcounter.core.errors import LogFileReadError, LogFolderMissingError
from regcounter.infrastructure.log_source import LogSource, log_file_date


def _touch(folder, name):
    path = folder / name
    path.write_text("", encoding="utf-8")
    return path


# -- Construction --------------------------------------------------------------

def test_missing_folder_is_fatal(tmp_path):
    """A folder that does not exist cannot back a LogSource."""
    with pytest.raises(LogFolderMissingError):
        LogSource(tmp_path / "does-not-exist")


def test_file_instead_of_folder_is_fatal(tmp_path):
    """A regular file in place of the folder is rejected."""
    path = _touch(tmp_path, "not-a-folder")
    with pytest.raises(LogFolderMissingError):
        LogSource(path)


# -- Selection -----------------------------------------------------------------

def test_full_history_sorted_and_filtered(log_folder):
    """Only segment-1 rotated logs qualify, in filename order."""
    _touch(log_folder, "ts3server_2024-01-11__08_00_00.000000_1.log")
    _touch(log_folder, "ts3server_2024-01-10__12_00_00.000000_1.log")
    _touch(log_folder, "ts3server_2024-01-10__06_00_00.000000_1.log")
    _touch(log_folder, "ts3server_2024-01-10__06_00_00.000000_2.log")
    _touch(log_folder, "ts3server_2024-01-10__06_00_00.000000_0.log")
    _touch(log_folder, "ts3server_2024-01-10__06_00_00.000000_1.log.gz")
    _touch(log_folder, "query_ip_whitelist.txt")
    (log_folder / "ts3server_2024-01-09__06_00_00.000000_1.log").mkdir()

    names = [p.name for p in LogSource(log_folder).files_for_full_history()]
    assert names == [
        "ts3server_2024-01-10__06_00_00.000000_1.log",
        "ts3server_2024-01-10__12_00_00.000000_1.log",
        "ts3server_2024-01-11__08_00_00.000000_1.log",
    ]


def test_other_segment_can_be_configured(log_folder):
    """The segment number is configurable."""
    _touch(log_folder, "ts3server_2024-01-10__06_00_00.000000_1.log")
    _touch(log_folder, "ts3server_2024-01-10__06_00_00.000000_2.log")
    names = [p.name for p in LogSource(log_folder, segment=2).files_for_full_history()]
    assert names == ["ts3server_2024-01-10__06_00_00.000000_2.log"]


def test_files_for_day_matches_filename_date(log_folder):
    """Day selection uses the date in the filename."""
    _touch(log_folder, "ts3server_2024-01-09__23_00_00.000000_1.log")
    _touch(log_folder, "ts3server_2024-01-10__06_00_00.000000_1.log")
    _touch(log_folder, "ts3server_2024-01-10__18_00_00.000000_1.log")
    _touch(log_folder, "ts3server_2024-01-11__00_10_00.000000_1.log")

    names = [p.name for p in LogSource(log_folder).files_for_day(date(2024, 1, 10))]
    assert names == [
        "ts3server_2024-01-10__06_00_00.000000_1.log",
        "ts3server_2024-01-10__18_00_00.000000_1.log",
    ]


def test_files_for_day_without_files_is_empty(log_folder):
    """A day without files selects nothing."""
    _touch(log_folder, "ts3server_2024-01-09__23_00_00.000000_1.log")
    assert LogSource(log_folder).files_for_day(date(2024, 1, 10)) == []


def test_preceding_segment_included_when_enabled(log_folder):
    """The last earlier file is prepended when enabled."""
    _touch(log_folder, "ts3server_2024-01-08__10_00_00.000000_1.log")
    _touch(log_folder, "ts3server_2024-01-09__23_00_00.000000_1.log")
    _touch(log_folder, "ts3server_2024-01-10__06_00_00.000000_1.log")
    _touch(log_folder, "ts3server_2024-01-11__06_00_00.000000_1.log")

    source = LogSource(log_folder, include_preceding_segment=True)
    names = [p.name for p in source.files_for_day(date(2024, 1, 10))]
    assert names == [
        "ts3server_2024-01-09__23_00_00.000000_1.log",
        "ts3server_2024-01-10__06_00_00.000000_1.log",
    ]


def test_preceding_segment_alone_when_server_never_restarted(log_folder):
    """A long-running session's file is picked even with no file for the day."""
    _touch(log_folder, "ts3server_2024-01-01__10_00_00.000000_1.log")
    source = LogSource(log_folder, include_preceding_segment=True)
    names = [p.name for p in source.files_for_day(date(2024, 1, 10))]
    assert names == ["ts3server_2024-01-01__10_00_00.000000_1.log"]


def test_preceding_segment_at_start_of_history_is_safe(log_folder):
    """No earlier file means no extra file."""
    _touch(log_folder, "ts3server_2024-01-10__06_00_00.000000_1.log")
    source = LogSource(log_folder, include_preceding_segment=True)
    names = [p.name for p in source.files_for_day(date(2024, 1, 10))]
    assert names == ["ts3server_2024-01-10__06_00_00.000000_1.log"]


def test_vanished_folder_raises_instead_of_empty_history(log_folder):
    """A folder removed after construction raises on listing."""
    source = LogSource(log_folder)
    log_folder.rmdir()
    with pytest.raises(LogFolderMissingError):
        source.files_for_full_history()
    with pytest.raises(LogFolderMissingError):
        source.files_for_day(date(2024, 1, 10))


def test_unlistable_folder_raises_with_reason(log_folder, monkeypatch):
    """Listing errors carry the OS reason and the folder path."""
    _touch(log_folder, "ts3server_2024-01-10__06_00_00.000000_1.log")
    source = LogSource(log_folder)

    def _deny(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "iterdir", _deny)
    with pytest.raises(LogFolderMissingError) as exc:
        source.files_for_full_history()
    assert exc.value.message == f"Log folder '{log_folder}' cannot be listed: Permission denied"
    assert exc.value.context.path == str(log_folder)


def test_log_file_date_parses_name(tmp_path):
    """Filename date is extracted, non-log names give None."""
    assert log_file_date(tmp_path / "ts3server_2016-02-01__18_06_53.904660_1.log") == "2016-02-01"
    assert log_file_date(tmp_path / "server.log") is None


# -- Reading -------------------------------------------------------------------

def test_read_lines_strips_line_endings(write_log, log_folder):
    """CRLF and LF endings are stripped, last line kept."""
    path = log_folder / "ts3server_2024-01-10__06_00_00.000000_1.log"
    path.write_bytes(b"first\r\nsecond\nthird")
    assert list(LogSource(log_folder).read_lines(path)) == ["first", "second", "third"]


def test_read_lines_is_lazy(write_log, log_folder):
    """Opening is deferred until the first line is requested."""
    path = write_log("2024-01-10", ["a", "b"])
    lines = LogSource(log_folder).read_lines(path)
    path.unlink()
    # nothing was opened yet, so the failure surfaces on first use
    with pytest.raises(LogFileReadError):
        next(lines)


def test_read_lines_replaces_invalid_bytes(log_folder):
    """Invalid UTF-8 spoils only its own line."""
    path = log_folder / "ts3server_2024-01-10__06_00_00.000000_1.log"
    path.write_bytes(b"ok\n\xff\xfe broken\nok again\n")
    lines = list(LogSource(log_folder).read_lines(path))
    assert lines[0] == "ok"
    assert lines[2] == "ok again"
    assert "broken" in lines[1]


def test_missing_file_raises_log_file_read_error(log_folder):
    """A missing file surfaces as LogFileReadError."""
    source = LogSource(log_folder)
    with pytest.raises(LogFileReadError) as exc:
        list(source.read_lines(log_folder / "ts3server_2024-01-10__06_00_00.000000_1.log"))
    assert exc.value.code == "LOG_FILE_READ"
