"""Root conftest — shared test configuration and log-file builders."""

import os

import pytest

# Ensure tests never pick up an operator's .env values for these
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")


@pytest.fixture
def reg_line():
    """Build a 'client added to servergroup' server log line."""
    def _line(day, client, admin, group=641, time="18:06:53.904660"):
        return (
            f"{day} {time}|INFO    |VirtualServer |  1| client (id:{client}) "
            f"was added to servergroup 'Registered'(id:{group}) "
            f"by client 'Admin {admin}'(id:{admin})"
        )
    return _line


@pytest.fixture
def log_folder(tmp_path):
    folder = tmp_path / "logs"
    folder.mkdir()
    return folder


@pytest.fixture
def write_log(log_folder):
    """Write lines to a rotated log file in log_folder. Returns its path."""
    def _write(day, lines, time="00_00_00.000000", segment=1):
        path = log_folder / f"ts3server_{day}__{time}_{segment}.log"
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path
    return _write
