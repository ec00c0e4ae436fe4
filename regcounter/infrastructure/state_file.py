"""State File — byte-level storage of the persisted aggregate on local disk.

Invariants:
    - read() raises FileNotFoundError when no state was ever written (normal on first run)
    - Any other read/write failure surfaces as PersistedStateUnavailableError
    - write() is atomic: readers see the old file or the new file, never a truncated one

Design Decisions:
    - Temp file in the same directory + os.replace: rename is atomic on one filesystem
    - Parent directory created on demand (./data does not exist on a fresh checkout)
"""

import os
import tempfile
from pathlib import Path

from regcounter.core.errors import PersistedStateUnavailableError


class StateFile:
    """Persisted-state location on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> bytes:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            raise
        except OSError as e:
            raise PersistedStateUnavailableError(
                str(self.path), "read", e.strerror or str(e),
            )

    def write(self, data: bytes) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp",
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise PersistedStateUnavailableError(
                str(self.path), "write", e.strerror or str(e),
            )
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
