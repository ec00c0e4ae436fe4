"""Persistence Codec — flat text encoding of the attribution aggregate.

Invariants:
    - encode is deterministic: dates ascending, then admin ids ascending
    - One line per date: "YYYY-MM-DD admin count admin count ..." (UTF-8, "\\n" separated)
    - decode(encode(t)) == t for every table t, regardless of insertion order
    - decode is all-or-nothing: any malformed line raises CorruptPersistedStateError
      and no partial table is ever returned

Design Decisions:
    - Same whitespace-separated shape the service has always written, so existing
      state files keep loading; only the ordering is new
    - Blank lines tolerated (trailing newline, hand edits); everything else is strict
"""

from collections.abc import Mapping

from regcounter.core.domain_types import to_date_key
from regcounter.core.errors import CorruptPersistedStateError, InvalidDateError


def encode(table: Mapping[str, Mapping[int, int]]) -> bytes:
    """Serialize a table to bytes. Pure, no IO."""
    lines = []
    for date_key in sorted(table):
        record = table[date_key]
        tokens = [date_key]
        for admin_id in sorted(record):
            tokens.append(str(admin_id))
            tokens.append(str(record[admin_id]))
        lines.append(" ".join(tokens) + "\n")
    return "".join(lines).encode("utf-8")


def decode(data: bytes) -> dict[str, dict[int, int]]:
    """Parse bytes produced by encode(). Raises CorruptPersistedStateError."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CorruptPersistedStateError(f"not UTF-8 ({e.reason})")

    table: dict[str, dict[int, int]] = {}
    for line_number, line in enumerate(text.splitlines(), start=1):
        tokens = line.split()
        if not tokens:
            continue
        date_key, pairs = tokens[0], tokens[1:]
        try:
            to_date_key(date_key)
        except InvalidDateError:
            raise CorruptPersistedStateError(
                f"'{date_key}' is not a date", line_number,
            )
        if date_key in table:
            raise CorruptPersistedStateError(
                f"date {date_key} appears twice", line_number,
            )
        if len(pairs) % 2:
            raise CorruptPersistedStateError(
                "admin/count tokens are not paired", line_number,
            )
        table[date_key] = _decode_record(pairs, line_number)
    return table


def _decode_record(pairs: list[str], line_number: int) -> dict[int, int]:
    record: dict[int, int] = {}
    for i in range(0, len(pairs), 2):
        admin_id = _non_negative_int(pairs[i], line_number)
        count = _non_negative_int(pairs[i + 1], line_number)
        if admin_id in record:
            raise CorruptPersistedStateError(
                f"admin {admin_id} appears twice", line_number,
            )
        record[admin_id] = count
    return record


def _non_negative_int(token: str, line_number: int) -> int:
    # isdigit() also rejects signs, so "-3" and "+3" are both corrupt
    if not token.isascii() or not token.isdigit():
        raise CorruptPersistedStateError(
            f"'{token}' is not a non-negative integer", line_number,
        )
    return int(token)
