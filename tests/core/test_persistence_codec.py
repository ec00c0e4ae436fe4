"""Persistence Codec — tests for deterministic encoding and strict decoding.

Invariants:
    - Output ordered by date, then admin id, regardless of insertion order
    - decode(encode(t)) == t
    - Any malformed line fails the whole decode with CorruptPersistedStateError
"""

import pytest

from regcounter.core.errors import CorruptPersistedStateError
from regcounter.core.persistence_codec import decode, encode


# -- encode --------------------------------------------------------------------

def test_encode_orders_dates_and_admins():
    """Lines are sorted by date, pairs by admin id."""
    table = {
        "2024-01-11": {300: 1, 100: 4},
        "2024-01-10": {200: 1, 100: 2},
    }
    assert encode(table) == (
        b"2024-01-10 100 2 200 1\n"
        b"2024-01-11 100 4 300 1\n"
    )


def test_encode_is_independent_of_insertion_order():
    """Equal tables encode to identical bytes."""
    a = {"2024-01-10": {1: 1, 2: 2}, "2024-01-11": {3: 3}}
    b = {"2024-01-11": {3: 3}, "2024-01-10": {2: 2, 1: 1}}
    assert encode(a) == encode(b)


def test_encode_day_without_admins():
    """A day with no admins is written as the bare date."""
    assert encode({"2024-01-10": {}}) == b"2024-01-10\n"


def test_encode_empty_table():
    """An empty table encodes to empty bytes."""
    assert encode({}) == b""


# -- decode --------------------------------------------------------------------

def test_roundtrip_preserves_table():
    """decode(encode(t)) reproduces t, including empty days."""
    table = {
        "2023-12-31": {7: 1},
        "2024-01-10": {100: 2, 200: 1},
        "2024-01-11": {},
    }
    assert decode(encode(table)) == table


def test_decode_accepts_legacy_unordered_file_with_trailing_space():
    """Files from the older writer still load."""
    data = b"2024-01-11 300 1 100 4 \n2024-01-10 200 1\n"
    assert decode(data) == {
        "2024-01-11": {300: 1, 100: 4},
        "2024-01-10": {200: 1},
    }


def test_decode_ignores_blank_lines():
    """Blank and whitespace-only lines are skipped."""
    assert decode(b"\n2024-01-10 100 2\n\n   \n") == {"2024-01-10": {100: 2}}


def test_decode_empty_input():
    """Empty input is an empty table."""
    assert decode(b"") == {}


@pytest.mark.parametrize("data", [
    b"2024-01-10 100\n",                    # unpaired token
    b"2024-01-10 100 two\n",                # non-numeric count
    b"2024-01-10 abc 2\n",                  # non-numeric admin
    b"2024-01-10 100 -2\n",                 # negative count
    b"2024-01-10 100 2.5\n",                # not an integer
    b"yesterday 100 2\n",                   # not a date
    b"2024-02-30 100 2\n",                  # impossible date
    b"2024-01-10 100 2\n2024-01-10 200 1\n",  # duplicate date
    b"2024-01-10 100 2 100 3\n",            # duplicate admin
    b"\xff\xfe2024-01-10 100 2\n",          # not UTF-8
])
def test_malformed_input_is_corrupt(data):
    """Each malformed shape fails the decode."""
    with pytest.raises(CorruptPersistedStateError):
        decode(data)


def test_corruption_is_all_or_nothing():
    """One bad line rejects the whole file and names its line."""
    data = b"2024-01-10 100 2\n2024-01-11 100 x\n"
    with pytest.raises(CorruptPersistedStateError) as exc:
        decode(data)
    assert exc.value.context.line_number == 2
    assert "line 2" in exc.value.message
