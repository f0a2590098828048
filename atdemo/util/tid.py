"""Timestamp identifiers (TIDs) for AT Protocol record keys.

A TID is a 64-bit integer (53 bits of microseconds since the epoch, 10 bits
of clock identifier, top bit zero) written as 13 characters of
base32-sortable text, so lexical order matches creation order.
"""

import random
import time

B32_SORTABLE = "234567abcdefghijklmnopqrstuvwxyz"

TID_LENGTH = 13

_last_timestamp = 0
_clock_id = random.randrange(1024)


def _encode(value: int) -> str:
    chars = []
    for _ in range(TID_LENGTH):
        chars.append(B32_SORTABLE[value & 0x1F])
        value >>= 5
    return "".join(reversed(chars))


def next_tid() -> str:
    """Return a new TID, strictly greater than any previously returned."""
    global _last_timestamp

    timestamp = time.time_ns() // 1000
    # Never repeat or go backwards, even if the wall clock does
    if timestamp <= _last_timestamp:
        timestamp = _last_timestamp + 1
    _last_timestamp = timestamp

    return _encode((timestamp << 10) | _clock_id)


def is_valid_tid(value: str) -> bool:
    """Check TID syntax."""
    return (
        len(value) == TID_LENGTH
        and all(c in B32_SORTABLE for c in value)
        # First character carries the zero top bit
        and value[0] in B32_SORTABLE[:16]
    )
