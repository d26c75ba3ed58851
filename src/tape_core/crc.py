"""Tape Loop - CRC-32 for PNG chunk records."""
from __future__ import annotations

from .protocol import PNG_CRC_POLY


def _make_table() -> tuple[int, ...]:
    """Build the reflected lookup table, one entry per byte value."""
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            if c & 1:
                c = PNG_CRC_POLY ^ (c >> 1)
            else:
                c >>= 1
        table.append(c)
    return tuple(table)


CRC_TABLE = _make_table()


def crc32(data: bytes, value: int = 0) -> int:
    """Compute CRC-32/PNG over data.

    Pass a previous result as value to continue a running checksum, so
    crc32(data, crc32(head)) == crc32(head + data).
    """
    c = value ^ 0xFFFFFFFF
    for b in data:
        c = CRC_TABLE[(c ^ b) & 0xFF] ^ (c >> 8)
    return c ^ 0xFFFFFFFF
