"""Tape Loop - PNG chunk codec.

Walks the length-prefixed, type-tagged, CRC-suffixed records of a PNG byte
stream and builds new records. Nothing outside the record being read or
built is interpreted, so every other byte of a carrier survives untouched.
"""
from __future__ import annotations

import struct
from typing import Iterator, NamedTuple

from .crc import crc32
from .errors import CrcMismatch, NotAPng, UnexpectedEnd
from .protocol import (
    PNG_SIGNATURE,
    CHUNK_END,
    CHUNK_HEADER_FMT,
    CHUNK_HEADER_LEN,
    CHUNK_CRC_FMT,
    CHUNK_CRC_LEN,
    PNG_MAX_CHUNK_LEN,
)

_HEADER = struct.Struct(CHUNK_HEADER_FMT)
_CRC = struct.Struct(CHUNK_CRC_FMT)


class Chunk(NamedTuple):
    offset: int  # Offset of the length field
    type: bytes
    data: bytes
    crc: int  # As stored, not recomputed

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def end(self) -> int:
        return self.offset + CHUNK_HEADER_LEN + len(self.data) + CHUNK_CRC_LEN

    def crc_ok(self) -> bool:
        return crc32(self.data, crc32(self.type)) == self.crc


def build_chunk(chunk_type: bytes, data: bytes) -> bytes:
    """Serialize (type, data) into a complete chunk record."""
    if len(chunk_type) != 4:
        raise ValueError(f"Chunk type must be 4 bytes, got {chunk_type!r}")
    crc = crc32(data, crc32(chunk_type))
    return _HEADER.pack(len(data), bytes(chunk_type)) + bytes(data) + _CRC.pack(crc)


def check_signature(stream: bytes) -> None:
    if bytes(stream[: len(PNG_SIGNATURE)]) != PNG_SIGNATURE:
        raise NotAPng("Not a valid PNG (bad signature)")


def iter_chunks(stream: bytes, strict: bool = False) -> Iterator[Chunk]:
    """Yield chunks in file order, ending with IEND.

    CRCs are only verified when strict is set; the first bad one raises
    CrcMismatch. Running out of bytes before IEND raises UnexpectedEnd.
    """
    check_signature(stream)

    pos = len(PNG_SIGNATURE)
    total = len(stream)
    while True:
        if pos == total:
            raise UnexpectedEnd(f"Stream ended at offset {pos} without an IEND chunk")
        if pos + CHUNK_HEADER_LEN > total:
            raise UnexpectedEnd(f"Truncated chunk header at offset {pos}")

        length, chunk_type = _HEADER.unpack_from(stream, pos)
        if length > PNG_MAX_CHUNK_LEN:
            raise UnexpectedEnd(f"Chunk length {length} at offset {pos} exceeds PNG limit")

        data_start = pos + CHUNK_HEADER_LEN
        data_end = data_start + length
        if data_end + CHUNK_CRC_LEN > total:
            raise UnexpectedEnd(
                f"Chunk {chunk_type!r} at offset {pos} declares {length} bytes past end of stream"
            )

        (crc,) = _CRC.unpack_from(stream, data_end)
        chunk = Chunk(pos, chunk_type, bytes(stream[data_start:data_end]), crc)
        if strict and not chunk.crc_ok():
            raise CrcMismatch(f"CRC mismatch in chunk {chunk_type!r} at offset {pos}", offset=pos)

        yield chunk

        if chunk_type == CHUNK_END:
            return
        pos = data_end + CHUNK_CRC_LEN


def find_terminal(stream: bytes, strict: bool = False) -> int:
    """Return the offset of the IEND length field."""
    for chunk in iter_chunks(stream, strict=strict):
        if chunk.type == CHUNK_END:
            return chunk.offset
    # iter_chunks only returns normally after yielding IEND
    raise UnexpectedEnd("No IEND chunk")
