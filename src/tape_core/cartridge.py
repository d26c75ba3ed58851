"""Tape Loop - cartridge embed and extract.

A cartridge is an ordinary PNG with one extra tEXt chunk, inserted right
before IEND, whose keyword is TAPE_KEYWORD and whose text is the session
state as UTF-8 JSON. Image viewers skip the chunk; pixels are never touched.
"""
from __future__ import annotations

import json
from typing import Any, Iterator

from .chunks import Chunk, build_chunk, check_signature, find_terminal, iter_chunks
from .errors import CorruptPayload, NoTerminalChunk, PayloadNotFound, UnexpectedEnd
from .protocol import CHUNK_TEXT, JSON_DUMP_KW, TAPE_KEYWORD, TEXT_SEPARATOR


def encode_payload(payload: Any) -> bytes:
    return json.dumps(payload, **JSON_DUMP_KW).encode("utf-8")


def split_text(data: bytes) -> tuple[bytes, bytes] | None:
    """Split tEXt data at the first null byte. None if there is no separator."""
    sep = data.find(TEXT_SEPARATOR)
    if sep == -1:
        return None
    return data[:sep], data[sep + 1:]


def iter_text_chunks(stream: bytes, strict: bool = False) -> Iterator[tuple[Chunk, bytes, bytes]]:
    """Yield (chunk, keyword, value) for every tEXt chunk with a separator."""
    for chunk in iter_chunks(stream, strict=strict):
        if chunk.type != CHUNK_TEXT:
            continue
        parts = split_text(chunk.data)
        if parts is None:
            continue
        yield chunk, parts[0], parts[1]


def embed(carrier: bytes, payload: Any, *, keyword: bytes = TAPE_KEYWORD, strict: bool = False) -> bytes:
    """Return a copy of carrier with payload stored in a new tEXt chunk before IEND."""
    check_signature(carrier)

    new_chunk = build_chunk(CHUNK_TEXT, keyword + TEXT_SEPARATOR + encode_payload(payload))

    try:
        iend = find_terminal(carrier, strict=strict)
    except UnexpectedEnd as e:
        raise NoTerminalChunk(f"IEND chunk not found: {e}") from e

    return bytes(carrier[:iend]) + new_chunk + bytes(carrier[iend:])


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def extract(stream: bytes, *, keyword: bytes = TAPE_KEYWORD, strict: bool = False) -> Any:
    """Return the decoded JSON payload of the first chunk tagged with keyword."""
    for chunk, key, value in iter_text_chunks(stream, strict=strict):
        if key != keyword:
            continue
        try:
            return json.loads(value.decode("utf-8"), parse_constant=_reject_constant)
        except (UnicodeDecodeError, ValueError, RecursionError) as e:
            raise CorruptPayload(f"Tape chunk at offset {chunk.offset} is not valid JSON: {e}") from e

    raise PayloadNotFound("No Tape Data found on this image.")


def strip(stream: bytes, *, keyword: bytes = TAPE_KEYWORD) -> bytes:
    """Return stream without any tEXt chunk tagged with keyword."""
    out = bytearray()
    pos = 0
    for chunk, key, _ in iter_text_chunks(stream):
        if key == keyword:
            out += stream[pos:chunk.offset]
            pos = chunk.end
    out += stream[pos:]
    return bytes(out)
