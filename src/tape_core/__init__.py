"""Tape Loop Core - PNG cartridge codec and session envelope."""
from .cartridge import embed, extract, strip
from .chunks import Chunk, build_chunk, iter_chunks
from .crc import crc32
from .envelope import StateEnvelope, classify, normalize
from .errors import (
    TapeError,
    FormatError,
    NotAPng,
    BadSignature,
    UnexpectedEnd,
    CrcMismatch,
    NoTerminalChunk,
    PayloadNotFound,
    CorruptPayload,
)

__all__ = [
    "embed", "extract", "strip",
    "Chunk", "build_chunk", "iter_chunks",
    "crc32",
    "StateEnvelope", "classify", "normalize",
    "TapeError", "FormatError", "NotAPng", "BadSignature", "UnexpectedEnd",
    "CrcMismatch", "NoTerminalChunk", "PayloadNotFound", "CorruptPayload",
]
