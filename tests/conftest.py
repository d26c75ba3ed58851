import struct
import zlib

import pytest

SIGNATURE = b"\x89PNG\r\n\x1a\n"


def raw_chunk(chunk_type: bytes, data: bytes, crc: int | None = None) -> bytes:
    """Chunk record built with zlib, independent of the codec under test."""
    if crc is None:
        crc = zlib.crc32(chunk_type + data) & 0xFFFFFFFF
    return struct.pack(">I4s", len(data), chunk_type) + data + struct.pack(">I", crc)


def make_png(*extra_before_idat: bytes) -> bytes:
    """1x1 RGBA image, one red pixel."""
    ihdr = struct.pack(">IIBBBBB", 1, 1, 8, 6, 0, 0, 0)
    idat = zlib.compress(b"\x00\xff\x00\x00\xff")
    return (
        SIGNATURE
        + raw_chunk(b"IHDR", ihdr)
        + b"".join(extra_before_idat)
        + raw_chunk(b"IDAT", idat)
        + raw_chunk(b"IEND", b"")
    )


@pytest.fixture
def png_1x1():
    return make_png()


@pytest.fixture
def png_with_text():
    """Carrier that already has unrelated third-party text metadata."""
    return make_png(raw_chunk(b"tEXt", b"Software\x00Paint 3000"), raw_chunk(b"tEXt", b"no separator here"))


@pytest.fixture
def sample_envelope():
    return {
        "meta": {"version": "1.0", "characterName": "Test"},
        "engineState": {"history": ["hello"], "currentBeat": None},
    }


@pytest.fixture
def carrier_file(tmp_path, png_1x1):
    p = tmp_path / "carrier.png"
    p.write_bytes(png_1x1)
    return p


@pytest.fixture
def chunk_factory():
    return raw_chunk


@pytest.fixture
def png_factory():
    return make_png
