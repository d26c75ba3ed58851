"""Tape cartridge protocol constants.

Single source of truth for on-disk magic values and chunk layouts.
Keep this file stable. Factory, player and verifier must remain synchronized.
"""

# PNG container
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
CHUNK_TEXT = b"tEXt"  # Human-text ancillary chunk
CHUNK_END  = b"IEND"  # Terminal chunk

# Chunk: [Length(4) | Type(4) | Data(Length) | CRC(4)], big-endian
CHUNK_HEADER_FMT = ">I4s"
CHUNK_HEADER_LEN = 8
CHUNK_CRC_FMT = ">I"
CHUNK_CRC_LEN = 4

# PNG caps a length field at 2^31 - 1
PNG_MAX_CHUNK_LEN = 2**31 - 1

# Reversed CRC-32 polynomial used by PNG
PNG_CRC_POLY = 0xEDB88320

# tEXt data: [Keyword | 0x00 | UTF-8 JSON]
# Never change the keyword; every exported tape depends on it.
TAPE_KEYWORD = b"LIVING_TV_DATA"
TEXT_SEPARATOR = b"\x00"

# Envelope versions
TAPE_VERSION = "2.1"
LEGACY_VERSION = "0.0"  # Payloads written before the meta wrapper existed
UNKNOWN_LABEL = "Unknown"

JSON_DUMP_KW = {"separators": (",", ":"), "ensure_ascii": False, "allow_nan": False}
