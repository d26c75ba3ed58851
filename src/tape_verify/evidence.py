from __future__ import annotations

import hashlib
from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from tape_core.cartridge import split_text
from tape_core.chunks import iter_chunks
from tape_core.protocol import CHUNK_TEXT

from .const import STATUS_CRC_MISMATCH, STATUS_VERIFIED

EVIDENCE_SCHEMA = pa.schema(
    [
        ("offset", pa.int64()),
        ("type", pa.string()),
        ("length", pa.int64()),
        ("crc", pa.int64()),
        ("status", pa.string()),
        ("keyword", pa.string()),
        ("content_hash", pa.string()),
    ]
)


def chunk_evidence(data: bytes) -> list[dict]:
    """One row per chunk, in file order, with its stored CRC checked."""
    rows: list[dict] = []
    for chunk in iter_chunks(data):
        keyword = None
        if chunk.type == CHUNK_TEXT:
            parts = split_text(chunk.data)
            if parts is not None:
                keyword = parts[0].decode("latin-1")

        rows.append(
            {
                "offset": int(chunk.offset),
                "type": chunk.type.decode("latin-1"),
                "length": int(chunk.length),
                "crc": int(chunk.crc),
                "status": STATUS_VERIFIED if chunk.crc_ok() else STATUS_CRC_MISMATCH,
                "keyword": keyword,
                "content_hash": hashlib.sha256(chunk.data).hexdigest(),
            }
        )
    return rows


def write_evidence(rows: list[dict], out_path: Path) -> None:
    """Write evidence rows as Parquet."""
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(rows, columns=EVIDENCE_SCHEMA.names)
    table = pa.Table.from_pandas(df, schema=EVIDENCE_SCHEMA, preserve_index=False)
    pq.write_table(table, out_path)
