from pathlib import Path
from warnings import warn

from tape_core.cartridge import extract, iter_text_chunks
from tape_core.chunks import iter_chunks
from tape_core.envelope import LegacyTape, StateEnvelope, classify, normalize
from tape_core.errors import TapeError
from tape_core.protocol import TAPE_KEYWORD
from .const import ERRORS

def _fail(errors: list, code: str, **detail) -> dict:
    errors.append({"code": code, "message": ERRORS[code], **detail})
    return {"status":"FAIL","error_count":len(errors),"errors":errors}

def summarize(envelope: StateEnvelope, legacy: bool = False) -> dict:
    beat = envelope.engine_state.current_beat
    return {
        "version": envelope.meta.version,
        "label": envelope.meta.label,
        "legacy": legacy,
        "history_len": len(envelope.engine_state.history),
        "choices": len(beat.choices) if beat else 0,
        "status_label": envelope.engine_state.status_label,
    }

def verify_tape(data: bytes, strict: bool = False) -> dict:
    errors = []

    try:
        chunks = list(iter_chunks(data))
    except TapeError as e:
        return _fail(errors, e.code, detail=str(e))

    for c in chunks:
        if c.crc_ok():
            continue
        if strict:
            return _fail(errors, "E_CRC_MISMATCH", chunk=c.type.decode("latin-1"), offset=c.offset)
        warn(f"CRC mismatch in chunk {c.type!r} at offset {c.offset}")

    tapes = [c for c, key, _ in iter_text_chunks(data) if key == TAPE_KEYWORD]
    if len(tapes) > 1:
        warn(f"{len(tapes)} tape chunks found; only the one at offset {tapes[0].offset} is read")

    try:
        payload = extract(data)
    except TapeError as e:
        return _fail(errors, e.code, detail=str(e))

    try:
        tape = classify(payload)
        envelope = normalize(payload)
    except TypeError as e:
        return _fail(errors, "E_ENVELOPE", detail=str(e))

    return {"status":"PASS","error_count":0,"errors":[],"tape":summarize(envelope, isinstance(tape, LegacyTape))}

def verify_tape_file(path: Path, strict: bool = False) -> dict:
    result = verify_tape(Path(path).read_bytes(), strict=strict)
    result["path"] = str(path)
    return result
