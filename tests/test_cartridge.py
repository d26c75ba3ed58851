"""Tests for cartridge embed and extract."""

import pytest

from tape_core.cartridge import embed, extract, iter_text_chunks, strip
from tape_core.chunks import iter_chunks
from tape_core.errors import CorruptPayload, CrcMismatch, NoTerminalChunk, NotAPng, PayloadNotFound, UnexpectedEnd
from tape_core.protocol import TAPE_KEYWORD


PAYLOADS = [
    {"meta": {"version": "2.1", "characterName": "Zed"}, "engineState": {"history": [], "currentBeat": None}},
    {"history": ["a", "b"], "currentBeat": None},
    {"unicode": "café ☃ \U0001f4fc", "nested": {"list": [1, 2.5, True, None]}},
    [1, "two", {"three": 3}],
    "just a string",
    {},
]


class TestRoundTrip:
    @pytest.mark.parametrize("payload", PAYLOADS)
    def test_extract_returns_payload(self, png_1x1, payload):
        assert extract(embed(png_1x1, payload)) == payload

    def test_reference_scenario(self, png_1x1, sample_envelope):
        tape = embed(png_1x1, sample_envelope)
        assert extract(tape) == sample_envelope

    def test_with_unrelated_text(self, png_with_text, sample_envelope):
        assert extract(embed(png_with_text, sample_envelope)) == sample_envelope

    def test_compact_utf8_json(self, png_1x1):
        tape = embed(png_1x1, {"a": [1, 2], "b": "é"})
        chunk, key, value = next(iter_text_chunks(tape))
        assert key == TAPE_KEYWORD
        assert value == '{"a":[1,2],"b":"é"}'.encode("utf-8")

    def test_idempotent_extract(self, png_1x1, sample_envelope):
        tape = embed(png_1x1, sample_envelope)
        first = extract(tape)
        first["meta"]["characterName"] = "Changed"
        assert extract(tape) == sample_envelope


class TestCarrierIntegrity:
    def test_inserted_before_iend(self, png_1x1, sample_envelope):
        tape = embed(png_1x1, sample_envelope)
        iend = len(png_1x1) - 12
        assert tape[:iend] == png_1x1[:iend]
        assert tape[-12:] == png_1x1[-12:]

        types = [c.type for c in iter_chunks(tape)]
        assert types == [b"IHDR", b"IDAT", b"tEXt", b"IEND"]

    def test_other_chunks_byte_identical(self, png_with_text, sample_envelope):
        tape = embed(png_with_text, sample_envelope)
        before = [(c.type, c.data, c.crc) for c in iter_chunks(png_with_text)]
        after = [(c.type, c.data, c.crc) for c in iter_chunks(tape)]
        assert len(after) == len(before) + 1
        assert after[:-2] == before[:-1]
        assert after[-1] == before[-1]

    def test_new_chunk_crc_valid(self, png_1x1, sample_envelope):
        tape = embed(png_1x1, sample_envelope)
        assert all(c.crc_ok() for c in iter_chunks(tape, strict=True))

    def test_input_not_mutated(self, png_1x1, sample_envelope):
        carrier = bytearray(png_1x1)
        embed(carrier, sample_envelope)
        assert bytes(carrier) == png_1x1

    def test_image_still_decodes(self, png_1x1, sample_envelope):
        Image = pytest.importorskip("PIL.Image")
        import io

        tape = embed(png_1x1, sample_envelope)
        with Image.open(io.BytesIO(tape)) as img:
            assert img.size == (1, 1)
            assert img.getpixel((0, 0)) == (255, 0, 0, 255)


class TestRejection:
    @pytest.mark.parametrize("data", [b"", b"GIF89a....", b"\xff\xd8\xff\xe0 jpeg"])
    def test_not_png(self, data, sample_envelope):
        with pytest.raises(NotAPng):
            embed(data, sample_envelope)
        with pytest.raises(NotAPng):
            extract(data)

    def test_no_iend(self, png_1x1, sample_envelope):
        with pytest.raises(NoTerminalChunk):
            embed(png_1x1[:-12], sample_envelope)

    def test_no_iend_bad_length(self, png_1x1, sample_envelope):
        broken = png_1x1[:8] + (99999).to_bytes(4, "big") + png_1x1[12:]
        with pytest.raises(NoTerminalChunk):
            embed(broken, sample_envelope)

    def test_strict_embed_rejects_bad_carrier(self, png_factory, chunk_factory, sample_envelope):
        carrier = png_factory(chunk_factory(b"tIME", b"\x07\xea\x0a\x13\x00\x00\x00", crc=1))
        assert extract(embed(carrier, sample_envelope)) == sample_envelope
        with pytest.raises(CrcMismatch):
            embed(carrier, sample_envelope, strict=True)

    def test_unserializable_payload(self, png_1x1):
        with pytest.raises(TypeError):
            embed(png_1x1, {"when": object()})
        with pytest.raises(ValueError):
            embed(png_1x1, {"x": float("nan")})


class TestExtract:
    def test_plain_png(self, png_1x1):
        with pytest.raises(PayloadNotFound):
            extract(png_1x1)

    def test_keyword_isolation(self, png_with_text):
        with pytest.raises(PayloadNotFound):
            extract(png_with_text)

    def test_keyword_prefix_not_enough(self, png_factory, chunk_factory):
        png = png_factory(chunk_factory(b"tEXt", b"LIVING_TV_DATA_OLD\x00{}"))
        with pytest.raises(PayloadNotFound):
            extract(png)

    def test_other_chunk_type_ignored(self, png_factory, chunk_factory):
        png = png_factory(chunk_factory(b"zTXt", b"LIVING_TV_DATA\x00{}"))
        with pytest.raises(PayloadNotFound):
            extract(png)

    def test_bad_json(self, png_factory, chunk_factory):
        png = png_factory(chunk_factory(b"tEXt", b"LIVING_TV_DATA\x00{not json"))
        with pytest.raises(CorruptPayload):
            extract(png)

    def test_bad_utf8(self, png_factory, chunk_factory):
        png = png_factory(chunk_factory(b"tEXt", b'LIVING_TV_DATA\x00"\xff\xfe"'))
        with pytest.raises(CorruptPayload):
            extract(png)

    @pytest.mark.parametrize("constant", [b"NaN", b"Infinity", b"-Infinity"])
    def test_non_standard_constant(self, png_factory, chunk_factory, constant):
        png = png_factory(chunk_factory(b"tEXt", b"LIVING_TV_DATA\x00{\"x\":" + constant + b"}"))
        with pytest.raises(CorruptPayload):
            extract(png)

    def test_nesting_too_deep(self, png_factory, chunk_factory):
        png = png_factory(chunk_factory(b"tEXt", b"LIVING_TV_DATA\x00" + b"[" * 200000 + b"]" * 200000))
        with pytest.raises(CorruptPayload):
            extract(png)

    def test_first_match_wins(self, png_1x1):
        tape = embed(embed(png_1x1, {"n": 1}), {"n": 2})
        assert extract(tape) == {"n": 1}

    def test_match_before_truncation(self, png_1x1):
        tape = embed(png_1x1, {"n": 1})
        assert extract(tape[:-12]) == {"n": 1}

    def test_truncated_without_match(self, png_1x1):
        with pytest.raises(UnexpectedEnd):
            extract(png_1x1[:-12])

    def test_custom_keyword(self, png_1x1):
        tape = embed(png_1x1, {"x": 1}, keyword=b"OTHER_APP")
        with pytest.raises(PayloadNotFound):
            extract(tape)
        assert extract(tape, keyword=b"OTHER_APP") == {"x": 1}

    def test_lenient_crc(self, png_1x1, sample_envelope):
        tape = bytearray(embed(png_1x1, sample_envelope))
        tape[-13] ^= 0xFF  # last byte of the tape chunk's CRC
        assert extract(bytes(tape)) == sample_envelope
        with pytest.raises(CrcMismatch):
            extract(bytes(tape), strict=True)


class TestStrip:
    def test_restores_carrier(self, png_with_text, sample_envelope):
        assert strip(embed(png_with_text, sample_envelope)) == png_with_text

    def test_removes_every_copy(self, png_1x1):
        tape = embed(embed(png_1x1, {"n": 1}), {"n": 2})
        assert strip(tape) == png_1x1

    def test_restamp(self, png_1x1):
        tape = embed(strip(embed(png_1x1, {"n": 1})), {"n": 2})
        assert extract(tape) == {"n": 2}

    def test_nothing_to_strip(self, png_with_text):
        assert strip(png_with_text) == png_with_text
