import sys
from pathlib import Path

from tape_core.cartridge import iter_text_chunks
from tape_core.protocol import CHUNK_HEADER_LEN, TAPE_KEYWORD

LABEL_FIELD = b'"characterName":"'

def main():
    if len(sys.argv) != 2:
        print("Usage: corrupt_one_byte.py <tape.png>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    b = bytearray(p.read_bytes())

    tape = next((c for c, key, _ in iter_text_chunks(bytes(b)) if key == TAPE_KEYWORD), None)
    if tape is None:
        print("No tape chunk to corrupt.")
        raise SystemExit(2)

    # Flip a bit in the first character of the label. The JSON still parses
    # and the stored CRC is left alone, so only strict verification notices.
    data_start = tape.offset + CHUNK_HEADER_LEN
    pos = tape.data.find(LABEL_FIELD)
    if pos == -1:
        print("Tape has no label to corrupt.")
        raise SystemExit(2)
    idx = data_start + pos + len(LABEL_FIELD)
    b[idx] ^= 0x01
    p.write_bytes(bytes(b))
    print(f"Corrupted 1 byte at offset {idx} in {p}")

if __name__ == "__main__":
    main()
