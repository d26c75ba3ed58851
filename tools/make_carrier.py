"""Generate a plain carrier PNG for tape experiments.

    python tools/make_carrier.py OUT.png [--size WxH] [--color RRGGBB]
"""
import struct
import sys
import zlib
from pathlib import Path

from tape_core.chunks import build_chunk
from tape_core.protocol import PNG_SIGNATURE


def make_carrier(width: int = 64, height: int = 48, rgb: tuple = (32, 32, 32)) -> bytes:
    """Solid 8-bit RGB image, one IDAT."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    row = b"\x00" + bytes(rgb) * width  # filter type 0
    idat = zlib.compress(row * height)
    return (
        PNG_SIGNATURE
        + build_chunk(b"IHDR", ihdr)
        + build_chunk(b"IDAT", idat)
        + build_chunk(b"IEND", b"")
    )


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if a]

    def pop_option(arg_list: list[str], name: str, default: str) -> tuple[str, list[str]]:
        """Remove `name VALUE` from an argv-style list."""
        if name not in arg_list:
            return default, arg_list
        i = arg_list.index(name)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{name} requires a value")
        return arg_list[i + 1], arg_list[:i] + arg_list[i + 2:]

    size, args = pop_option(args, "--size", "64x48")
    color, args = pop_option(args, "--color", "202020")

    out = Path(args[0] if args else "carrier.png")
    w, h = (int(v) for v in size.lower().split("x"))
    rgb = tuple(bytes.fromhex(color))

    out.write_bytes(make_carrier(w, h, rgb))
    print(f"GENERATED: {out} ({w}x{h})")
