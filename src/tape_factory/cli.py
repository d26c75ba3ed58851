"""Tape Loop - Tape Factory.

Stamps a factory-preset session into a carrier PNG:

    tape-factory cover.png "Captain Clay" captain.png --style claymation
"""
from __future__ import annotations

from pathlib import Path

import click

from tape_core.cartridge import embed, strip
from tape_core.errors import TapeError
from tape_factory.presets import ANIMATION_STYLES, factory_preset


def make_tape(
    carrier_path: Path,
    label: str,
    out_path: Path,
    *,
    replace: bool = False,
    created_at: str | None = None,
    **overrides: str | None,
) -> bytes:
    """Embed a factory preset for label into carrier_path and write out_path."""
    print(f"Processing Tape: {label}...")

    carrier = Path(carrier_path).read_bytes()
    if replace:
        carrier = strip(carrier)

    envelope = factory_preset(label, created_at=created_at, **overrides)
    tape = embed(carrier, envelope.to_dict())

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(tape)

    print(f"PASS: Tape created at {out_path}")
    print(f"  Size: {len(tape) / 1024:.2f} KB")
    return tape


@click.command()
@click.argument("carrier", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("label")
@click.argument("out", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--style", type=click.Choice(sorted(ANIMATION_STYLES)), help="Visual style the player should switch to")
@click.option("--rules", help="Game rules stored with the tape")
@click.option("--instruction", help="Custom narrative system instruction")
@click.option("--video-template", help="Custom video prompt template ({{style}}, {{visual}})")
@click.option("--author", help="Author credited in the series context")
@click.option("--timestamp", help="Fixed createdAt value for reproducible tapes")
@click.option("--replace", is_flag=True, help="Drop tape data already present in the carrier")
def main(
    carrier: Path,
    label: str,
    out: Path,
    style: str | None,
    rules: str | None,
    instruction: str | None,
    video_template: str | None,
    author: str | None,
    timestamp: str | None,
    replace: bool,
) -> None:
    """Write a factory-preset tape for LABEL from CARRIER into OUT."""
    try:
        make_tape(
            carrier,
            label,
            out,
            replace=replace,
            created_at=timestamp,
            style=style,
            rules=rules,
            instruction=instruction,
            video_template=video_template,
            author=author,
        )
    except (TapeError, OSError) as e:
        # Fail closed with a single-line reason.
        print(f"FATAL: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
