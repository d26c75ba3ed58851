"""Show where a tape left off - the current beat and its choices."""
from __future__ import annotations

import sys
from pathlib import Path

from tape_core import extract, normalize


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python play.py <tape.png>")
        sys.exit(1)

    envelope = normalize(extract(Path(sys.argv[1]).read_bytes()))
    meta, state = envelope.meta, envelope.engine_state

    print(f"--- {meta.label} (tape v{meta.version}) ---")
    if meta.style_override:
        print(f"Style: {meta.style_override}")
    print(f"Episodes so far: {len(state.history)}\n")

    beat = state.current_beat
    if beat is None:
        print("Nothing queued. The screen is static.")
        return

    print(beat.narrative)
    print()
    for choice in beat.choices:
        print(f"  [{choice.id}] {choice.text}")


if __name__ == "__main__":
    main()
