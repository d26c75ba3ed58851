"""Tape Loop - factory preset envelopes."""
from __future__ import annotations

from datetime import datetime, timezone

from tape_core.envelope import Choice, EngineState, StateEnvelope, StoryBeat, TapeMeta
from tape_core.protocol import TAPE_VERSION

ANIMATION_STYLES = {
    "claymation": "in the style of stop-motion claymation, Aardman animation style, miniature scale, depth of field, cinematic lighting",
    "vintage_anime": "in the style of 1990s anime, cel shaded, hand drawn, high contrast, retro aesthetic, grain, dynamic camera angles",
    "pixel_art": "pixel art style, 16-bit graphics, SNES aesthetic, vibrant colors, dithered shading, active animation",
    "vhs_horror": "found footage style, vhs glitch effect, photorealistic, dark atmosphere, grainy texture, low fidelity, analog horror, shaky cam",
    "cinematic_3d": "unreal engine 5 render, hyper-realistic, ray tracing, 8k, cinematic lighting, highly detailed textures, motion blur",
    "noir": "black and white film noir style, high contrast, dramatic shadows, film grain, 1940s cinema look, atmospheric motion",
}

FACTORY_STATUS = "FACTORY PRESET LOADED"
UNKNOWN_AUTHOR = "Anonymous"

FACTORY_CHOICES = (
    ("1", "Step into the light"),
    ("2", "Check the pockets"),
    ("3", "Yell into the void"),
    ("4", "Sit and wait"),
)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def factory_preset(
    label: str,
    *,
    created_at: str | None = None,
    style: str | None = None,
    rules: str | None = None,
    instruction: str | None = None,
    video_template: str | None = None,
    author: str | None = None,
) -> StateEnvelope:
    """Build the opening envelope for a fresh tape starring label."""
    if style is not None and style not in ANIMATION_STYLES:
        raise ValueError(f"Unknown visual style {style!r}")

    if created_at is None:
        created_at = utc_timestamp()

    history = [
        f"The story begins with {label}.",
        "Static fills the screen, then clears to reveal a strange new world.",
    ]
    if rules or author:
        context = f"SERIES CONTEXT:\nTitle: {label}\nAuthor: {author or UNKNOWN_AUTHOR}"
        if rules:
            context += f"\n\nGAME RULES:\n{rules}"
        history.insert(0, context)

    hint = f"A stop-motion clay figure of {label} standing in a surreal, misty void. Cinematic lighting, 8k."
    if style is not None:
        hint = f"{hint} {ANIMATION_STYLES[style]}"

    meta = TapeMeta(
        version=TAPE_VERSION,
        label=label,
        created_at=created_at,
        style_override=style,
        ruleset_override=rules,
        instruction_override=instruction,
        video_template_override=video_template,
        author=author,
    )
    state = EngineState(
        history=history,
        current_beat=StoryBeat(
            narrative=f"{label} stands at the edge of a void. The tape loop has just begun.",
            generation_hint=hint,
            choices=[Choice(id=i, text=t) for i, t in FACTORY_CHOICES],
        ),
        status_label=FACTORY_STATUS,
    )
    return StateEnvelope(meta=meta, engine_state=state)

