"""Tape Loop - session state envelope.

Tapes in circulation come in two shapes:

    {"meta": {...}, "engineState": {...}}    versioned (1.0 and later)
    {"history": [...], "currentBeat": ...}   legacy, engine state only

classify() tells them apart once, normalize() turns either into a
StateEnvelope. Wire keys are camelCase as written by earlier releases; the
snake_case spelling of a key is accepted wherever the camelCase one is
missing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .protocol import LEGACY_VERSION, UNKNOWN_LABEL

# (attribute, wire key, snake_case alias)
_META_FIELDS = (
    ("version", "version", "version"),
    ("label", "characterName", "label"),
    ("created_at", "createdAt", "created_at"),
    ("style_override", "visualStyle", "style_override"),
    ("ruleset_override", "gameRules", "ruleset_override"),
    ("instruction_override", "systemInstruction", "instruction_override"),
    ("video_template_override", "videoPromptTemplate", "video_template_override"),
    ("author", "author", "author"),
)

_STATE_FIELDS = (
    ("history", "history", "history"),
    ("current_beat", "currentBeat", "current_beat"),
    ("status_label", "loadingStage", "status_label"),
)

_BEAT_FIELDS = (
    ("narrative", "narrative", "narrative"),
    ("generation_hint", "visualPrompt", "generation_hint"),
    ("choices", "choices", "choices"),
)

_CHOICE_FIELDS = (
    ("id", "id", "id"),
    ("text", "text", "text"),
)


def _pick(d: Mapping, key: str, alias: str, default: Any = None) -> Any:
    if key in d:
        return d[key]
    return d.get(alias, default)


def _extra(d: Mapping, fields: tuple) -> dict:
    known = {k for _, wire, alias in fields for k in (wire, alias)}
    return {k: v for k, v in d.items() if k not in known}


def _require_mapping(value: Any, what: str) -> Mapping:
    if not isinstance(value, Mapping):
        raise TypeError(f"{what} must be a JSON object, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Choice:
    id: Any
    text: str
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping) -> "Choice":
        d = _require_mapping(d, "choice")
        return cls(id=d.get("id", ""), text=d.get("text", ""), extra=_extra(d, _CHOICE_FIELDS))

    def to_dict(self) -> dict:
        out = dict(self.extra)
        out["id"] = self.id
        out["text"] = self.text
        return out


@dataclass(frozen=True)
class StoryBeat:
    narrative: str = ""
    generation_hint: str = ""
    choices: list[Choice] = field(default_factory=list)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping) -> "StoryBeat":
        d = _require_mapping(d, "currentBeat")
        choices = d.get("choices") or []
        if not isinstance(choices, list):
            raise TypeError("currentBeat.choices must be a list")
        return cls(
            narrative=d.get("narrative") or "",
            generation_hint=_pick(d, "visualPrompt", "generation_hint", "") or "",
            choices=[Choice.from_dict(c) for c in choices],
            extra=_extra(d, _BEAT_FIELDS),
        )

    def to_dict(self) -> dict:
        out = dict(self.extra)
        out["narrative"] = self.narrative
        out["visualPrompt"] = self.generation_hint
        out["choices"] = [c.to_dict() for c in self.choices]
        return out


@dataclass(frozen=True)
class EngineState:
    history: list[str] = field(default_factory=list)
    current_beat: StoryBeat | None = None
    status_label: str | None = None
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping) -> "EngineState":
        d = _require_mapping(d, "engineState")
        history = _pick(d, "history", "history")
        if history is None:
            history = []
        if not isinstance(history, list):
            raise TypeError("engineState.history must be a list")
        beat = _pick(d, "currentBeat", "current_beat")
        return cls(
            history=list(history),
            current_beat=StoryBeat.from_dict(beat) if beat is not None else None,
            status_label=_pick(d, "loadingStage", "status_label"),
            extra=_extra(d, _STATE_FIELDS),
        )

    def to_dict(self) -> dict:
        out = dict(self.extra)
        out["history"] = list(self.history)
        out["currentBeat"] = self.current_beat.to_dict() if self.current_beat else None
        if self.status_label is not None:
            out["loadingStage"] = self.status_label
        return out


@dataclass(frozen=True)
class TapeMeta:
    version: str = LEGACY_VERSION
    label: str = UNKNOWN_LABEL
    created_at: str | None = None
    style_override: str | None = None
    ruleset_override: str | None = None
    instruction_override: str | None = None
    video_template_override: str | None = None
    author: str | None = None
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping | None) -> "TapeMeta":
        if d is None:
            return cls()
        d = _require_mapping(d, "meta")
        values = {attr: _pick(d, wire, alias) for attr, wire, alias in _META_FIELDS}
        # Missing or null sub-fields fall back to the dataclass defaults
        values = {k: v for k, v in values.items() if v is not None}
        return cls(extra=_extra(d, _META_FIELDS), **values)

    def to_dict(self) -> dict:
        out = dict(self.extra)
        for attr, wire, _ in _META_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                out[wire] = value
        return out


@dataclass(frozen=True)
class StateEnvelope:
    meta: TapeMeta
    engine_state: EngineState

    def to_dict(self) -> dict:
        return {"meta": self.meta.to_dict(), "engineState": self.engine_state.to_dict()}


@dataclass(frozen=True)
class VersionedTape:
    meta: Mapping | None
    engine_state: Mapping


@dataclass(frozen=True)
class LegacyTape:
    engine_state: Mapping


def classify(value: Any) -> VersionedTape | LegacyTape:
    """Decide which shape a decoded payload has."""
    value = _require_mapping(value, "tape payload")
    if "engineState" in value or "engine_state" in value:
        return VersionedTape(meta=value.get("meta"), engine_state=_pick(value, "engineState", "engine_state"))
    return LegacyTape(engine_state=value)


def normalize(value: Any) -> StateEnvelope:
    """Turn any decoded tape payload into a StateEnvelope."""
    tape = classify(value)
    if isinstance(tape, VersionedTape):
        return StateEnvelope(meta=TapeMeta.from_dict(tape.meta), engine_state=EngineState.from_dict(tape.engine_state))
    return StateEnvelope(
        meta=TapeMeta(version=LEGACY_VERSION, label=UNKNOWN_LABEL),
        engine_state=EngineState.from_dict(tape.engine_state),
    )
