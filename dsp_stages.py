# dsp_stages.py
from __future__ import annotations

import logging
from typing import Any, Mapping, Tuple

from dsp_errors import MalformedStageError
from dsp_types import (
    FilterSpec,
    FilterStage,
    InputStage,
    MixerStage,
    OutputStage,
    Stage,
    UnknownStage,
)


logger = logging.getLogger(__name__)

_TAGGED = (InputStage, OutputStage, MixerStage, FilterStage, UnknownStage)


def _text(v: Any) -> str:
    return "" if v is None else str(v)


def _device_fields(raw: Mapping[str, Any]) -> Tuple[str, str]:
    dev = raw.get("device")
    if not isinstance(dev, Mapping):
        raise MalformedStageError(f"{raw.get('type')} stage has no device mapping")
    name = dev.get("device") or dev.get("filename") or dev.get("type") or ""
    return _text(name), _text(dev.get("format"))


def _mixer_sources(raw: Mapping[str, Any]) -> Tuple[int, ...]:
    sources = raw.get("sources")
    if sources is None:
        return ()
    if not isinstance(sources, (list, tuple)):
        raise MalformedStageError("mixer sources is not a list")
    out = []
    for s in sources:
        # CamillaDSP mapping entries are {channel, gain, inverted}; plain ints are accepted too.
        ch = s.get("channel") if isinstance(s, Mapping) else s
        try:
            out.append(int(ch))
        except (TypeError, ValueError):
            out.append(-1)
    return tuple(out)


def filter_name_of(raw: Mapping[str, Any]) -> str:
    """
    I find the filter's display name: the one key that is not "type".
    Raises MalformedStageError when there is none.
    """
    for k in raw.keys():
        if k != "type":
            return str(k)
    raise MalformedStageError("filter stage has no named filter key")


def filter_stage(name: str, body: Any) -> FilterStage:
    """Build a tagged filter stage from its display name and definition."""
    if not isinstance(body, Mapping):
        raise MalformedStageError(f"filter {name!r} is not a mapping")
    params = body.get("parameters") or {}
    if not isinstance(params, Mapping):
        raise MalformedStageError(f"filter {name!r} parameters is not a mapping")
    spec = FilterSpec(type=_text(body.get("type")), parameters=dict(params))
    return FilterStage(name=name, spec=spec)


def _filter_stage(raw: Mapping[str, Any]) -> FilterStage:
    name = filter_name_of(raw)
    return filter_stage(name, raw.get(name))


def parse_stage(raw: Mapping[str, Any]) -> Stage:
    if not isinstance(raw, Mapping):
        raise MalformedStageError(f"stage is not a mapping: {raw!r}")

    t = _text(raw.get("type")).strip().lower()
    if t == "input":
        device, fmt = _device_fields(raw)
        return InputStage(device=device, format=fmt)
    if t == "output":
        device, fmt = _device_fields(raw)
        return OutputStage(device=device, format=fmt)
    if t == "mixer":
        return MixerStage(sources=_mixer_sources(raw), name=_text(raw.get("name")))
    if t == "filter":
        return _filter_stage(raw)

    raise MalformedStageError(f"unknown stage type {raw.get('type')!r}")


def coerce_stage(raw: Any) -> Stage:
    """
    Like parse_stage, but never raises: stages that cannot be classified
    become UnknownStage so the rest of the lane still renders.
    """
    if isinstance(raw, _TAGGED):
        return raw
    try:
        return parse_stage(raw)
    except MalformedStageError as e:
        t = _text(raw.get("type")) if isinstance(raw, Mapping) else ""
        logger.warning("Unclassified stage rendered as Unknown: %s", e)
        return UnknownStage(type=t.strip().lower(), reason=str(e))


def stage_type_of(stage: Stage) -> str:
    return stage.type or "unknown"

