# stage_format.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Tuple

from dsp_stages import coerce_stage
from dsp_types import FilterStage, InputStage, MixerStage, OutputStage


UNKNOWN = "Unknown"


@dataclass(frozen=True)
class StageText:
    header_text: str
    detail_lines: Tuple[str, ...]


def format_number(v: Any) -> str:
    if v is None:
        return "?"
    if isinstance(v, bool):
        return str(v).lower()
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def pluralize(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def _filter_details(stage: FilterStage) -> List[str]:
    lines = [stage.name]
    ftype = stage.spec.type
    params = stage.spec.parameters

    if ftype == "Biquad":
        lines.append(str(params.get("type") or ftype))
        if params.get("freq") is not None:
            lines.append(f"{format_number(params['freq'])} Hz")
        # zero gain is a defined value and is shown
        if params.get("gain") is not None:
            lines.append(f"{format_number(params['gain'])} dB")
    elif ftype == "Gain":
        lines.append(f"Gain: {format_number(params.get('gain'))} dB")
    elif ftype == "Conv":
        lines.append("Convolution")
    else:
        lines.append(ftype or UNKNOWN)
    return lines


def format_stage(stage: Any) -> StageText:
    s = coerce_stage(stage)

    if isinstance(s, (InputStage, OutputStage)):
        return StageText(s.type.upper(), (s.device, s.format))
    if isinstance(s, MixerStage):
        return StageText("MIXER", (pluralize(len(s.sources), "source"),))
    if isinstance(s, FilterStage):
        return StageText("FILTER", tuple(_filter_details(s)))

    header = s.type.upper() if s.type else UNKNOWN.upper()
    return StageText(header, (UNKNOWN,))
