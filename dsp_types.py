# dsp_types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union


@dataclass(frozen=True)
class InputStage:
    device: str
    format: str
    type: str = "input"


@dataclass(frozen=True)
class OutputStage:
    device: str
    format: str
    type: str = "output"


@dataclass(frozen=True)
class MixerStage:
    sources: Tuple[int, ...]
    name: str = ""
    type: str = "mixer"


@dataclass(frozen=True)
class FilterSpec:
    type: str                 # "Biquad" | "Gain" | "Conv" | anything else
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FilterStage:
    name: str
    spec: FilterSpec
    type: str = "filter"


@dataclass(frozen=True)
class UnknownStage:
    type: str    # raw type as found in the config, "" if missing
    reason: str = ""


Stage = Union[InputStage, OutputStage, MixerStage, FilterStage, UnknownStage]
ChannelConfig = List[Stage]
